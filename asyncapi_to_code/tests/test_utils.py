#!/usr/bin/env python3

import pytest

from asyncapi_to_code.utils import (
    PLACEHOLDER_CLASS_NAME,
    fix_class_name,
    is_anonymous_name,
    is_numeric_name,
    is_reserved_word,
    strip_package_name,
    to_camel_case,
    to_consumer_bean_name,
    to_identifier,
    to_parameter_name,
    to_type_name,
    word_camel_case,
)


class TestIdentifierNormalizer:
    """Test cases for identifier utilities"""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("first_name", "firstName"),
            ("orderId", "orderId"),
            ("userID", "userId"),
            ("<anonymous-schema-1>", "anonymousSchema1"),
        ],
    )
    def test_word_camel_case(self, raw, expected):
        assert word_camel_case(raw) == expected

    def test_to_type_name(self):
        assert to_type_name("orders/{region}") == "OrdersRegion"
        assert to_type_name("order_placed") == "OrderPlaced"
        assert to_type_name("orderPlaced") == "OrderPlaced"

    def test_to_camel_case(self):
        assert to_camel_case("OrderPlaced") == "orderPlaced"
        assert to_camel_case("status-queue") == "statusQueue"

    def test_to_identifier_escapes_reserved_words(self):
        assert to_identifier("first_name") == "firstName"
        assert to_identifier("long") == "_long"
        assert to_identifier("Class") == "_class"
        assert to_identifier("null") == "_null"

    def test_is_reserved_word(self):
        assert is_reserved_word("class")
        assert is_reserved_word("True")
        assert not is_reserved_word("amount")

    def test_fix_class_name(self):
        assert fix_class_name("my_schema") == "MySchema"
        assert fix_class_name("Customer") == "Customer"

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("{transactionID}", "transactionID"),
            ("orderId", "orderId"),
            ("REGION", "region"),
            ("region", "region"),
        ],
    )
    def test_to_parameter_name(self, raw, expected):
        assert to_parameter_name(raw) == expected

    def test_to_consumer_bean_name(self):
        assert to_consumer_bean_name("status-queue") == "statusQueue"
        assert to_consumer_bean_name("coreBanking.accounts") == "coreBankingAccounts"
        assert to_consumer_bean_name("{tenant}:orders") == "tenantorders"

    def test_strip_package_name(self):
        assert strip_package_name("com.example.User") == ("User", "com.example")
        assert strip_package_name("User") == ("User", None)
        assert strip_package_name(42) == (PLACEHOLDER_CLASS_NAME, None)

    def test_anonymous_and_numeric_names(self):
        assert is_anonymous_name("<anonymous-schema-3>")
        assert not is_anonymous_name("Customer")
        assert is_numeric_name("12")
        assert is_numeric_name(0)
        assert not is_numeric_name("v12")

    def test_empty_input_is_total(self):
        for fn in (word_camel_case, to_type_name, to_camel_case, to_identifier, fix_class_name, to_parameter_name):
            assert fn(None) == ""
            assert fn("") == ""
        assert to_consumer_bean_name(None) == ""


if __name__ == "__main__":
    pytest.main([__file__])
