#!/usr/bin/env python3

import pytest

from asyncapi_to_code.pipeline.analyzer.type_mapping import (
    UNKNOWN_TYPE,
    collapse_union,
    destination_format_token,
    is_builtin_type,
    is_long_range,
    parameter_type,
    resolve_avro_type,
    resolve_primitive,
    unwrap_generic,
)


class TestTypeMapping:
    """Test cases for the type mapping table"""

    @pytest.mark.parametrize(
        "schema_type, schema_format, target, print_format",
        [
            ("string", "date", "java.time.LocalDate", "%s"),
            ("string", "date-time", "java.time.OffsetDateTime", "%s"),
            ("string", "byte", "byte[]", "%s"),
            ("string", None, "String", "%s"),
            ("integer", "int64", "Long", "%d"),
            ("integer", None, "Integer", "%d"),
            ("number", "float", "Float", "%f"),
            ("number", "double", "Double", "%f"),
            ("number", None, "java.math.BigDecimal", "%s"),
            ("boolean", None, "Boolean", "%s"),
        ],
    )
    def test_resolve_primitive(self, schema_type, schema_format, target, print_format):
        info = resolve_primitive(schema_type, schema_format)
        assert info.target_type == target
        assert info.print_format == print_format

    def test_unknown_format_falls_back_to_type_default(self):
        assert resolve_primitive("string", "uuid").target_type == "String"
        assert resolve_primitive("integer", "int16").target_type == "Integer"

    def test_unknown_type(self):
        assert resolve_primitive("geometry") == UNKNOWN_TYPE
        assert resolve_primitive(None).target_type == "Object"

    def test_destination_tokens_and_parameter_types(self):
        assert destination_format_token("integer") == "%d"
        assert destination_format_token("boolean") == "%b"
        assert destination_format_token(None) == "%s"
        assert parameter_type("number") == "Double"
        assert parameter_type("array") == "String"

    def test_collapse_union(self):
        assert collapse_union(["null", "string"]) == ("string", False)
        assert collapse_union(["string", "integer"]) == (None, True)
        assert collapse_union(["string"]) == ("string", True)

    def test_is_builtin_type(self):
        assert is_builtin_type("java.time.Instant")
        assert is_builtin_type("String[]")
        assert is_builtin_type("Message<?>")
        assert not is_builtin_type("OrderPlaced")
        assert not is_builtin_type("OrderPlaced[]")

    def test_unwrap_generic(self):
        assert unwrap_generic("List<Foo>") == "Foo"
        assert unwrap_generic("Map<String, List<Foo>>") == "Foo"
        assert unwrap_generic("Foo") == "Foo"

    def test_is_long_range(self):
        assert is_long_range(-3000000000, 10)
        assert not is_long_range(0, 100)
        assert not is_long_range(None, 5)

    def test_resolve_avro_type(self):
        assert resolve_avro_type("long") == "Long"
        assert resolve_avro_type(["null", "long"]) == "Long"
        assert resolve_avro_type(["string", "int"]) == "Object"
        assert resolve_avro_type({"type": "array", "items": "int"}) == "Integer[]"
        assert resolve_avro_type({"type": "map", "values": "double"}) == "Map<String, Double>"
        assert resolve_avro_type({"type": "string", "logicalType": "uuid"}) == "java.util.UUID"
        assert resolve_avro_type({"type": "int", "logicalType": "date"}) == "java.time.LocalDate"


if __name__ == "__main__":
    pytest.main([__file__])
