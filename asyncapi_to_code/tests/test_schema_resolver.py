#!/usr/bin/env python3

from pathlib import Path
from unittest import TestCase

import pytest

from asyncapi_to_code.pipeline.analyzer.context import ResolverContext
from asyncapi_to_code.pipeline.analyzer.ir_nodes import PropertyKind, SchemaDialect
from asyncapi_to_code.pipeline.analyzer.schema_resolver import (
    SchemaModelResolver,
    is_basic_type_schema,
    normalize_enum_constant,
)
from asyncapi_to_code.pipeline.contract import Contract, ContractParser, SchemaNode, load_contract

CONTRACTS = Path(__file__).parent / "test_data" / "contracts"


def resolve_contract(contract):
    context = ResolverContext()
    resolver = SchemaModelResolver(context)
    resolver.resolve(contract)
    return context, resolver.classify_all(contract)


def properties_by_name(schema):
    return {prop.name: prop for prop in schema.properties}


class TestOrderSchemas(TestCase):
    """Test class and property resolution of a JSON Schema contract"""

    def setUp(self):
        self.context, self.schemas = resolve_contract(load_contract(CONTRACTS / "orders.yaml"))
        self.by_class = {schema.class_name: schema for schema in self.schemas}

    def test_standalone_classes_in_declaration_order(self):
        self.assertEqual(
            [schema.class_name for schema in self.schemas],
            ["OrderPlaced", "Customer", "OrderStatus", "LedgerEntry", "LedgerCommand", "EmailSent", "SmsSent"],
        )
        for schema in self.schemas:
            self.assertTrue(schema.is_standalone)
            self.assertEqual(schema.dialect, SchemaDialect.STRUCTURAL)

    def test_primitive_alias_is_not_a_class(self):
        self.assertNotIn("Region", self.by_class)
        # Still registered so that references resolve to its name
        self.assertEqual(self.context.class_name_for("Region"), "Region")

    def test_primitive_properties(self):
        props = properties_by_name(self.by_class["OrderPlaced"])
        self.assertEqual(props["orderId"].type_name, "String")
        self.assertTrue(props["orderId"].is_required)
        self.assertEqual(props["amount"].type_name, "java.math.BigDecimal")
        self.assertEqual(props["placedAt"].type_name, "java.time.OffsetDateTime")
        self.assertFalse(props["placedAt"].is_required)
        self.assertEqual(list(props), ["orderId", "amount", "placedAt", "region", "items", "customer", "class"])

    def test_referenced_enum(self):
        region = properties_by_name(self.by_class["OrderPlaced"])["region"]
        self.assertEqual(region.kind, PropertyKind.ENUM)
        self.assertEqual(region.enum_class_name, "Region")
        self.assertEqual(region.enum_values, ["eu-west", "us east"])
        self.assertEqual(region.enum_constants, ["EU_WEST", "US_EAST"])

    def test_inline_enum_is_named_after_property(self):
        status = properties_by_name(self.by_class["OrderStatus"])["status"]
        self.assertEqual(status.kind, PropertyKind.ENUM)
        self.assertEqual(status.enum_class_name, "Status")
        self.assertEqual(status.enum_constants, ["CREATED", "UPDATED"])

    def test_array_of_anonymous_objects_gets_nested_class(self):
        items = properties_by_name(self.by_class["OrderPlaced"])["items"]
        self.assertEqual(items.kind, PropertyKind.ARRAY)
        self.assertEqual(items.type_name, "List<Items>")
        self.assertEqual(items.item_type, "Items")
        self.assertIsNotNone(items.nested_schema)
        self.assertFalse(items.nested_schema.is_standalone)
        self.assertEqual([prop.name for prop in items.nested_schema.properties], ["sku", "quantity"])
        self.assertEqual(items.nested_schema.properties[1].type_name, "Integer")

    def test_reference_to_other_class(self):
        customer = properties_by_name(self.by_class["OrderPlaced"])["customer"]
        self.assertEqual(customer.kind, PropertyKind.OBJECT)
        self.assertEqual(customer.type_name, "Customer")
        self.assertIsNone(customer.nested_schema)

    def test_reserved_word_identifier(self):
        schema = self.by_class["OrderPlaced"]
        self.assertEqual(properties_by_name(schema)["class"].identifier, "_class")
        self.assertTrue(schema.needs_identifier_escaping)
        self.assertFalse(self.by_class["Customer"].needs_identifier_escaping)


class TestInheritance(TestCase):
    """Test allOf inheritance edges"""

    def setUp(self):
        self.contract = load_contract(CONTRACTS / "inheritance.yaml")

    def test_inheritance_edge(self):
        with self.assertLogs("asyncapi_to_code.pipeline.analyzer.schema_resolver", level="WARNING") as logs:
            context, schemas = resolve_contract(self.contract)

        self.assertEqual(context.super_class_map["Car"], "Vehicle")
        aliases = context.anonymous_to_subclass
        self.assertEqual(list(aliases.values()), ["Car"])
        anonymous_member = next(iter(aliases))
        self.assertTrue(anonymous_member.startswith("<anonymous-schema-"))
        self.assertEqual(context.super_class_map[anonymous_member], "Vehicle")
        self.assertEqual(context.lookup(anonymous_member).class_name, "Car")

        # Only Garage (two named members) has an unresolved composition
        self.assertEqual(len(logs.records), 1)
        self.assertIn("Garage", logs.output[0])

    def test_superclass_comes_first_and_keeps_inherited_properties(self):
        _context, schemas = resolve_contract(self.contract)
        names = [schema.class_name for schema in schemas]
        self.assertLess(names.index("Vehicle"), names.index("Car"))

        car = next(schema for schema in schemas if schema.class_name == "Car")
        self.assertEqual(car.super_class_name, "Vehicle")
        self.assertEqual([prop.name for prop in car.properties], ["brand"])
        self.assertTrue(car.properties[0].is_required)

    def test_unresolved_composition_flattens_members(self):
        _context, schemas = resolve_contract(self.contract)
        garage = next(schema for schema in schemas if schema.class_name == "Garage")
        self.assertIsNone(garage.super_class_name)
        props = properties_by_name(garage)
        self.assertEqual(list(props), ["id", "wheels"])
        self.assertTrue(props["id"].is_required)


class TestNestedStructures(TestCase):
    """Test arrays, maps, unions and recursive schemas"""

    def setUp(self):
        _context, schemas = resolve_contract(load_contract(CONTRACTS / "nested_arrays.yaml"))
        self.schemas = {schema.class_name: schema for schema in schemas}
        self.catalog = properties_by_name(self.schemas["Catalog"])

    def test_nested_arrays_of_objects(self):
        products = self.catalog["products"]
        self.assertEqual(products.type_name, "List<Products>")
        prices = properties_by_name(products.nested_schema)["prices"]
        self.assertEqual(prices.type_name, "List<Prices>")
        self.assertEqual(properties_by_name(prices.nested_schema)["value"].type_name, "Float")

    def test_array_of_arrays(self):
        self.assertEqual(self.catalog["matrix"].type_name, "List<List<Integer>>")

    def test_array_without_items(self):
        self.assertEqual(self.catalog["tags"].type_name, "List<Object>")

    def test_map(self):
        metadata = self.catalog["metadata"]
        self.assertEqual(metadata.kind, PropertyKind.MAP)
        self.assertEqual(metadata.type_name, "Map<String, String>")

    def test_anonymous_object_property(self):
        owner = self.catalog["owner"]
        self.assertEqual(owner.type_name, "Owner")
        self.assertEqual(owner.nested_schema.class_name, "Owner")

    def test_untyped_property(self):
        self.assertEqual(self.catalog["anything"].kind, PropertyKind.ANY)
        self.assertEqual(self.catalog["anything"].type_name, "Object")

    def test_unions(self):
        self.assertEqual(self.catalog["nickname"].type_name, "String")
        self.assertFalse(self.catalog["nickname"].is_required)
        self.assertEqual(self.catalog["mixed"].type_name, "Object")
        self.assertTrue(self.catalog["mixed"].is_required)

    def test_recursive_schema(self):
        children = properties_by_name(self.schemas["TreeNode"])["children"]
        self.assertEqual(children.type_name, "List<TreeNode>")
        self.assertEqual(self.catalog["tree"].type_name, "TreeNode")


class TestAnonymousPayloads(TestCase):
    """Test classes named after the messages carrying anonymous payloads"""

    def test_anonymous_payload_named_after_message(self):
        context, schemas = resolve_contract(load_contract(CONTRACTS / "queues.yaml"))
        self.assertEqual([schema.class_name for schema in schemas], ["OrderCreated", "OrderCancelled"])
        self.assertEqual(schemas[0].name, "OrderCreated")
        self.assertEqual([prop.name for prop in schemas[1].properties], ["orderId", "reason"])

    def test_payload_with_id(self):
        contract = ContractParser().parse(
            {
                "channels": {
                    "invoices": {
                        "publish": {
                            "message": {
                                "name": "InvoiceIssued",
                                "payload": {
                                    "$id": "https://example.com/schemas/invoice.schema.json",
                                    "type": "object",
                                    "properties": {"total": {"type": "number"}},
                                },
                            }
                        }
                    }
                }
            }
        )
        context, schemas = resolve_contract(contract)
        self.assertEqual([schema.class_name for schema in schemas], ["Invoice"])
        payload = contract.channels[0].publish().messages[0].payload
        self.assertEqual(context.lookup(payload.schema_id).class_name, "Invoice")


class TestSchemaNaming(TestCase):
    """Test recovery of component names and class naming overrides"""

    def test_numeric_key_mapped_by_position(self):
        node = SchemaNode(schema_id="0", type="object", properties={"total": SchemaNode(type="number")})
        contract = Contract(component_schemas={0: node}, raw={"components": {"schemas": {"Invoice": {}}}})
        context, schemas = resolve_contract(contract)
        self.assertIn("Invoice", context.class_infos)
        self.assertEqual([schema.class_name for schema in schemas], ["Invoice"])
        self.assertEqual(schemas[0].properties[0].type_name, "java.math.BigDecimal")

    def test_unrecoverable_numeric_name_is_dropped(self):
        node = SchemaNode(schema_id="0", type="object", properties={"total": SchemaNode(type="number")})
        context, schemas = resolve_contract(Contract(component_schemas={0: node}))
        self.assertEqual(schemas, [])
        self.assertEqual(context.class_infos, {})

    def test_schema_name_extension_overrides_class_name(self):
        contract = ContractParser().parse(
            {
                "components": {
                    "schemas": {
                        "order_v2": {
                            "type": "object",
                            "x-ep-schema-name": "OrderV2Event",
                            "properties": {"id": {"type": "string"}},
                        }
                    }
                }
            }
        )
        _context, schemas = resolve_contract(contract)
        self.assertEqual(schemas[0].class_name, "OrderV2Event")

    def test_dotted_name_gives_namespace(self):
        contract = ContractParser().parse(
            {"components": {"schemas": {"com.acme.Invoice": {"type": "object", "properties": {"id": {"type": "string"}}}}}}
        )
        _context, schemas = resolve_contract(contract)
        self.assertEqual(schemas[0].class_name, "Invoice")
        self.assertEqual(schemas[0].namespace, "com.acme")
        self.assertEqual(schemas[0].package_path, "com/acme")
        self.assertEqual(schemas[0].qualified_name, "com.acme.Invoice")

    def test_java_package_extension_sets_namespace(self):
        contract = ContractParser().parse(
            {
                "components": {
                    "schemas": {
                        "Invoice": {
                            "type": "object",
                            "x-java-package": "com.acme.billing",
                            "properties": {"id": {"type": "string"}},
                        }
                    }
                }
            }
        )
        _context, schemas = resolve_contract(contract)
        self.assertEqual(schemas[0].class_name, "Invoice")
        self.assertEqual(schemas[0].namespace, "com.acme.billing")
        self.assertEqual(schemas[0].package_path, "com/acme/billing")

    def test_contexts_are_independent(self):
        contract = load_contract(CONTRACTS / "orders.yaml")
        first, _ = resolve_contract(contract)
        second, _ = resolve_contract(contract)
        self.assertIsNot(first.class_infos["OrderPlaced"], second.class_infos["OrderPlaced"])
        self.assertEqual(first.class_infos.keys(), second.class_infos.keys())


class TestSchemaHelpers:
    """Test the enum normalizer and the basic type detection"""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("3", "V_3"),
            (7, "V_7"),
            ("low priority", "LOW_PRIORITY"),
            ("in-app", "IN_APP"),
            ("creditCard", "creditCard"),
        ],
    )
    def test_normalize_enum_constant(self, value, expected):
        assert normalize_enum_constant(value) == expected

    def test_is_basic_type_schema(self):
        assert is_basic_type_schema(SchemaNode(schema_id="Region", type="string", enum=["a"]))
        assert is_basic_type_schema(SchemaNode(schema_id="Empty", type="object"))
        assert is_basic_type_schema(SchemaNode(schema_id="<anonymous-schema-1>", type="integer"))
        assert not is_basic_type_schema(
            SchemaNode(schema_id="Customer", type="object", properties={"a": SchemaNode(type="string")})
        )
        assert not is_basic_type_schema(SchemaNode(schema_id="Car", all_of=[SchemaNode(schema_id="Vehicle")]))


if __name__ == "__main__":
    pytest.main([__file__])
