"""
Schema model resolver for the structural (JSON Schema) dialect.

Two phases:
1. resolve(): register naming metadata for every declared schema and the
   inheritance edges implied by allOf compositions.
2. classify_all(): turn every standalone schema into a ModelSchema, with
   anonymous nested objects named after the property that owns them.
"""

from __future__ import annotations

import logging
import re

from ...utils import (
    PLACEHOLDER_CLASS_NAME,
    fix_class_name,
    is_anonymous_name,
    is_numeric_name,
    strip_package_name,
    to_identifier,
    to_type_name,
)
from ..contract.nodes import Contract, SchemaNode
from .context import ResolverContext, message_class_name
from .ir_nodes import ModelClassInfo, ModelProperty, ModelSchema, PropertyKind, SchemaDialect
from .type_mapping import OBJECT_TYPE, array_of, collapse_union, is_primitive_type, map_of, resolve_primitive

logger = logging.getLogger(__name__)

# Item schema names too generic to name a class after
GENERIC_ITEM_NAMES = {"Items", "Item", "Element"}

SCHEMA_JSON_SUFFIX = ".schema.json"


def normalize_enum_constant(value) -> str:
    """
    Turn an enum literal into a valid constant name.

    Examples:
        "3" -> "V_3"
        "low priority" -> "LOW_PRIORITY"
        "in-app" -> "IN_APP"
        "creditCard" -> "creditCard"
    """
    text = str(value)
    if text.isdigit():
        return f"V_{text}"
    if " " in text or "-" in text:
        return re.sub(r"[\s-]+", "_", text).upper()
    return text


def single_type(schema_type):
    """Collapse a type list to one type; None when several concrete types remain."""
    if isinstance(schema_type, list):
        branch, _required = collapse_union(schema_type)
        return branch
    return schema_type


def is_basic_type_schema(node: SchemaNode) -> bool:
    """
    Check whether a schema is a primitive alias rather than a data class.

    Compositions are never basic. Anonymous schemas that are neither objects
    nor arrays are basic, as are primitives without properties and schemas
    carrying no structure at all.
    """
    if node.all_of or node.any_of or node.one_of:
        return False

    schema_type = single_type(node.type)
    if node.is_anonymous and schema_type not in ("object", "array"):
        return True

    properties = list(node.iter_properties())
    if schema_type in ("string", "number", "integer", "boolean") and not properties:
        return True

    if schema_type == "string" and all(is_primitive_type(single_type(prop.type)) for _name, prop in properties):
        return True

    has_nested_types = any(
        single_type(prop.type) in ("object", "array") or (prop.ref or "").startswith("#") for _name, prop in properties
    )
    return not properties and not node.required and not has_nested_types


class SchemaModelResolver:
    """Resolves JSON Schema components into class metadata and data classes."""

    def __init__(self, context: ResolverContext):
        self.context = context
        self._names_by_node: dict[int, str] = {}

    # -- naming --------------------------------------------------------------

    def recover_schema_name(self, contract: Contract, key, node: SchemaNode) -> str:
        """
        Recover the declared name of a component schema.

        The upstream object model may key components by position instead of
        by name, so the key alone is not trusted.

        Args:
            contract: The contract (its raw document holds the declared keys)
            key: The key the component is registered under
            node: The component schema

        Returns:
            x-ep-schema-name, else the raw key whose x-parser-schema-id matches,
            else the schema id when it is a raw key, else the raw key at the
            numeric position, else the key itself
        """
        ep_name = node.extension("x-ep-schema-name")
        if ep_name:
            return str(ep_name)

        raw_keys = [str(raw_key) for raw_key in contract.raw_component_schema_keys()]
        if node.schema_id:
            for raw_key in raw_keys:
                if contract.raw_component_schema(raw_key).get("x-parser-schema-id") == node.schema_id:
                    return raw_key
            if node.schema_id in raw_keys:
                return node.schema_id

        if is_numeric_name(key):
            position = int(key)
            if position < len(raw_keys):
                logger.debug("Mapped numeric schema key %s to %s by position", key, raw_keys[position])
                return raw_keys[position]

        return str(key)

    def _component_schemas(self, contract: Contract) -> list[tuple[str, SchemaNode]]:
        return [(self.recover_schema_name(contract, key, node), node) for key, node in contract.component_schemas.items()]

    def _schema_name(self, node: SchemaNode) -> str | None:
        return self._names_by_node.get(id(node)) or node.schema_id

    def _register_class(self, name: str, node: SchemaNode, can_be_nested: bool) -> ModelClassInfo:
        class_name, package = strip_package_name(name)
        ep_name = node.extension("x-ep-schema-name")
        if ep_name:
            class_name = str(ep_name)
        java_package = node.extension("x-java-package")
        if java_package:
            package = str(java_package)
        info = ModelClassInfo(
            original_name=name,
            class_name=fix_class_name(class_name) or PLACEHOLDER_CLASS_NAME,
            namespace=package,
            can_be_nested=can_be_nested,
        )
        self.context.class_infos[name] = info
        return info

    # -- phase 1 -------------------------------------------------------------

    def resolve(self, contract: Contract) -> dict[str, ModelClassInfo]:
        """
        Register naming and inheritance metadata for every declared schema.

        Args:
            contract: The parsed contract

        Returns:
            Mapping of original schema name to ModelClassInfo
        """
        components = self._component_schemas(contract)
        self._names_by_node = {id(node): name for name, node in components}

        self._register_inheritance(contract)

        for name, node in components:
            if is_numeric_name(name):
                logger.debug("Dropping numeric schema name %s as a duplicate of a declared schema", name)
                continue
            if node.is_avro:
                continue
            self.context.schemas_by_name.setdefault(name, node)
            if name not in self.context.class_infos:
                self._register_class(name, node, can_be_nested=False)

        for name, info in self.context.class_infos.items():
            base = self.context.super_class_map.get(name)
            if base and not info.super_class_name:
                info.super_class_name = self.context.class_name_for(base)

        logger.debug("Registered %d schema class name(s)", len(self.context.class_infos))
        return dict(self.context.class_infos)

    def _register_inheritance(self, contract: Contract) -> None:
        """Record an inheritance edge for each allOf of one named and one anonymous member."""
        for node, pointer in contract.iter_schemas():
            if not node.all_of or node.is_avro:
                continue
            child = self._schema_name(node) or pointer
            named = [member for member in node.all_of if not is_anonymous_name(self._schema_name(member) or "<")]
            anonymous = [member for member in node.all_of if is_anonymous_name(self._schema_name(member) or "<")]

            if len(named) != 1 or len(anonymous) != 1:
                logger.warning(
                    "Unable to resolve inheritance for %s: allOf needs exactly one named and one anonymous member "
                    "(found %d named, %d anonymous)",
                    child,
                    len(named),
                    len(anonymous),
                )
                continue

            base = self._schema_name(named[0])
            extension = self._schema_name(anonymous[0])
            self.context.super_class_map[child] = base
            self.context.super_class_map[extension] = base
            self.context.anonymous_to_subclass[extension] = child
            logger.debug("Inheritance: %s extends %s", child, base)

    # -- phase 2 -------------------------------------------------------------

    def classify_all(self, contract: Contract) -> list[ModelSchema]:
        """
        Build a ModelSchema for every standalone schema.

        Args:
            contract: The parsed contract (resolve() must have run)

        Returns:
            Data classes, superclasses before their subclasses
        """
        candidates: dict[str, SchemaNode] = {}
        seen_nodes: set[int] = set()

        def add(name: str, node: SchemaNode) -> None:
            if name in candidates or id(node) in seen_nodes:
                return
            candidates[name] = node
            seen_nodes.add(id(node))

        for name, node in self._component_schemas(contract):
            if is_numeric_name(name) or node.is_avro:
                continue
            if is_basic_type_schema(node):
                logger.debug("Skipping basic type schema %s", name)
                continue
            add(name, node)

        for node, pointer in contract.iter_schemas():
            name = node.schema_id
            if id(node) in seen_nodes or node.is_avro or not name:
                continue
            if is_anonymous_name(name) or is_numeric_name(name) or "/properties/" in pointer:
                continue
            if not is_basic_type_schema(node):
                add(name, node)

        for message in contract.iter_messages():
            payload = message.payload
            if payload is None or id(payload) in seen_nodes or payload.is_avro:
                continue
            if payload.json_id and not is_basic_type_schema(payload):
                name = self._name_for_json_id(contract, payload)
                info = self.context.lookup(name) or self._register_class(name, payload, can_be_nested=False)
                # Payload typing finds the class through the payload's own id
                self.context.class_infos.setdefault(payload.schema_id, info)
                add(name, payload)
            elif payload.is_anonymous and payload.has_properties() and single_type(payload.type) in (None, "object"):
                class_name = message_class_name(message)
                if class_name is None or any(info.class_name == class_name for info in self.context.class_infos.values()):
                    continue
                self.context.class_infos[payload.schema_id] = ModelClassInfo(
                    original_name=message.name, class_name=class_name, can_be_nested=False
                )
                add(payload.schema_id, payload)

        for name in list(candidates):
            class_name = strip_package_name(name.split("/")[-1].replace(SCHEMA_JSON_SUFFIX, ""))[0]
            if name in self.context.avro_schema_names or self.context.is_avro_class(class_name):
                logger.debug("Skipping schema %s, already resolved from a record schema", name)
                del candidates[name]

        for name, node in candidates.items():
            self.context.schemas_by_name.setdefault(name, node)

        results: list[ModelSchema] = []
        emitted: set[tuple[str | None, str]] = set()
        done: set[str] = set()

        def visit(name: str) -> None:
            if name in done:
                return
            done.add(name)
            base = self.context.super_class_map.get(name)
            if base in candidates:
                visit(base)

            schema = self.classify(candidates[name], name)
            if not schema.properties and (not schema.name or is_anonymous_name(schema.name)):
                logger.debug("Dropping anonymous schema %s without properties", name)
                return
            key = (schema.namespace, schema.class_name)
            if key in emitted:
                logger.warning("Class name %s is already used, skipping schema %s", schema.class_name, name)
                return
            emitted.add(key)
            results.append(schema)

        for name in candidates:
            visit(name)

        logger.debug("Resolved %d data class(es) from JSON schemas", len(results))
        return results

    def _name_for_json_id(self, contract: Contract, payload: SchemaNode) -> str:
        for raw_key in contract.raw_component_schema_keys():
            if contract.raw_component_schema(raw_key).get("$id") == payload.json_id:
                return str(raw_key)
        return payload.title or payload.json_id.rstrip("/").split("/")[-1].replace(SCHEMA_JSON_SUFFIX, "")

    def classify(self, node: SchemaNode, name: str) -> ModelSchema:
        """
        Build the data class of one schema.

        Args:
            node: The schema
            name: Its original name

        Returns:
            ModelSchema with properties in declaration order; inherited
            properties stay on the superclass
        """
        info = self.context.lookup(name) or self._register_class(name, node, can_be_nested=True)
        base = self.context.super_class_map.get(name)

        sources = [node]
        if node.all_of:
            if base:
                members = [member for member in node.all_of if self._schema_name(member) != base]
            else:
                members = list(node.all_of)
            sources = members + [node]

        properties = self._build_properties(sources, {id(node)})

        if not properties and node.enum:
            value = ModelProperty(name="value", identifier="value", is_required=True, description="Enum value")
            self._apply_enum(value, node, "value")
            properties.append(value)

        namespace = info.namespace
        return ModelSchema(
            name=info.original_name or name,
            class_name=info.class_name,
            namespace=namespace,
            package_path=namespace.replace(".", "/") if namespace else None,
            properties=properties,
            super_class_name=self.context.class_name_for(base) if base else None,
            is_standalone=True,
            dialect=SchemaDialect.STRUCTURAL,
            needs_identifier_escaping=any(prop.identifier != prop.name for prop in properties),
            schema_id=node.schema_id,
            title=node.title,
            description=node.description,
        )

    def _build_properties(self, sources: list[SchemaNode], visiting: set[int]) -> list[ModelProperty]:
        required: set[str] = set()
        for source in sources:
            required.update(source.required)

        properties: list[ModelProperty] = []
        seen: set[str] = set()
        for source in sources:
            for prop_name, prop in source.iter_properties():
                if prop_name in seen:
                    continue
                seen.add(prop_name)
                properties.append(self.build_property(prop_name, prop, prop_name in required, visiting))
        return properties

    # -- properties ------------------------------------------------------------

    def build_property(self, name: str, node: SchemaNode, is_required: bool, visiting: set[int]) -> ModelProperty:
        """
        Resolve one property.

        Args:
            name: Property name as declared
            node: Property schema
            is_required: Whether the owner lists the property as required
            visiting: Ids of the schema nodes currently being resolved

        Returns:
            The resolved ModelProperty
        """
        prop = ModelProperty(
            name=name,
            identifier=to_identifier(name),
            is_required=is_required,
            description=node.description,
            format=node.format,
            minimum=node.minimum,
            maximum=node.maximum,
            schema_id=node.schema_id,
        )

        schema_type = node.type
        if isinstance(schema_type, list):
            branch, required = collapse_union(schema_type)
            if branch is None:
                prop.kind = PropertyKind.ANY
                prop.type_name = OBJECT_TYPE
                prop.is_required = required
                return prop
            schema_type = branch
            if not required:
                prop.is_required = False

        union = node.one_of or node.any_of
        if union and not schema_type:
            concrete = [member for member in union if member.type != "null"]
            if len(concrete) == 1:
                resolved = self.build_property(name, concrete[0], False, visiting)
                resolved.is_required = len(concrete) == len(union) and is_required
                return resolved
            prop.kind = PropertyKind.ANY
            prop.type_name = OBJECT_TYPE
            prop.is_required = True
            return prop

        if node.enum:
            self._apply_enum(prop, node, name)
            return prop

        if schema_type == "array":
            prop.kind = PropertyKind.ARRAY
            item_type = self._element_type(node.items, name, visiting, prop) if node.items is not None else OBJECT_TYPE
            prop.item_type = item_type
            prop.type_name = array_of(item_type)
            return prop

        if is_primitive_type(schema_type):
            prop.type_name = resolve_primitive(schema_type, node.format).target_type
            return prop

        if schema_type not in (None, "object"):
            prop.kind = PropertyKind.ANY
            prop.type_name = OBJECT_TYPE
            return prop

        schema_name = self._schema_name(node)
        if schema_name and not is_anonymous_name(schema_name):
            prop.kind = PropertyKind.OBJECT
            prop.type_name = self.context.class_name_for(schema_name)
        elif node.has_properties() or node.all_of:
            prop.kind = PropertyKind.OBJECT
            prop.type_name = to_type_name(name) or PLACEHOLDER_CLASS_NAME
            prop.nested_schema = self._nested(node, prop.type_name, visiting)
        elif isinstance(node.additional_properties, SchemaNode):
            prop.kind = PropertyKind.MAP
            prop.item_type = self._element_type(node.additional_properties, name, visiting, prop)
            prop.type_name = map_of(prop.item_type)
        else:
            prop.kind = PropertyKind.ANY
            prop.type_name = OBJECT_TYPE
        return prop

    def _apply_enum(self, prop: ModelProperty, node: SchemaNode, owner_name: str) -> None:
        prop.kind = PropertyKind.ENUM
        prop.enum_values = list(node.enum or [])
        prop.enum_constants = [normalize_enum_constant(value) for value in prop.enum_values]
        schema_name = self._schema_name(node)
        if schema_name and not is_anonymous_name(schema_name):
            prop.enum_class_name = self.context.class_name_for(schema_name)
        else:
            prop.enum_class_name = to_type_name(owner_name) or PLACEHOLDER_CLASS_NAME
        prop.type_name = prop.enum_class_name

    def _element_type(self, items: SchemaNode, owner_name: str, visiting: set[int], prop: ModelProperty) -> str:
        """Type of an array element or map value, naming anonymous objects after the owner."""
        item_type = single_type(items.type)
        if is_primitive_type(item_type):
            return resolve_primitive(item_type, items.format).target_type
        if item_type == "array":
            if items.items is None:
                return array_of(OBJECT_TYPE)
            return array_of(self._element_type(items.items, owner_name, visiting, prop))
        if item_type not in (None, "object"):
            return OBJECT_TYPE

        item_name = self._schema_name(items)
        if item_name and not is_anonymous_name(item_name):
            if strip_package_name(item_name)[0] not in GENERIC_ITEM_NAMES:
                return self.context.class_name_for(item_name)
        if items.has_properties() or items.all_of:
            class_name = to_type_name(owner_name) or PLACEHOLDER_CLASS_NAME
            prop.nested_schema = self._nested(items, class_name, visiting)
            return class_name
        return OBJECT_TYPE

    def _nested(self, node: SchemaNode, class_name: str, visiting: set[int]) -> ModelSchema | None:
        """
        Resolve an anonymous object into a nested data class.

        Returns None when the node is already being resolved higher up; the
        property then refers to the class by name only.
        """
        if id(node) in visiting:
            logger.debug("Schema %s is already being resolved, referencing it as %s", node.schema_id, class_name)
            return None

        visiting.add(id(node))
        try:
            sources = list(node.all_of) + [node] if node.all_of else [node]
            properties = self._build_properties(sources, visiting)
        finally:
            visiting.discard(id(node))

        return ModelSchema(
            name=class_name,
            class_name=class_name,
            properties=properties,
            is_standalone=False,
            dialect=SchemaDialect.STRUCTURAL,
            needs_identifier_escaping=any(prop.identifier != prop.name for prop in properties),
            schema_id=node.schema_id,
            title=node.title,
            description=node.description,
        )
