"""
Schema model resolver for the record (Avro) dialect.

Record schemas carry their own namespace, so every record becomes a data
class in a package derived from it. Field types are mapped with the Avro
tables of the type mapping module.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from ...utils import PLACEHOLDER_CLASS_NAME, strip_package_name, to_identifier
from ..contract.nodes import Contract, SchemaNode
from .context import ResolverContext
from .ir_nodes import ModelClassInfo, ModelProperty, ModelSchema, PropertyKind, SchemaDialect
from .schema_resolver import normalize_enum_constant
from .type_mapping import (
    AVRO_LOGICAL_TYPES,
    AVRO_PRIMITIVES,
    OBJECT_TYPE,
    collapse_union,
    is_long_range,
    map_of,
    resolve_avro_type,
)

logger = logging.getLogger(__name__)


def avro_class_name(name: str | None) -> str:
    """
    Class name of a record or field name.

    Examples:
        "user_signed_up" -> "UserSignedUp"
        "orderLine" -> "OrderLine"
    """
    if not name:
        return PLACEHOLDER_CLASS_NAME
    parts = [part for part in re.split(r"[_\s]+", str(name)) if part]
    return "".join(part[:1].upper() + part[1:] for part in parts) or PLACEHOLDER_CLASS_NAME


class AvroSchemaResolver:
    """Resolves record payloads of Avro messages into data classes."""

    def __init__(self, context: ResolverContext):
        self.context = context

    def _record_nodes(self, contract: Contract) -> list[SchemaNode]:
        """Component records first, then the first message payload of each operation."""
        nodes = [node for node in contract.component_schemas.values() if node.is_avro]
        for message in contract.component_messages.values():
            if message.payload is not None and message.payload.is_avro:
                nodes.append(message.payload)
        for channel in contract.channels:
            for operation in channel.operations:
                if not operation.messages:
                    continue
                payload = operation.messages[0].payload
                if payload is not None and payload.is_avro:
                    nodes.append(payload)
        return nodes

    def resolve(self, contract: Contract) -> list[ModelSchema]:
        """
        Build a data class for every record schema of the contract.

        Args:
            contract: The parsed contract

        Returns:
            Record data classes in discovery order, one per record id
        """
        results: list[ModelSchema] = []
        seen: set[str] = set()
        for node in self._record_nodes(contract):
            key = node.schema_id or ""
            if key in seen:
                continue
            seen.add(key)
            results.append(self.classify(node))

        if results:
            logger.debug("Resolved %d data class(es) from record schemas", len(results))
        return results

    def classify(self, node: SchemaNode) -> ModelSchema:
        """
        Build the data class of one record.

        Args:
            node: A record node (is_avro set, raw field list)

        Returns:
            ModelSchema of the record dialect
        """
        name, namespace = node.name, node.namespace
        if not name:
            name, id_namespace = strip_package_name(node.schema_id)
            namespace = namespace or id_namespace
        full_name = f"{namespace}.{name}" if namespace else name
        class_name = avro_class_name(name)

        self.context.register_avro_class(full_name, class_name, namespace)
        self.context.class_infos[full_name] = ModelClassInfo(
            original_name=full_name, class_name=class_name, namespace=namespace, can_be_nested=False
        )

        properties = self._build_fields(node.fields, namespace, {full_name})
        return ModelSchema(
            name=full_name,
            class_name=class_name,
            namespace=namespace,
            package_path=namespace.replace(".", "/") if namespace else None,
            properties=properties,
            is_standalone=True,
            dialect=SchemaDialect.RECORD,
            needs_identifier_escaping=any(prop.identifier != prop.name for prop in properties),
            schema_id=node.schema_id,
            title=node.title,
            description=node.description,
        )

    def _build_fields(self, fields: list[Any], namespace: str | None, visiting: set[str]) -> list[ModelProperty]:
        properties = []
        for avro_field in fields:
            if not isinstance(avro_field, dict) or not avro_field.get("name"):
                logger.warning("Skipping record field without a name: %r", avro_field)
                continue
            properties.append(self.build_field(avro_field, namespace, visiting))
        return properties

    def build_field(self, avro_field: dict[str, Any], namespace: str | None, visiting: set[str]) -> ModelProperty:
        """
        Map one record field to a property.

        Args:
            avro_field: The raw field ({"name": ..., "type": ...})
            namespace: Namespace of the enclosing record
            visiting: Full names of the records currently being resolved

        Returns:
            The resolved ModelProperty
        """
        name = str(avro_field["name"])
        prop = ModelProperty(
            name=name,
            identifier=to_identifier(name),
            is_required=True,
            description=avro_field.get("doc"),
            minimum=avro_field.get("minimum"),
            maximum=avro_field.get("maximum"),
        )

        field_type = avro_field.get("type")
        if isinstance(field_type, list):
            branch, required = collapse_union(field_type)
            prop.is_required = required
            if branch is None:
                prop.kind = PropertyKind.ANY
                prop.type_name = OBJECT_TYPE
                return prop
            field_type = branch

        logical_type = avro_field.get("logicalType")
        if isinstance(field_type, str) and logical_type in AVRO_LOGICAL_TYPES:
            prop.type_name = AVRO_LOGICAL_TYPES[logical_type]
            prop.format = logical_type
            return prop

        self._apply_type(prop, field_type, avro_field, namespace, visiting)
        return prop

    def _apply_type(
        self, prop: ModelProperty, avro_type: Any, owner: dict[str, Any], namespace: str | None, visiting: set[str]
    ) -> None:
        """Set kind and type name of a property from an Avro type."""
        if isinstance(avro_type, list):
            branch, _required = collapse_union(avro_type)
            if branch is None:
                prop.kind = PropertyKind.ANY
                prop.type_name = OBJECT_TYPE
                return
            avro_type = branch

        if isinstance(avro_type, str):
            lowered = avro_type.lower()
            if lowered in ("int", "integer") and is_long_range(owner.get("minimum"), owner.get("maximum")):
                prop.type_name = "Long"
            elif lowered in AVRO_PRIMITIVES:
                prop.type_name = AVRO_PRIMITIVES[lowered]
                if prop.type_name == OBJECT_TYPE:
                    prop.kind = PropertyKind.ANY
            else:
                # Reference to a named type declared elsewhere
                prop.kind = PropertyKind.OBJECT
                prop.type_name = avro_class_name(strip_package_name(avro_type)[0])
            return

        if not isinstance(avro_type, dict):
            prop.kind = PropertyKind.ANY
            prop.type_name = OBJECT_TYPE
            return

        logical_type = avro_type.get("logicalType")
        if logical_type in AVRO_LOGICAL_TYPES:
            prop.type_name = AVRO_LOGICAL_TYPES[logical_type]
            prop.format = logical_type
            return

        base_type = avro_type.get("type")
        if base_type == "array":
            prop.kind = PropertyKind.ARRAY
            prop.item_type = self._element_type(prop, avro_type.get("items"), namespace, visiting)
            prop.type_name = f"{prop.item_type}[]"
        elif base_type == "map" or (base_type == "object" and isinstance(avro_type.get("additionalProperties"), dict)):
            prop.kind = PropertyKind.MAP
            values = avro_type.get("values", avro_type.get("additionalProperties"))
            prop.item_type = self._element_type(prop, values, namespace, visiting)
            prop.type_name = map_of(prop.item_type)
        elif base_type == "enum" or (base_type == "string" and isinstance(avro_type.get("enum"), list)):
            symbols = avro_type.get("symbols") or avro_type.get("enum") or []
            prop.kind = PropertyKind.ENUM
            prop.enum_values = list(symbols)
            prop.enum_constants = [normalize_enum_constant(symbol) for symbol in symbols]
            prop.enum_class_name = avro_class_name(prop.name)
            prop.type_name = prop.enum_class_name
        elif base_type == "record":
            prop.kind = PropertyKind.OBJECT
            prop.type_name = avro_class_name(avro_type.get("name") or prop.name)
            prop.nested_schema = self._nested_record(avro_type, prop.type_name, namespace, visiting)
        elif base_type in ("fixed", "bytes"):
            prop.type_name = "byte[]"
        elif base_type is not None:
            self._apply_type(prop, base_type, avro_type, namespace, visiting)
        else:
            prop.kind = PropertyKind.ANY
            prop.type_name = resolve_avro_type(avro_type)

    def _element_type(self, owner: ModelProperty, avro_type: Any, namespace: str | None, visiting: set[str]) -> str:
        """Type of an array item or map value, reusing the owner's name for nested classes."""
        if avro_type is None:
            return OBJECT_TYPE
        element = ModelProperty(name=owner.name, identifier=owner.identifier)
        self._apply_type(element, avro_type, avro_type if isinstance(avro_type, dict) else {}, namespace, visiting)
        if element.nested_schema is not None:
            owner.nested_schema = element.nested_schema
        return element.type_name

    def _nested_record(
        self, raw: dict[str, Any], class_name: str, namespace: str | None, visiting: set[str]
    ) -> ModelSchema | None:
        """Resolve an inline record; None when it is already being resolved."""
        record_namespace = raw.get("namespace") or namespace
        record_name = raw.get("name") or class_name
        full_name = f"{record_namespace}.{record_name}" if record_namespace else record_name
        if full_name in visiting:
            logger.debug("Record %s is already being resolved, referencing it as %s", full_name, class_name)
            return None

        self.context.register_avro_class(full_name, class_name, record_namespace)
        visiting.add(full_name)
        try:
            properties = self._build_fields(list(raw.get("fields") or []), record_namespace, visiting)
        finally:
            visiting.discard(full_name)

        return ModelSchema(
            name=full_name,
            class_name=class_name,
            namespace=record_namespace,
            package_path=record_namespace.replace(".", "/") if record_namespace else None,
            properties=properties,
            is_standalone=False,
            dialect=SchemaDialect.RECORD,
            needs_identifier_escaping=any(prop.identifier != prop.name for prop in properties),
            description=raw.get("doc"),
        )
