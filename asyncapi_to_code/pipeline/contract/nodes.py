"""
Object model of a parsed AsyncAPI contract.

These nodes are what the resolution pipeline consumes: channels with their
parameters and operations, messages, and the schema graph. Schema nodes
reached through a $ref are shared instances, so the graph may be cyclic.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from ...utils import is_anonymous_name

PUBLISH = "publish"
SUBSCRIBE = "subscribe"


def iter_schema_properties(properties: Any) -> Iterator[tuple[str, SchemaNode]]:
    """Normalize a property collection into ordered (name, schema) pairs.

    Three shapes are accepted: a mapping of name to schema, a list of
    (name, schema) pairs, and a list of schema nodes carrying their own name.
    """
    if not properties:
        return
    if isinstance(properties, dict):
        yield from properties.items()
        return
    for entry in properties:
        if isinstance(entry, tuple) and len(entry) == 2:
            yield entry[0], entry[1]
        elif getattr(entry, "name", None):
            yield entry.name, entry


@dataclass(eq=False, repr=False)
class SchemaNode:
    """A schema of either dialect (JSON Schema or Avro record)."""

    # Identity assigned by the parser (component key, namespace.Name or <anonymous-schema-N>)
    schema_id: str | None = None

    # JSON Schema type; may be a list such as ["string", "null"]
    type: str | list[str] | None = None
    format: str | None = None
    title: str | None = None
    description: str | None = None

    # $id of the schema, if declared
    json_id: str | None = None

    # The $ref this node was reached through (None for inline schemas)
    ref: str | None = None

    # Mapping, list of pairs or list of named nodes (see iter_schema_properties)
    properties: Any = field(default_factory=dict)
    required: list[str] = field(default_factory=list)
    items: SchemaNode | None = None
    additional_properties: SchemaNode | bool | None = None

    # Composition
    all_of: list[SchemaNode] = field(default_factory=list)
    one_of: list[SchemaNode] = field(default_factory=list)
    any_of: list[SchemaNode] = field(default_factory=list)

    enum: list[Any] | None = None
    minimum: float | None = None
    maximum: float | None = None
    default: Any = None

    # x-* extensions declared on the schema
    extensions: dict[str, Any] = field(default_factory=dict)

    # Record dialect (Avro): namespace and the raw field list
    is_avro: bool = False
    name: str | None = None
    namespace: str | None = None
    fields: list[Any] = field(default_factory=list)

    # Raw document fragment and its JSON pointer
    raw: dict[str, Any] = field(default_factory=dict)
    source_path: str = ""

    def __repr__(self) -> str:
        return f"SchemaNode(schema_id={self.schema_id!r}, type={self.type!r}, source_path={self.source_path!r})"

    def extension(self, name: str, default: Any = None) -> Any:
        return self.extensions.get(name, default)

    @property
    def is_anonymous(self) -> bool:
        return not self.schema_id or is_anonymous_name(self.schema_id)

    def iter_properties(self) -> Iterator[tuple[str, SchemaNode]]:
        return iter_schema_properties(self.properties)

    def has_properties(self) -> bool:
        return next(self.iter_properties(), None) is not None

    def children(self) -> Iterator[tuple[str, SchemaNode]]:
        """Direct sub-schemas with the pointer suffix leading to them."""
        for prop_name, prop in self.iter_properties():
            yield f"/properties/{prop_name}", prop
        if isinstance(self.items, SchemaNode):
            yield "/items", self.items
        if isinstance(self.additional_properties, SchemaNode):
            yield "/additionalProperties", self.additional_properties
        for keyword, members in (("allOf", self.all_of), ("oneOf", self.one_of), ("anyOf", self.any_of)):
            for index, member in enumerate(members):
                yield f"/{keyword}/{index}", member


@dataclass
class Parameter:
    """A channel parameter and its constraining schema."""

    name: str = ""
    schema: SchemaNode | None = None
    description: str | None = None
    location: str | None = None


@dataclass
class Message:
    """A message of an operation."""

    # x-parser-message-name (component key, name, messageId or <anonymous-message-N>)
    name: str | None = None
    message_id: str | None = None
    title: str | None = None
    schema_format: str | None = None
    content_type: str | None = None
    payload: SchemaNode | None = None
    extensions: dict[str, Any] = field(default_factory=dict)

    # The $ref this message was reached through
    ref: str | None = None

    raw: dict[str, Any] = field(default_factory=dict)

    def extension(self, name: str, default: Any = None) -> Any:
        return self.extensions.get(name, default)

    @property
    def is_avro(self) -> bool:
        return bool(self.schema_format) and "avro" in self.schema_format


@dataclass
class Operation:
    """A publish or subscribe operation on a channel."""

    action: str = PUBLISH
    channel_name: str = ""
    operation_id: str | None = None
    summary: str | None = None
    messages: list[Message] = field(default_factory=list)

    # Protocol bindings keyed by protocol ("solace", "kafka", ...)
    bindings: dict[str, Any] = field(default_factory=dict)
    extensions: dict[str, Any] = field(default_factory=dict)

    def extension(self, name: str, default: Any = None) -> Any:
        return self.extensions.get(name, default)

    def binding(self, protocol: str) -> Any:
        return self.bindings.get(protocol) if isinstance(self.bindings, dict) else None

    @property
    def is_publish(self) -> bool:
        return self.action == PUBLISH


@dataclass
class Channel:
    """A channel (destination pattern) with its parameters and operations."""

    name: str = ""
    description: str | None = None
    parameters: list[Parameter] = field(default_factory=list)
    operations: list[Operation] = field(default_factory=list)
    bindings: dict[str, Any] = field(default_factory=dict)
    extensions: dict[str, Any] = field(default_factory=dict)

    def find_operation(self, action: str) -> Operation | None:
        return next((op for op in self.operations if op.action == action), None)

    def publish(self) -> Operation | None:
        return self.find_operation(PUBLISH)

    def subscribe(self) -> Operation | None:
        return self.find_operation(SUBSCRIBE)


@dataclass
class Info:
    """The contract's info block."""

    title: str = ""
    version: str = ""
    description: str | None = None
    extensions: dict[str, Any] = field(default_factory=dict)

    def extension(self, name: str, default: Any = None) -> Any:
        return self.extensions.get(name, default)


@dataclass
class Contract:
    """Root of the parsed contract."""

    asyncapi: str = ""
    info: Info = field(default_factory=Info)
    channels: list[Channel] = field(default_factory=list)

    # Component schemas keyed as the upstream model exposes them (names, or positions)
    component_schemas: dict[Any, SchemaNode] = field(default_factory=dict)
    component_messages: dict[str, Message] = field(default_factory=dict)

    # Raw document, used to recover original component names
    raw: dict[str, Any] = field(default_factory=dict)

    def raw_component_schema_keys(self) -> list[str]:
        schemas = (self.raw.get("components") or {}).get("schemas") or {}
        return list(schemas.keys()) if isinstance(schemas, dict) else []

    def raw_component_schema(self, key: str) -> dict[str, Any]:
        schemas = (self.raw.get("components") or {}).get("schemas") or {}
        value = schemas.get(key) if isinstance(schemas, dict) else None
        return value if isinstance(value, dict) else {}

    def iter_messages(self) -> Iterator[Message]:
        """Component messages first, then channel messages, each once."""
        seen: set[int] = set()
        for message in self.component_messages.values():
            if id(message) not in seen:
                seen.add(id(message))
                yield message
        for channel in self.channels:
            for operation in channel.operations:
                for message in operation.messages:
                    if id(message) not in seen:
                        seen.add(id(message))
                        yield message

    def iter_schemas(self) -> Iterator[tuple[SchemaNode, str]]:
        """Every reachable schema node once, with the pointer it was first seen at.

        Component schemas come first, then message payloads and channel
        parameter schemas; sub-schemas follow their parent depth first.
        """
        seen: set[int] = set()
        roots: list[tuple[SchemaNode, str]] = []
        for key, schema in self.component_schemas.items():
            roots.append((schema, f"#/components/schemas/{key}"))
        for index, message in enumerate(self.iter_messages()):
            if message.payload is not None:
                roots.append((message.payload, f"#/messages/{index}/payload"))
        for channel in self.channels:
            for parameter in channel.parameters:
                if parameter.schema is not None:
                    roots.append((parameter.schema, f"#/channels/{channel.name}/parameters/{parameter.name}/schema"))

        stack = list(reversed(roots))
        while stack:
            node, pointer = stack.pop()
            if id(node) in seen:
                continue
            seen.add(id(node))
            yield node, pointer
            children = list(node.children())
            for suffix, child in reversed(children):
                if id(child) not in seen:
                    stack.append((child, pointer + suffix))
