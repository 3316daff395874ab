"""
IR (Intermediate Representation) node definitions.

These nodes represent the resolved contract, ready for the printers: data
classes with their properties, and message handlers with their bindings.
All names are resolved and all types are target type names.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any


class SchemaDialect(Enum):
    """Schema dialect a data class was resolved from."""

    STRUCTURAL = "structural"  # JSON Schema
    RECORD = "record"  # Avro


class PropertyKind(Enum):
    """Semantic kind of a data class property."""

    PRIMITIVE = "primitive"  # String, Integer, java.time.*, ...
    ARRAY = "array"  # List<T> or T[]
    MAP = "map"  # Map<String, V>
    ENUM = "enum"  # Enum class generated for the property
    OBJECT = "object"  # Reference to another data class
    ANY = "any"  # Object


class HandlerKind(Enum):
    """Handler archetypes."""

    SUPPLIER = "Supplier"  # Emits messages on a fixed destination
    CONSUMER = "Consumer"  # Receives messages
    FUNCTION = "Function"  # Receives and emits (paired by custom name)
    SEND = "Send"  # Publishes to a parameterized destination on demand


@dataclass
class ModelClassInfo:
    """Naming and inheritance metadata for one schema."""

    original_name: str = ""
    class_name: str = ""
    super_class_name: str | None = None
    namespace: str | None = None
    can_be_nested: bool = True


@dataclass
class ModelProperty:
    """A property of a data class."""

    name: str = ""  # Original property name
    identifier: str = ""  # Escaped identifier (camelCase, reserved words prefixed)
    kind: PropertyKind = PropertyKind.PRIMITIVE
    type_name: str = "Object"
    is_required: bool = False
    description: str | None = None
    format: str | None = None

    # Numeric bounds
    minimum: float | None = None
    maximum: float | None = None

    # For enums
    enum_values: list[Any] = field(default_factory=list)
    enum_constants: list[str] = field(default_factory=list)
    enum_class_name: str | None = None

    # For arrays and maps: the element/value type
    item_type: str | None = None

    schema_id: str | None = None

    # Nested class for anonymous objects or arrays of anonymous objects
    nested_schema: ModelSchema | None = None


@dataclass
class ModelSchema:
    """One generated data class."""

    name: str = ""  # Original contract name
    class_name: str = ""
    namespace: str | None = None
    package_path: str | None = None
    properties: list[ModelProperty] = field(default_factory=list)
    super_class_name: str | None = None

    # Standalone classes get their own file; others may be nested in a parent
    is_standalone: bool = True

    dialect: SchemaDialect = SchemaDialect.STRUCTURAL

    # Whether any property identifier differs from its original name
    needs_identifier_escaping: bool = False

    schema_id: str | None = None
    title: str | None = None
    description: str | None = None

    @property
    def qualified_name(self) -> str:
        return f"{self.namespace}.{self.class_name}" if self.namespace else self.class_name


@dataclass
class ChannelParameter:
    """A destination parameter of a handler."""

    name: str = ""
    identifier: str = ""  # Method argument name
    type_name: str = "String"
    is_required: bool = True

    # Index of the placeholder among the channel path segments (-1 if absent)
    position: int = -1

    enum_values: list[Any] = field(default_factory=list)
    has_enum: bool = False
    schema_type: str | None = None
    schema_format: str | None = None


@dataclass
class QueueInfo:
    """A durable queue and the topics subscribed to it."""

    queue_name: str = ""
    topic_subscriptions: list[str] = field(default_factory=list)


@dataclass
class Handler:
    """A message handler derived from a channel operation."""

    name: str = ""
    kind: HandlerKind = HandlerKind.CONSUMER
    channel_name: str = ""
    operation_id: str | None = None

    # Payload types: input for Consumer/Function, output for Supplier/Send/Function
    input_payload: str | None = None
    output_payload: str | None = None

    # Parameterized destination
    dynamic: bool = False

    # Destinations
    publish_destination: str | None = None  # printf template, e.g. orders/%s
    subscribe_destination: str | None = None  # wildcarded, e.g. orders/*
    binding_destination: str | None = None  # x-scs-destination or channel name
    input_destination: str | None = None  # Function handlers
    output_destination: str | None = None  # Function handlers

    # Durable queue binding
    queue_name: str | None = None
    topic_subscriptions: list[str] = field(default_factory=list)
    group: str | None = None

    parameters: list[ChannelParameter] = field(default_factory=list)
    has_enum_parameters: bool = False

    # Messages
    message_name: str | None = None
    message_names: list[str] = field(default_factory=list)
    is_multi_message: bool = False
    multi_message_comment: str | None = None

    # x-scs-function-name of the operation
    custom_name: str | None = None

    # Send handlers: invocation signature
    send_method_name: str | None = None
    function_param_list: str = ""
    function_arg_list: str = ""

    # Configuration echoes
    reactive: bool = False
    dynamic_type: str = "streamBridge"
    parameters_to_headers: bool = False

    @property
    def is_producer(self) -> bool:
        return self.kind in (HandlerKind.SUPPLIER, HandlerKind.SEND)

    @property
    def payload(self) -> str | None:
        """The payload the handler is typed by (output for producers)."""
        return self.output_payload if self.is_producer else self.input_payload


@dataclass
class IR:
    """The complete Intermediate Representation of one contract."""

    title: str = ""
    version: str = ""

    # Resolved direction view and target package
    view: str = "provider"
    package_name: str | None = None

    # Data classes, superclasses before subclasses
    schemas: list[ModelSchema] = field(default_factory=list)

    # Handlers, consolidated and grouped
    handlers: list[Handler] = field(default_factory=list)

    # Fully qualified types the application must import
    cross_reference_imports: list[str] = field(default_factory=list)

    # Feature flags for the application printer (need_function, need_message, ...)
    extra_includes: dict[str, bool] = field(default_factory=dict)

    # Flattened binding configuration (dotted keys)
    application_properties: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert the IR to a JSON-ready dictionary."""
        return _to_plain(self)

    def find_handler(self, name: str) -> Handler | None:
        return next((handler for handler in self.handlers if handler.name == name), None)

    def find_schema(self, class_name: str) -> ModelSchema | None:
        return next((schema for schema in self.schemas if schema.class_name == class_name), None)


def _to_plain(value: Any) -> Any:
    """Recursively convert dataclasses and enums into plain containers."""
    if isinstance(value, Enum):
        return value.value
    if hasattr(value, "__dataclass_fields__"):
        return {f.name: _to_plain(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, dict):
        return {str(k): _to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_plain(v) for v in value]
    return value
