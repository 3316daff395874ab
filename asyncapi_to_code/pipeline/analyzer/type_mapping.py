"""
Type mapping table.

Static lookup from contract types to target (Java) types, covering JSON
Schema (type, format) pairs, Avro primitives and logical types, containers
and unions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

OBJECT_TYPE = "Object"
STRING_TYPE = "String"
MESSAGE_TYPE = "Message<?>"

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


@dataclass(frozen=True)
class TypeInfo:
    """Target type with its printf-style format and a sample literal."""

    target_type: str = OBJECT_TYPE
    print_format: str = "%s"
    sample: str = "null"


# (type, format) -> TypeInfo; a None format is the default for the type
TYPE_MAP: dict[tuple[str, str | None], TypeInfo] = {
    ("string", "date"): TypeInfo("java.time.LocalDate", "%s", "2000-12-31"),
    ("string", "date-time"): TypeInfo("java.time.OffsetDateTime", "%s", "2000-12-31T23:59:59+01:00"),
    ("string", "byte"): TypeInfo("byte[]", "%s", "U3dhZ2dlciByb2Nrcw=="),
    ("string", "binary"): TypeInfo("byte[]", "%s", "base64-encoded file contents"),
    ("string", None): TypeInfo("String", "%s", '"string"'),
    ("integer", "int32"): TypeInfo("Integer", "%d", "1"),
    ("integer", "int64"): TypeInfo("Long", "%d", "1L"),
    ("integer", None): TypeInfo("Integer", "%d", "1"),
    ("number", "float"): TypeInfo("Float", "%f", "1.1F"),
    ("number", "double"): TypeInfo("Double", "%f", "1.1"),
    ("number", None): TypeInfo("java.math.BigDecimal", "%s", "100.1"),
    ("boolean", None): TypeInfo("Boolean", "%s", "true"),
    ("null", None): TypeInfo("String", "%s", "null"),
}

UNKNOWN_TYPE = TypeInfo(OBJECT_TYPE, "%s", "null")

# Format tokens used in publish destinations
DESTINATION_FORMAT_TOKENS = {
    "string": "%s",
    "integer": "%d",
    "number": "%f",
    "boolean": "%b",
}

PARAMETER_TYPES = {
    "string": "String",
    "integer": "Integer",
    "number": "Double",
    "boolean": "Boolean",
}

AVRO_PRIMITIVES = {
    "string": "String",
    "int": "Integer",
    "integer": "Integer",
    "long": "Long",
    "float": "Float",
    "double": "Double",
    "boolean": "Boolean",
    "bytes": "byte[]",
    "fixed": "byte[]",
    "null": OBJECT_TYPE,
    "enum": "String",
    "record": OBJECT_TYPE,
    "array": "Object[]",
    "map": "Map<String, Object>",
}

AVRO_LOGICAL_TYPES = {
    "date": "java.time.LocalDate",
    "time-millis": "java.time.LocalTime",
    "time-micros": "java.time.LocalTime",
    "timestamp-millis": "java.time.Instant",
    "timestamp-micros": "java.time.Instant",
    "local-timestamp-millis": "java.time.LocalDateTime",
    "local-timestamp-micros": "java.time.LocalDateTime",
    "uuid": "java.util.UUID",
    "decimal": "java.math.BigDecimal",
}

# Types that never need an import
BUILTIN_TYPES = {
    "String",
    "Integer",
    "Long",
    "Float",
    "Double",
    "Boolean",
    "Object",
    "Byte",
    "Short",
    "Character",
    "byte[]",
    "int",
    "long",
    "float",
    "double",
    "boolean",
    "List",
    "Map",
    "Message",
    "Message<?>",
}


def resolve_primitive(schema_type: str | None, schema_format: str | None = None) -> TypeInfo:
    """
    Resolve a JSON Schema primitive.

    Args:
        schema_type: JSON Schema type ("string", "integer", ...)
        schema_format: Optional format ("date-time", "int64", ...)

    Returns:
        The exact (type, format) entry, else the type's default entry, else
        the opaque Object type
    """
    if not schema_type:
        return UNKNOWN_TYPE
    info = TYPE_MAP.get((schema_type, schema_format))
    if info is None:
        info = TYPE_MAP.get((schema_type, None), UNKNOWN_TYPE)
    return info


def destination_format_token(schema_type: str | None) -> str:
    return DESTINATION_FORMAT_TOKENS.get(schema_type or "", "%s")


def parameter_type(schema_type: str | None) -> str:
    return PARAMETER_TYPES.get(schema_type or "", "String")


def array_of(item_type: str) -> str:
    return f"List<{item_type}>"


def map_of(value_type: str) -> str:
    return f"Map<String, {value_type}>"


def is_primitive_type(schema_type: Any) -> bool:
    return isinstance(schema_type, str) and schema_type in {"string", "integer", "number", "boolean", "null"}


def is_builtin_type(type_name: str | None) -> bool:
    if not type_name:
        return True
    if type_name in BUILTIN_TYPES or type_name.startswith("java."):
        return True
    return type_name.endswith("[]") and is_builtin_type(type_name[:-2])


def unwrap_generic(type_name: str) -> str:
    """Innermost type argument of a generic ("List<Foo>" -> "Foo", "Map<String, Foo>" -> "Foo")."""
    while "<" in type_name and type_name.endswith(">"):
        inner = type_name[type_name.index("<") + 1 : -1]
        type_name = inner.split(",")[-1].strip()
    return type_name


def collapse_union(branches: list[Any]) -> tuple[Any, bool]:
    """
    Collapse a union of types.

    Args:
        branches: The union members (type names or type objects)

    Returns:
        (branch, required): a [null, X] union gives (X, False); a union with
        more than one concrete branch gives (None, True), meaning the opaque
        Object type; a single-branch union gives (X, True)
    """
    concrete = [branch for branch in branches if branch != "null"]
    has_null = len(concrete) < len(branches)
    if len(concrete) == 1:
        return concrete[0], not has_null
    if not concrete:
        return None, False
    return None, True


def is_long_range(minimum: Any, maximum: Any) -> bool:
    """True when integer bounds fall outside the int32 range."""
    if minimum is None or maximum is None:
        return False
    try:
        return minimum < INT32_MIN or maximum > INT32_MAX
    except TypeError:
        return False


def resolve_avro_type(avro_type: Any) -> str:
    """
    Map an Avro type to a target type.

    Args:
        avro_type: A primitive name, a union list or a type object (possibly
            carrying a logicalType)

    Returns:
        The target type name
    """
    if isinstance(avro_type, str):
        return AVRO_PRIMITIVES.get(avro_type.lower(), STRING_TYPE)
    if isinstance(avro_type, list):
        branch, _required = collapse_union(avro_type)
        if branch is None:
            return OBJECT_TYPE
        return resolve_avro_type(branch)
    if isinstance(avro_type, dict):
        logical_type = avro_type.get("logicalType")
        if logical_type in AVRO_LOGICAL_TYPES:
            return AVRO_LOGICAL_TYPES[logical_type]
        base_type = avro_type.get("type")
        if base_type == "array":
            return resolve_avro_type(avro_type.get("items", "null")) + "[]"
        if base_type == "map":
            return map_of(resolve_avro_type(avro_type.get("values", "null")))
        return resolve_avro_type(base_type)
    return STRING_TYPE
