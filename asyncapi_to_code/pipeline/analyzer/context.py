"""
Per-contract resolution context.

Every lookup table the resolvers fill lives here. A context is created for
one contract and passed explicitly to every resolver, so resolving a second
contract never sees the first one's names.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ...utils import PLACEHOLDER_CLASS_NAME, fix_class_name, is_anonymous_name, strip_package_name, to_type_name
from ..contract.nodes import Message, SchemaNode
from .ir_nodes import ModelClassInfo


@dataclass
class ResolverContext:
    """Lookup tables shared by the resolvers for a single contract."""

    # Original schema name -> naming metadata
    class_infos: dict[str, ModelClassInfo] = field(default_factory=dict)

    # Schema name (child or its anonymous extension) -> base schema name
    super_class_map: dict[str, str] = field(default_factory=dict)

    # Anonymous allOf extension -> the schema declaring the allOf
    anonymous_to_subclass: dict[str, str] = field(default_factory=dict)

    # Original schema name -> schema node
    schemas_by_name: dict[str, SchemaNode] = field(default_factory=dict)

    # Full names (namespace.Name) of record schemas already resolved
    avro_schema_names: set[str] = field(default_factory=set)

    # Class name of each resolved record schema -> its namespace
    avro_class_names: dict[str, str | None] = field(default_factory=dict)

    # Package the data classes are generated into
    package_name: str | None = None

    def lookup(self, name: str | None) -> ModelClassInfo | None:
        """Find class metadata by original name, following allOf aliases."""
        if not name:
            return None
        info = self.class_infos.get(name)
        if info is None and name in self.anonymous_to_subclass:
            info = self.class_infos.get(self.anonymous_to_subclass[name])
        return info

    def class_name_for(self, name: str | None) -> str:
        """
        Resolve the class name of a schema.

        Args:
            name: Original schema name (component key, record full name or id)

        Returns:
            The registered class name, else a name derived from the schema
            name, else the placeholder class name
        """
        info = self.lookup(name)
        if info is not None:
            return info.class_name
        if not name or is_anonymous_name(name):
            return PLACEHOLDER_CLASS_NAME
        class_name, _package = strip_package_name(name)
        return fix_class_name(class_name) or PLACEHOLDER_CLASS_NAME

    def register_avro_class(self, full_name: str, class_name: str, namespace: str | None) -> None:
        self.avro_schema_names.add(full_name)
        self.avro_class_names[class_name] = namespace

    def is_avro_class(self, class_name: str) -> bool:
        return class_name in self.avro_class_names

    def avro_import(self, class_name: str) -> str | None:
        """Fully qualified name of a record class, None when it has no namespace."""
        namespace = self.avro_class_names.get(class_name)
        return f"{namespace}.{class_name}" if namespace else None


def message_class_name(message: Message | None) -> str | None:
    """Class name for a message's anonymous payload, None for anonymous messages."""
    if message is None or not message.name or is_anonymous_name(message.name):
        return None
    return to_type_name(message.name) or None
