"""
Analyzer module.

Contains schema resolution (both dialects), channel classification,
handler consolidation and IR assembly.
"""

from __future__ import annotations

from .assembler import ResultAssembler
from .avro_resolver import AvroSchemaResolver
from .channel_classifier import ChannelClassifier, extract_parameters, resolve_view
from .consolidator import consolidate, group_by_custom_name
from .context import ResolverContext
from .ir_nodes import (
    IR,
    ChannelParameter,
    Handler,
    HandlerKind,
    ModelClassInfo,
    ModelProperty,
    ModelSchema,
    PropertyKind,
    QueueInfo,
    SchemaDialect,
)
from .schema_resolver import SchemaModelResolver

__all__ = [
    "IR",
    "ChannelParameter",
    "Handler",
    "HandlerKind",
    "ModelClassInfo",
    "ModelProperty",
    "ModelSchema",
    "PropertyKind",
    "QueueInfo",
    "SchemaDialect",
    "ResolverContext",
    "SchemaModelResolver",
    "AvroSchemaResolver",
    "ChannelClassifier",
    "ResultAssembler",
    "consolidate",
    "extract_parameters",
    "group_by_custom_name",
    "resolve_view",
]
