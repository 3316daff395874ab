"""
Payload typing of handler operations.

Maps the message(s) of an operation to the target type a handler is typed
by, using the class names registered by the schema resolvers.
"""

from __future__ import annotations

import logging

from ...utils import fix_class_name, strip_package_name, to_type_name
from ..contract.nodes import Message, Operation, SchemaNode
from .context import ResolverContext, message_class_name
from .handler_naming import ref_tail
from .schema_resolver import SCHEMA_JSON_SUFFIX, single_type
from .type_mapping import MESSAGE_TYPE, OBJECT_TYPE, STRING_TYPE, array_of, is_primitive_type, resolve_primitive

logger = logging.getLogger(__name__)

MULTI_MESSAGE_HEADER = "// The message can be of type:"


def _is_primitive_alias(node: SchemaNode) -> bool:
    return is_primitive_type(single_type(node.type)) and not node.has_properties()


def _json_id_class_name(json_id: str) -> str:
    tail = json_id.rstrip("/").split("/")[-1].replace(SCHEMA_JSON_SUFFIX, "")
    return fix_class_name(strip_package_name(tail)[0])


def _array_type(node: SchemaNode, context: ResolverContext) -> str:
    items = node.items
    if items is None:
        return array_of(OBJECT_TYPE)
    item_type = single_type(items.type)
    if is_primitive_type(item_type):
        return array_of(resolve_primitive(item_type, items.format).target_type)
    if item_type in (None, "object") and not items.is_anonymous:
        return array_of(context.class_name_for(items.schema_id))
    return array_of(OBJECT_TYPE)


def payload_type(operation: Operation | None, context: ResolverContext) -> str:
    """
    Target type of the payload an operation carries.

    Args:
        operation: The operation (None when the channel lacks it)
        context: The resolution context holding the registered class names

    Returns:
        String when there is no message or payload, Message<?> for several
        messages, else the primitive, list or class type of the payload
    """
    if operation is None or not operation.messages:
        return STRING_TYPE
    if len(operation.messages) > 1:
        return MESSAGE_TYPE

    message = operation.messages[0]
    payload = message.payload
    if payload is None:
        return STRING_TYPE

    ep_name = payload.extension("x-ep-schema-name")
    if ep_name:
        return to_type_name(str(ep_name))

    if _is_primitive_alias(payload):
        return resolve_primitive(single_type(payload.type), payload.format).target_type

    if single_type(payload.type) == "array":
        return _array_type(payload, context)

    if payload.ref and payload.ref.startswith("#"):
        tail = ref_tail(payload.ref)
        info = context.lookup(tail)
        if info is not None:
            return info.class_name
        return to_type_name(strip_package_name(tail)[0]) or OBJECT_TYPE

    info = context.lookup(payload.schema_id)
    if info is not None:
        return info.class_name

    if payload.is_avro:
        return context.class_name_for(payload.schema_id)

    if payload.schema_id and not payload.is_anonymous and "http" not in payload.schema_id:
        return context.class_name_for(payload.schema_id)

    if payload.json_id:
        return _json_id_class_name(payload.json_id) if payload.has_properties() else OBJECT_TYPE

    if payload.title:
        return context.class_name_for(payload.title)

    if payload.has_properties():
        return message_class_name(message) or OBJECT_TYPE

    return OBJECT_TYPE


def message_payload_type(message: Message, context: ResolverContext | None = None) -> str:
    """Type name of one message's payload, as listed in multi-message comments."""
    payload = message.payload
    if payload is None:
        return OBJECT_TYPE

    schema_type = single_type(payload.type)
    if schema_type in (None, "object") or payload.is_avro:
        if context is not None:
            info = context.lookup(payload.schema_id)
            if info is not None:
                return info.class_name
        name = ref_tail(payload.ref) or payload.schema_id
        if name and not payload.is_anonymous:
            return fix_class_name(strip_package_name(name)[0]) or OBJECT_TYPE
        if payload.has_properties():
            return message_class_name(message) or OBJECT_TYPE
        return OBJECT_TYPE

    if is_primitive_type(schema_type):
        return resolve_primitive(schema_type, payload.format).target_type
    return OBJECT_TYPE


def multi_message_comment(operation: Operation | None, context: ResolverContext | None = None) -> str | None:
    """
    Doc comment listing the message types of a multi-message operation.

    Returns:
        None unless the operation carries more than one message
    """
    if operation is None or len(operation.messages) <= 1:
        return None
    return MULTI_MESSAGE_HEADER + "".join(
        "\n\t// " + message_payload_type(message, context) for message in operation.messages
    )
