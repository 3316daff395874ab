"""
Naming of handlers, send methods and the messages they carry.
"""

from __future__ import annotations

import logging

from ...utils import ANONYMOUS_MARKER, is_anonymous_name, to_camel_case, to_type_name
from ..contract.nodes import Message, Operation

logger = logging.getLogger(__name__)

# operationIds that say nothing about the operation
GENERIC_VERBS = {"publish", "subscribe", "send", "receive"}

CONSUMER_SUFFIX = "Consumer"
SUPPLIER_SUFFIX = "Supplier"
SEND_PREFIX = "send"


def ref_tail(ref: str | None) -> str | None:
    """Last segment of a reference ("#/components/messages/OrderPlaced" -> "OrderPlaced")."""
    if not ref:
        return None
    return ref.rstrip("/").split("/")[-1] or None


def synthesize_name(channel_name: str) -> str:
    """Name derived from the channel path ("orders/{region}" -> "ordersRegion")."""
    segments = [segment for segment in channel_name.split("/") if segment]
    if not segments:
        return ""
    return to_camel_case(segments[0]) + "".join(to_type_name(segment) for segment in segments[1:])


def single_message_name(message: Message) -> str | None:
    """
    Name of one message.

    Returns:
        The message name unless anonymous, else the message $ref tail without
        its "Message" suffix, else the payload $ref tail, else a non-URI
        payload id, else whatever name or id the message has
    """
    if message.name and not is_anonymous_name(message.name):
        return message.name

    tail = ref_tail(message.ref)
    if tail:
        if tail.endswith("Message") and len(tail) > len("Message"):
            tail = tail[: -len("Message")]
        return tail

    payload = message.payload
    if payload is not None:
        tail = ref_tail(payload.ref)
        if tail:
            return tail
        if payload.schema_id and not payload.is_anonymous and "://" not in payload.schema_id:
            return payload.schema_id

    return message.name or message.message_id


def message_name(operation: Operation | None) -> str | None:
    """Name of the first message of an operation."""
    if operation is None or not operation.messages:
        return None
    return single_message_name(operation.messages[0])


def message_names(operation: Operation | None) -> list[str]:
    """Distinct names of every message an operation carries, in order."""
    if operation is None:
        return []
    names = (single_message_name(message) for message in operation.messages)
    return list(dict.fromkeys(name for name in names if name))


def handler_name(channel_name: str, operation: Operation, is_consumer: bool, queue_name: str | None = None) -> str:
    """
    Name of a Supplier or Consumer handler.

    Explicit x-scs-function-name wins and is used without suffix. Otherwise
    the first usable of operationId, durable queue name, message name and the
    channel path synthesis gets a Consumer/Supplier suffix.

    Args:
        channel_name: The channel path
        operation: The operation the handler is derived from
        is_consumer: Whether the handler consumes
        queue_name: Durable queue bound to the operation, if any

    Returns:
        The camelCase handler name
    """
    custom_name = operation.extension("x-scs-function-name")
    if custom_name:
        return to_camel_case(str(custom_name))

    name = None
    if operation.operation_id and operation.operation_id not in GENERIC_VERBS:
        name = operation.operation_id
    elif queue_name:
        name = queue_name
    else:
        name = message_name(operation)

    if not name or name == channel_name or ANONYMOUS_MARKER in name or len(operation.messages) > 1:
        name = synthesize_name(channel_name)

    suffix = CONSUMER_SUFFIX if is_consumer else SUPPLIER_SUFFIX
    return f"{to_camel_case(name)}{suffix}"


def send_method_name(channel_name: str, operation: Operation, existing_names: set[str]) -> str:
    """
    Name of the method publishing to a parameterized destination.

    Args:
        channel_name: The channel path
        operation: The producing operation
        existing_names: Handler and send method names already taken

    Returns:
        "send" + the operationId, message name or channel path in PascalCase,
        with a numeric suffix when the name is taken
    """
    if operation.operation_id and operation.operation_id not in GENERIC_VERBS:
        base = SEND_PREFIX + to_type_name(operation.operation_id)
    elif message_name(operation) and not is_anonymous_name(message_name(operation)):
        base = SEND_PREFIX + to_type_name(message_name(operation))
    else:
        base = SEND_PREFIX + to_type_name(synthesize_name(channel_name))

    name = base
    counter = 1
    while name in existing_names:
        name = f"{base}{counter}"
        counter += 1
    if name != base:
        logger.debug("Send method name %s is taken, using %s", base, name)
    return name
