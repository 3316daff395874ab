"""
Handler grouping and consolidation.

Runs after every raw handler exists:
1. group_by_custom_name() pairs a producer and a consumer sharing an
   x-scs-function-name into a single Function handler.
2. consolidate() merges handlers bound to the same transport destination.
"""

from __future__ import annotations

import logging

from ...utils import to_camel_case
from ..config import View
from .ir_nodes import Handler, HandlerKind
from .type_mapping import MESSAGE_TYPE

logger = logging.getLogger(__name__)

CONSOLIDATED_COMMENT_PREFIX = "// The message can be of type: "


def _make_function(name: str, producer: Handler, consumer: Handler, view: str) -> Handler:
    """
    Combine a producer and a consumer into one Function handler.

    In the provider view the Function reads what the consumer receives and
    writes what the producer sends. The client view inverts both sides, so
    the payloads and their destinations are swapped together.
    """
    if view == View.CLIENT.value:
        reader, writer = producer, consumer
        input_payload, output_payload = producer.output_payload, consumer.input_payload
        # A parameterized destination is matched with wildcards when read
        input_destination = producer.subscribe_destination if producer.dynamic else producer.binding_destination
        output_destination = consumer.channel_name if consumer.dynamic else consumer.binding_destination
    else:
        reader, writer = consumer, producer
        input_payload, output_payload = consumer.input_payload, producer.output_payload
        input_destination, output_destination = consumer.binding_destination, producer.binding_destination

    parameters = reader.parameters or writer.parameters
    return Handler(
        name=to_camel_case(name),
        kind=HandlerKind.FUNCTION,
        channel_name=reader.channel_name,
        operation_id=reader.operation_id,
        input_payload=input_payload,
        output_payload=output_payload,
        dynamic=consumer.dynamic or producer.dynamic,
        publish_destination=writer.publish_destination,
        subscribe_destination=reader.subscribe_destination,
        binding_destination=input_destination,
        input_destination=input_destination,
        output_destination=output_destination,
        queue_name=reader.queue_name,
        topic_subscriptions=list(reader.topic_subscriptions),
        group=reader.group,
        parameters=list(parameters),
        has_enum_parameters=any(parameter.has_enum for parameter in parameters),
        message_name=reader.message_name,
        message_names=list(reader.message_names),
        is_multi_message=reader.is_multi_message,
        multi_message_comment=reader.multi_message_comment,
        custom_name=name,
        reactive=consumer.reactive,
        dynamic_type=consumer.dynamic_type,
        parameters_to_headers=consumer.parameters_to_headers,
    )


def group_by_custom_name(handlers: list[Handler], view: str = View.PROVIDER.value) -> list[Handler]:
    """
    Pair handlers sharing an x-scs-function-name into Function handlers.

    Args:
        handlers: Raw handlers in classification order
        view: The resolved view ("provider" or "client")

    Returns:
        Handlers without a custom name first, then the groups in first-seen
        order; a group that is not one producer and one consumer keeps its
        members as they are
    """
    ungrouped: list[Handler] = []
    groups: dict[str, list[Handler]] = {}
    for handler in handlers:
        if handler.custom_name:
            groups.setdefault(str(handler.custom_name), []).append(handler)
        else:
            ungrouped.append(handler)

    result = list(ungrouped)
    for name, members in groups.items():
        if len(members) == 1:
            result.append(members[0])
            continue

        if len(members) == 2:
            producers = [member for member in members if member.is_producer]
            consumers = [member for member in members if member.kind == HandlerKind.CONSUMER]
            if len(producers) == 1 and len(consumers) == 1:
                function = _make_function(name, producers[0], consumers[0], view)
                logger.debug("Grouped %s and %s into function %s", producers[0].name, consumers[0].name, function.name)
                result.append(function)
                continue
            logger.warning(
                "Function name %s is shared by two handlers that are not one producer and one consumer; keeping them separate",
                name,
            )
        else:
            logger.error(
                "Function name %s is shared by %d handlers; at most one producer and one consumer can be combined",
                name,
                len(members),
            )
        result.extend(members)
    return result


def _merge(existing: Handler, other: Handler) -> None:
    """Fold a handler into the one already bound to its destination."""
    for name in other.message_names:
        if name not in existing.message_names:
            existing.message_names.append(name)
    for subscription in other.topic_subscriptions:
        if subscription not in existing.topic_subscriptions:
            existing.topic_subscriptions.append(subscription)

    if len(existing.message_names) > 1:
        existing.is_multi_message = True
        if existing.is_producer:
            existing.output_payload = MESSAGE_TYPE
        else:
            existing.input_payload = MESSAGE_TYPE
        existing.multi_message_comment = CONSOLIDATED_COMMENT_PREFIX + ", ".join(existing.message_names)


def consolidate(handlers: list[Handler]) -> list[Handler]:
    """
    Merge handlers sharing a transport destination.

    Suppliers are merged by publish destination and queue-bound consumers by
    queue name; the first handler survives. Other handlers pass through.

    Args:
        handlers: Grouped handlers

    Returns:
        The consolidated handlers, order preserved
    """
    suppliers: dict[str, Handler] = {}
    queue_consumers: dict[str, Handler] = {}
    result: list[Handler] = []

    for handler in handlers:
        if handler.kind == HandlerKind.SUPPLIER and handler.publish_destination:
            registry, key = suppliers, handler.publish_destination
        elif handler.kind == HandlerKind.CONSUMER and handler.queue_name:
            registry, key = queue_consumers, handler.queue_name
        else:
            result.append(handler)
            continue

        existing = registry.get(key)
        if existing is None:
            registry[key] = handler
            result.append(handler)
            continue

        logger.debug("Merging handler %s into %s (destination %s)", handler.name, existing.name, key)
        _merge(existing, handler)

    return result
