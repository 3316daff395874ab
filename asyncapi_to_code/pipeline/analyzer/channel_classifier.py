"""
Channel/operation classifier.

Turns every channel operation into raw handlers:
- the producing operation becomes a Send handler when the channel is
  parameterized, else a Supplier;
- the consuming operation becomes one Consumer per durable queue it is
  bound to, else a single Consumer.

Which operation produces depends on the view: in the provider view publish
operations produce, in the client view subscribe operations do.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from ...utils import to_camel_case, to_consumer_bean_name, to_parameter_name
from ..config import GeneratorConfig, View
from ..contract.nodes import Channel, Contract, Operation
from .context import ResolverContext
from .handler_naming import CONSUMER_SUFFIX, handler_name, message_name, message_names, send_method_name
from .ir_nodes import ChannelParameter, Handler, HandlerKind, QueueInfo
from .payload_types import multi_message_comment, payload_type
from .type_mapping import collapse_union, destination_format_token, parameter_type

logger = logging.getLogger(__name__)

_PLACEHOLDER_PATTERN = re.compile(r"\{([^}]+)\}")

QUEUE_GROUP_SUFFIX = "-group"


def resolve_view(contract: Contract, config: GeneratorConfig) -> str:
    """
    Resolve the direction view of a contract.

    The override sources are evaluated in order: the contract's info x-view,
    the configured view, then the provider default.

    Args:
        contract: The parsed contract
        config: Generator configuration

    Returns:
        "provider" or "client"
    """
    sources = (contract.info.extension("x-view"), config.view, View.PROVIDER.value)
    view = next(str(source) for source in sources if source)
    if view not in {member.value for member in View}:
        logger.warning("Unknown view %r in the contract, using %s", view, View.PROVIDER.value)
        return View.PROVIDER.value
    return view


def extract_parameters(channel: Channel) -> list[ChannelParameter]:
    """
    Extract the destination parameters of a channel.

    Args:
        channel: The channel

    Returns:
        Parameters in placeholder order; declared parameters missing from the
        path come last with position -1
    """
    # A placeholder repeated in the path is still one parameter
    placeholders = list(dict.fromkeys(_PLACEHOLDER_PATTERN.findall(channel.name)))
    segments = channel.name.split("/")
    declared = {parameter.name: parameter for parameter in channel.parameters}
    names = placeholders + [name for name in declared if name not in placeholders]

    parameters = []
    for name in names:
        schema = declared[name].schema if name in declared else None
        schema_type = schema.type if schema is not None else None
        if isinstance(schema_type, list):
            schema_type = collapse_union(schema_type)[0]

        placeholder = f"{{{name}}}"
        position = segments.index(placeholder) if placeholder in segments else -1
        if position < 0:
            logger.warning("Parameter %s is not a path segment of channel %s", name, channel.name)

        enum_values = list(schema.enum) if schema is not None and schema.enum else []
        parameters.append(
            ChannelParameter(
                name=name,
                identifier=to_parameter_name(name),
                type_name=parameter_type(schema_type),
                is_required=True,
                position=position,
                enum_values=enum_values,
                has_enum=bool(enum_values),
                schema_type=schema_type,
                schema_format=schema.format if schema is not None else None,
            )
        )
    return parameters


def publish_destination(channel_name: str, parameters: list[ChannelParameter]) -> str:
    """Destination template with each placeholder replaced by its format token ("orders/%s")."""
    destination = channel_name
    for parameter in parameters:
        destination = destination.replace(f"{{{parameter.name}}}", destination_format_token(parameter.schema_type))
    return destination


def subscribe_destination(channel_name: str) -> str:
    """Destination with each placeholder replaced by a wildcard ("orders/*")."""
    return _PLACEHOLDER_PATTERN.sub("*", channel_name)


def queue_infos(operation: Operation) -> list[QueueInfo]:
    """
    Durable queues an operation is bound to through its Solace binding.

    Args:
        operation: The consuming operation

    Returns:
        One QueueInfo per queue destination; malformed bindings give none
    """
    binding = operation.binding("solace")
    if not isinstance(binding, dict):
        return []

    destinations = binding.get("destinations")
    if destinations is None:
        return []
    if not isinstance(destinations, list):
        logger.warning("Ignoring malformed solace destinations on %s", operation.channel_name)
        return []

    queues = []
    for destination in destinations:
        if not isinstance(destination, dict) or destination.get("destinationType") != "queue":
            continue
        queue = destination.get("queue")
        if not isinstance(queue, dict) or not queue.get("name"):
            logger.warning("Ignoring queue destination without a name on %s", operation.channel_name)
            continue
        subscriptions = queue.get("topicSubscriptions") or []
        if not isinstance(subscriptions, list):
            subscriptions = [subscriptions]
        queues.append(QueueInfo(queue_name=str(queue["name"]), topic_subscriptions=[str(s) for s in subscriptions]))
    return queues


def _legacy_queue_name(operation: Operation) -> str | None:
    """Queue name of the flat binding shape ({queueName, topicSubscriptions})."""
    binding: Any = operation.binding("solace")
    if isinstance(binding, dict) and binding.get("queueName") and binding.get("topicSubscriptions"):
        return str(binding["queueName"])
    return None


class ChannelClassifier:
    """Classifies channel operations into raw handlers."""

    def __init__(self, context: ResolverContext, config: GeneratorConfig):
        self.context = context
        self.config = config
        self.view = View.PROVIDER.value
        self._queue_keys: set[str] = set()

    def classify(self, contract: Contract) -> list[Handler]:
        """
        Build the raw handlers of a contract.

        Args:
            contract: The parsed contract

        Returns:
            Handlers in channel declaration order, producer before consumer
        """
        self.view = resolve_view(contract, self.config)
        self._queue_keys = set()
        is_provider = self.view == View.PROVIDER.value

        handlers: list[Handler] = []
        for channel in contract.channels:
            parameters = extract_parameters(channel)
            publish, subscribe = channel.publish(), channel.subscribe()
            producer, consumer = (publish, subscribe) if is_provider else (subscribe, publish)

            if producer is not None:
                handlers.append(self._producer(channel, producer, parameters, handlers))
            if consumer is not None:
                handlers.extend(self._consumers(channel, consumer, parameters))

        logger.debug("Classified %d channel(s) into %d handler(s) (%s view)", len(contract.channels), len(handlers), self.view)
        return handlers

    def _handler(self, channel: Channel, operation: Operation, kind: HandlerKind, parameters: list[ChannelParameter]) -> Handler:
        """Handler fields shared by every archetype."""
        name = message_name(operation)
        return Handler(
            kind=kind,
            channel_name=channel.name,
            operation_id=operation.operation_id,
            dynamic=bool(parameters),
            publish_destination=publish_destination(channel.name, parameters),
            subscribe_destination=subscribe_destination(channel.name),
            parameters=list(parameters),
            has_enum_parameters=any(parameter.has_enum for parameter in parameters),
            message_name=name,
            message_names=message_names(operation),
            is_multi_message=len(operation.messages) > 1,
            multi_message_comment=multi_message_comment(operation, self.context),
            custom_name=operation.extension("x-scs-function-name"),
            reactive=self.config.reactive,
            dynamic_type=self.config.dynamic_type,
            parameters_to_headers=self.config.parameters_to_headers,
        )

    def _producer(
        self, channel: Channel, operation: Operation, parameters: list[ChannelParameter], handlers: list[Handler]
    ) -> Handler:
        kind = HandlerKind.SEND if parameters else HandlerKind.SUPPLIER
        handler = self._handler(channel, operation, kind, parameters)
        handler.output_payload = payload_type(operation, self.context)
        handler.binding_destination = operation.extension("x-scs-destination") or channel.name

        if kind == HandlerKind.SEND:
            taken = {existing.send_method_name or existing.name for existing in handlers}
            handler.send_method_name = send_method_name(channel.name, operation, taken)
            handler.name = handler.send_method_name
            handler.function_param_list = ", ".join(f"{p.type_name} {p.identifier}" for p in parameters)
            handler.function_arg_list = ", ".join(p.identifier for p in parameters)
        else:
            handler.name = handler_name(channel.name, operation, is_consumer=False)
        return handler

    def _consumers(self, channel: Channel, operation: Operation, parameters: list[ChannelParameter]) -> list[Handler]:
        payload = payload_type(operation, self.context)
        destination = operation.extension("x-scs-destination") or subscribe_destination(channel.name)

        queues = queue_infos(operation)
        if not queues:
            handler = self._handler(channel, operation, HandlerKind.CONSUMER, parameters)
            handler.name = handler_name(channel.name, operation, True, _legacy_queue_name(operation))
            handler.input_payload = payload
            handler.binding_destination = destination
            group = operation.extension("x-scs-group")
            handler.group = str(group) if group else None
            return [handler]

        custom_name = operation.extension("x-scs-function-name")
        consumers = []
        for index, queue in enumerate(queues):
            key = f"{channel.name}::{queue.queue_name}::{','.join(queue.topic_subscriptions)}"
            if key in self._queue_keys:
                logger.debug("Skipping duplicate queue binding %s", key)
                continue
            self._queue_keys.add(key)

            handler = self._handler(channel, operation, HandlerKind.CONSUMER, parameters)
            if custom_name:
                base_name = to_camel_case(str(custom_name))
            else:
                base_name = to_consumer_bean_name(queue.queue_name) + CONSUMER_SUFFIX
            handler.name = base_name + (str(index + 1) if index else "")
            handler.input_payload = payload
            handler.binding_destination = destination
            handler.queue_name = queue.queue_name
            handler.topic_subscriptions = list(queue.topic_subscriptions)
            handler.group = queue.queue_name + QUEUE_GROUP_SUFFIX
            consumers.append(handler)
        return consumers
