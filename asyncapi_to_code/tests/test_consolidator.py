#!/usr/bin/env python3

from unittest import TestCase

import pytest

from asyncapi_to_code.pipeline.analyzer.consolidator import consolidate, group_by_custom_name
from asyncapi_to_code.pipeline.analyzer.ir_nodes import ChannelParameter, Handler, HandlerKind


def supplier(name, destination, message, custom_name=None, payload=None):
    return Handler(
        name=name,
        kind=HandlerKind.SUPPLIER,
        channel_name=destination,
        output_payload=payload or message,
        publish_destination=destination,
        binding_destination=destination,
        message_name=message,
        message_names=[message],
        custom_name=custom_name,
    )


def consumer(name, channel, message, custom_name=None, queue=None, topics=(), payload=None):
    return Handler(
        name=name,
        kind=HandlerKind.CONSUMER,
        channel_name=channel,
        input_payload=payload or message,
        subscribe_destination=channel,
        binding_destination=channel,
        queue_name=queue,
        topic_subscriptions=list(topics),
        group=f"{queue}-group" if queue else None,
        message_name=message,
        message_names=[message],
        custom_name=custom_name,
    )


class TestGroupByCustomName(TestCase):
    """Test pairing of handlers sharing a function name"""

    def test_pair_becomes_function(self):
        handlers = [
            supplier("ledgerSync", "ledger/entries", "LedgerEntry", custom_name="ledgerSync"),
            consumer("auditConsumer", "audit", "Audit"),
            consumer("ledgerSync", "ledger/commands", "LedgerCommand", custom_name="ledgerSync"),
        ]
        result = group_by_custom_name(handlers)

        self.assertEqual([handler.name for handler in result], ["auditConsumer", "ledgerSync"])
        function = result[1]
        self.assertEqual(function.kind, HandlerKind.FUNCTION)
        self.assertEqual(function.input_payload, "LedgerCommand")
        self.assertEqual(function.output_payload, "LedgerEntry")
        self.assertEqual(function.input_destination, "ledger/commands")
        self.assertEqual(function.output_destination, "ledger/entries")
        self.assertEqual(function.custom_name, "ledgerSync")

    def test_client_view_swaps_payloads(self):
        handlers = [
            supplier("ledgerSync", "ledger/commands", "LedgerCommand", custom_name="ledgerSync"),
            consumer("ledgerSync", "ledger/entries", "LedgerEntry", custom_name="ledgerSync"),
        ]
        function = group_by_custom_name(handlers, "client")[0]
        self.assertEqual(function.input_payload, "LedgerCommand")
        self.assertEqual(function.output_payload, "LedgerEntry")
        self.assertEqual(function.input_destination, "ledger/commands")
        self.assertEqual(function.output_destination, "ledger/entries")
        self.assertEqual(function.channel_name, "ledger/commands")

    def test_client_view_reads_parameterized_destination_with_wildcards(self):
        producer = supplier("f", "ledger/{region}", "LedgerCommand", custom_name="f")
        producer.dynamic = True
        producer.subscribe_destination = "ledger/*"
        function = group_by_custom_name([producer, consumer("f", "ledger/entries", "LedgerEntry", custom_name="f")], "client")[0]
        self.assertEqual(function.input_destination, "ledger/*")
        self.assertEqual(function.output_destination, "ledger/entries")

    def test_function_name_is_camel_cased(self):
        handlers = [
            supplier("a", "out", "Out", custom_name="route-orders"),
            consumer("b", "in", "In", custom_name="route-orders"),
        ]
        self.assertEqual(group_by_custom_name(handlers)[0].name, "routeOrders")

    def test_function_keeps_parameters(self):
        parameter = ChannelParameter(name="region", identifier="region", has_enum=True)
        producer = supplier("f", "out/{region}", "Out", custom_name="f")
        producer.parameters = [parameter]
        function = group_by_custom_name([producer, consumer("f", "in", "In", custom_name="f")])[0]
        self.assertEqual(function.parameters, [parameter])
        self.assertTrue(function.has_enum_parameters)

    def test_single_member_passes_through(self):
        handler = consumer("solo", "solo", "Solo", custom_name="solo")
        self.assertEqual(group_by_custom_name([handler]), [handler])

    def test_two_consumers_stay_separate(self):
        handlers = [
            consumer("f", "a", "A", custom_name="f"),
            consumer("f", "b", "B", custom_name="f"),
        ]
        with self.assertLogs("asyncapi_to_code.pipeline.analyzer.consolidator", level="WARNING"):
            result = group_by_custom_name(handlers)
        self.assertEqual(result, handlers)

    def test_more_than_two_members_is_an_error(self):
        handlers = [
            supplier("f", "a", "A", custom_name="f"),
            consumer("f", "b", "B", custom_name="f"),
            consumer("f", "c", "C", custom_name="f"),
        ]
        with self.assertLogs("asyncapi_to_code.pipeline.analyzer.consolidator", level="ERROR"):
            result = group_by_custom_name(handlers)
        self.assertEqual([handler.kind for handler in result], [HandlerKind.SUPPLIER, HandlerKind.CONSUMER, HandlerKind.CONSUMER])

    def test_groups_follow_first_seen_order(self):
        handlers = [
            consumer("second", "b", "B", custom_name="second"),
            consumer("first", "a", "A", custom_name="first"),
            consumer("plain", "c", "C"),
        ]
        self.assertEqual([handler.name for handler in group_by_custom_name(handlers)], ["plain", "second", "first"])


class TestConsolidate(TestCase):
    """Test merging of handlers bound to the same destination"""

    def test_suppliers_merged_by_destination(self):
        handlers = [
            supplier("createdSupplier", "orders", "OrderCreated"),
            supplier("cancelledSupplier", "orders", "OrderCancelled"),
            supplier("otherSupplier", "other", "Other"),
        ]
        result = consolidate(handlers)

        self.assertEqual([handler.name for handler in result], ["createdSupplier", "otherSupplier"])
        merged = result[0]
        self.assertTrue(merged.is_multi_message)
        self.assertEqual(merged.output_payload, "Message<?>")
        self.assertEqual(merged.message_names, ["OrderCreated", "OrderCancelled"])
        self.assertEqual(merged.multi_message_comment, "// The message can be of type: OrderCreated, OrderCancelled")

    def test_queue_consumers_merged_by_queue(self):
        handlers = [
            consumer("eventsConsumer", "orders/created", "OrderCreated", queue="events", topics=["orders/created"]),
            consumer("eventsConsumer", "orders/cancelled", "OrderCancelled", queue="events", topics=["orders/cancelled"]),
        ]
        result = consolidate(handlers)

        self.assertEqual(len(result), 1)
        merged = result[0]
        self.assertEqual(merged.input_payload, "Message<?>")
        self.assertEqual(merged.topic_subscriptions, ["orders/created", "orders/cancelled"])

    def test_same_message_does_not_make_multi_message(self):
        handlers = [
            consumer("q1Consumer", "a", "Ping", queue="q1", topics=["a"]),
            consumer("q1Consumer", "b", "Ping", queue="q1", topics=["b"]),
        ]
        merged = consolidate(handlers)[0]
        self.assertFalse(merged.is_multi_message)
        self.assertEqual(merged.input_payload, "Ping")
        self.assertEqual(merged.topic_subscriptions, ["a", "b"])

    def test_plain_consumers_and_functions_pass_through(self):
        function = Handler(name="f", kind=HandlerKind.FUNCTION, publish_destination="x")
        handlers = [consumer("aConsumer", "x", "A"), consumer("bConsumer", "x", "B"), function]
        self.assertEqual(consolidate(handlers), handlers)


if __name__ == "__main__":
    pytest.main([__file__])
