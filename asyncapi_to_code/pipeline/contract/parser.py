"""
AsyncAPI document parser that builds the contract object model.

Local references are resolved into shared node instances (one per JSON
pointer) so a referenced schema is the same object wherever it is used.
Identity extensions are assigned the way the upstream AsyncAPI parser does:
component schemas keep their key, inline schemas become
<anonymous-schema-N> and messages get an x-parser-message-name.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from ..errors import ContractError
from .nodes import PUBLISH, SUBSCRIBE, Channel, Contract, Info, Message, Operation, Parameter, SchemaNode

logger = logging.getLogger(__name__)

SCHEMAS_POINTER = "#/components/schemas/"
MESSAGES_POINTER = "#/components/messages/"


def _extensions(raw: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in raw.items() if isinstance(k, str) and k.startswith("x-")}


def _escape_pointer_token(token: Any) -> str:
    return str(token).replace("~", "~0").replace("/", "~1")


def _unescape_pointer_token(token: str) -> str:
    return token.replace("~1", "/").replace("~0", "~")


def _is_avro_record(raw: dict[str, Any]) -> bool:
    return raw.get("type") == "record" and isinstance(raw.get("fields"), list)


class ContractParser:
    """Parses an AsyncAPI 2.x document into a Contract."""

    def __init__(self):
        self._document: dict[str, Any] = {}
        self._schemas: dict[str, SchemaNode] = {}
        self._messages: dict[str, Message] = {}
        self._anonymous_schema_count = 0
        self._anonymous_message_count = 0

    def parse(self, document: dict[str, Any]) -> Contract:
        """
        Parse an AsyncAPI document.

        Args:
            document: The decoded YAML/JSON document

        Returns:
            Contract with channels, messages and schemas in declaration order

        Raises:
            ContractError: If the document is not a mapping
        """
        if not isinstance(document, dict):
            raise ContractError(f"An AsyncAPI document must be a mapping, got {type(document).__name__}")

        self._document = document
        self._schemas = {}
        self._messages = {}
        self._anonymous_schema_count = 0
        self._anonymous_message_count = 0

        contract = Contract(asyncapi=str(document.get("asyncapi", "")), raw=document)
        contract.info = self._parse_info(document.get("info"))

        components = document.get("components") or {}
        schemas = components.get("schemas") or {}
        for key, raw_schema in schemas.items():
            pointer = SCHEMAS_POINTER + _escape_pointer_token(key)
            contract.component_schemas[key] = self._parse_schema(raw_schema, pointer, schema_id=str(key))

        messages = components.get("messages") or {}
        for key, raw_message in messages.items():
            pointer = MESSAGES_POINTER + _escape_pointer_token(key)
            contract.component_messages[key] = self._parse_message(raw_message, pointer, name=str(key))

        channels = document.get("channels") or {}
        if not isinstance(channels, dict):
            logger.warning("Ignoring channels section of type %s", type(channels).__name__)
            channels = {}
        for channel_name, raw_channel in channels.items():
            contract.channels.append(self._parse_channel(str(channel_name), raw_channel))

        logger.debug(
            "Parsed contract %r: %d channel(s), %d component schema(s), %d component message(s)",
            contract.info.title,
            len(contract.channels),
            len(contract.component_schemas),
            len(contract.component_messages),
        )
        return contract

    # -- references --------------------------------------------------------

    def _resolve_pointer(self, ref: str) -> Any:
        """Look up a local JSON pointer ("#/a/b") in the document."""
        current: Any = self._document
        for token in ref[2:].split("/") if ref.startswith("#/") else []:
            token = _unescape_pointer_token(token)
            if isinstance(current, dict) and token in current:
                current = current[token]
            elif isinstance(current, list) and token.isdigit() and int(token) < len(current):
                current = current[int(token)]
            else:
                return None
        return current

    def _deref(self, raw: Any) -> Any:
        """Follow local $refs on non-schema objects (parameters, bindings)."""
        seen = set()
        while isinstance(raw, dict) and isinstance(raw.get("$ref"), str) and raw["$ref"].startswith("#"):
            ref = raw["$ref"]
            if ref in seen:
                break
            seen.add(ref)
            raw = self._resolve_pointer(ref)
        return raw

    # -- info, channels, operations ----------------------------------------

    def _parse_info(self, raw: Any) -> Info:
        if not isinstance(raw, dict):
            return Info()
        return Info(
            title=str(raw.get("title", "")),
            version=str(raw.get("version", "")),
            description=raw.get("description"),
            extensions=_extensions(raw),
        )

    def _parse_channel(self, name: str, raw: Any) -> Channel:
        raw = self._deref(raw)
        if not isinstance(raw, dict):
            return Channel(name=name)

        channel = Channel(
            name=name,
            description=raw.get("description"),
            bindings=self._deref(raw.get("bindings")) or {},
            extensions=_extensions(raw),
        )
        pointer = "#/channels/" + _escape_pointer_token(name)

        for param_name, raw_param in (raw.get("parameters") or {}).items():
            raw_param = self._deref(raw_param)
            if not isinstance(raw_param, dict):
                channel.parameters.append(Parameter(name=str(param_name)))
                continue
            schema = None
            if "schema" in raw_param:
                schema = self._parse_schema(raw_param["schema"], f"{pointer}/parameters/{param_name}/schema")
            channel.parameters.append(
                Parameter(
                    name=str(param_name),
                    schema=schema,
                    description=raw_param.get("description"),
                    location=raw_param.get("location"),
                )
            )

        # Operations keep the order they are declared in
        for key in raw:
            if key in (PUBLISH, SUBSCRIBE):
                channel.operations.append(self._parse_operation(name, key, raw[key], f"{pointer}/{key}"))

        return channel

    def _parse_operation(self, channel_name: str, action: str, raw: Any, pointer: str) -> Operation:
        raw = self._deref(raw)
        if not isinstance(raw, dict):
            return Operation(action=action, channel_name=channel_name)

        operation = Operation(
            action=action,
            channel_name=channel_name,
            operation_id=raw.get("operationId"),
            summary=raw.get("summary"),
            bindings=self._deref(raw.get("bindings")) or {},
            extensions=_extensions(raw),
        )

        raw_message = raw.get("message")
        if raw_message is None:
            return operation

        message_pointer = f"{pointer}/message"
        resolved = self._deref(raw_message)
        if isinstance(resolved, dict) and isinstance(resolved.get("oneOf"), list):
            for index, member in enumerate(resolved["oneOf"]):
                operation.messages.append(self._parse_message(member, f"{message_pointer}/oneOf/{index}"))
        else:
            operation.messages.append(self._parse_message(raw_message, message_pointer))
        return operation

    # -- messages ------------------------------------------------------------

    def _parse_message(self, raw: Any, pointer: str, name: str | None = None) -> Message:
        ref = None
        if isinstance(raw, dict) and isinstance(raw.get("$ref"), str):
            ref = raw["$ref"]
            if not ref.startswith("#"):
                logger.debug("Leaving external message reference %s unresolved", ref)
                return Message(name=self._next_anonymous_message(), ref=ref, raw=raw)
            pointer = ref
            if ref.startswith(MESSAGES_POINTER):
                name = _unescape_pointer_token(ref[len(MESSAGES_POINTER) :])
            raw = self._resolve_pointer(ref)

        if pointer in self._messages:
            message = self._messages[pointer]
            if ref and not message.ref:
                message.ref = ref
            return message

        if not isinstance(raw, dict):
            logger.warning("Message at %s could not be resolved", pointer)
            raw = {}

        message_name = name or raw.get("x-parser-message-name") or raw.get("name") or raw.get("messageId")
        message = Message(
            name=str(message_name) if message_name else self._next_anonymous_message(),
            message_id=raw.get("messageId"),
            title=raw.get("title"),
            schema_format=raw.get("schemaFormat"),
            content_type=raw.get("contentType"),
            extensions=_extensions(raw),
            ref=ref,
            raw=raw,
        )
        self._messages[pointer] = message

        if "payload" in raw:
            message.payload = self._parse_schema(raw["payload"], f"{pointer}/payload", avro=message.is_avro)
        return message

    def _next_anonymous_message(self) -> str:
        self._anonymous_message_count += 1
        return f"<anonymous-message-{self._anonymous_message_count}>"

    # -- schemas -------------------------------------------------------------

    def _parse_schema(self, raw: Any, pointer: str, schema_id: str | None = None, avro: bool = False) -> SchemaNode:
        """
        Parse a schema node, resolving local references.

        Args:
            raw: The schema fragment
            pointer: JSON pointer of the fragment
            schema_id: Identity to assign (component key), if known
            avro: True when the fragment is the payload of an Avro message

        Returns:
            The (possibly shared) SchemaNode for the fragment
        """
        ref = None
        if isinstance(raw, dict) and isinstance(raw.get("$ref"), str):
            ref = raw["$ref"]
            if not ref.startswith("#"):
                logger.debug("Leaving external schema reference %s unresolved", ref)
                return SchemaNode(ref=ref, raw=raw, source_path=pointer)
            pointer = ref
            if ref.startswith(SCHEMAS_POINTER):
                schema_id = _unescape_pointer_token(ref[len(SCHEMAS_POINTER) :])
            raw = self._resolve_pointer(ref)
            if raw is None:
                logger.warning("Schema reference %s could not be resolved", ref)
                return SchemaNode(ref=ref, source_path=pointer)

        if pointer in self._schemas:
            node = self._schemas[pointer]
            if ref and not node.ref:
                node.ref = ref
            return node

        if not isinstance(raw, dict):
            # Boolean schemas and other shorthands carry no structure
            node = SchemaNode(schema_id=schema_id or self._next_anonymous_schema(), ref=ref, source_path=pointer)
            self._schemas[pointer] = node
            return node

        if _is_avro_record(raw) or (avro and raw.get("type") == "record"):
            node = self._parse_avro_record(raw, pointer)
            node.ref = ref
            return node

        node = SchemaNode(
            schema_id=schema_id or raw.get("x-parser-schema-id"),
            type=raw.get("type"),
            format=raw.get("format"),
            title=raw.get("title"),
            description=raw.get("description"),
            json_id=raw.get("$id"),
            ref=ref,
            required=list(raw.get("required") or []),
            enum=list(raw["enum"]) if isinstance(raw.get("enum"), list) else None,
            minimum=raw.get("minimum"),
            maximum=raw.get("maximum"),
            default=raw.get("default"),
            extensions=_extensions(raw),
            raw=raw,
            source_path=pointer,
        )
        # Registered before the children so that cycles come back to this node
        self._schemas[pointer] = node
        if not node.schema_id:
            node.schema_id = self._next_anonymous_schema()

        properties = raw.get("properties")
        if isinstance(properties, dict):
            node.properties = {
                str(prop_name): self._parse_schema(prop, f"{pointer}/properties/{_escape_pointer_token(prop_name)}")
                for prop_name, prop in properties.items()
            }

        items = raw.get("items")
        if isinstance(items, list) and items:
            items = items[0]
        if isinstance(items, dict):
            node.items = self._parse_schema(items, f"{pointer}/items")

        additional = raw.get("additionalProperties")
        if isinstance(additional, dict):
            node.additional_properties = self._parse_schema(additional, f"{pointer}/additionalProperties")
        elif isinstance(additional, bool):
            node.additional_properties = additional

        node.all_of = self._parse_members(raw.get("allOf"), f"{pointer}/allOf")
        node.one_of = self._parse_members(raw.get("oneOf"), f"{pointer}/oneOf")
        node.any_of = self._parse_members(raw.get("anyOf"), f"{pointer}/anyOf")
        return node

    def _parse_members(self, members: Any, pointer: str) -> list[SchemaNode]:
        if not isinstance(members, list):
            return []
        return [self._parse_schema(member, f"{pointer}/{index}") for index, member in enumerate(members)]

    def _parse_avro_record(self, raw: dict[str, Any], pointer: str) -> SchemaNode:
        """Build a record node; its fields stay raw for the Avro resolver."""
        name = raw.get("name")
        namespace = raw.get("namespace")
        schema_id = f"{namespace}.{name}" if namespace and name else name
        node = SchemaNode(
            schema_id=schema_id or self._next_anonymous_schema(),
            type="record",
            title=raw.get("title"),
            description=raw.get("doc"),
            is_avro=True,
            name=name,
            namespace=namespace,
            fields=list(raw.get("fields") or []),
            extensions=_extensions(raw),
            raw=raw,
            source_path=pointer,
        )
        self._schemas[pointer] = node
        return node

    def _next_anonymous_schema(self) -> str:
        self._anonymous_schema_count += 1
        return f"<anonymous-schema-{self._anonymous_schema_count}>"


def load_contract(path: str | Path) -> Contract:
    """
    Load an AsyncAPI contract from a YAML or JSON file.

    Args:
        path: Path to a .yaml, .yml or .json document

    Returns:
        The parsed Contract

    Raises:
        OSError: If the file cannot be read
        ContractError: If the document is not valid YAML or not a mapping
    """
    path = Path(path)
    with open(path) as f:
        if path.suffix.lower() == ".json":
            document = json.load(f)
        else:
            try:
                document = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ContractError(f"Invalid YAML in {path}: {e}") from e
    logger.debug("Loaded contract document from %s", path)
    return ContractParser().parse(document)
