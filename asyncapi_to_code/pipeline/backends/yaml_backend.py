"""
application.yml printer.

Nests the dotted property keys of the IR into a mapping and dumps it with
PyYAML, keeping insertion order.
"""

from __future__ import annotations

import logging
from typing import Any

import yaml

from ..analyzer.ir_nodes import IR
from .base import ConfigBackend

logger = logging.getLogger(__name__)


def nest_properties(properties: dict[str, str]) -> dict[str, Any]:
    """
    Turn dotted keys into nested mappings.

    Examples:
        {"a.b.c": "1", "a.d": "2"} -> {"a": {"b": {"c": "1"}, "d": "2"}}

    Args:
        properties: Flat mapping of dotted keys

    Returns:
        Nested mapping, key order preserved
    """
    nested: dict[str, Any] = {}
    for key, value in properties.items():
        *parents, leaf = key.split(".")
        current = nested
        for part in parents:
            child = current.setdefault(part, {})
            if not isinstance(child, dict):
                logger.warning("Property %s conflicts with a scalar value at %s", key, part)
                break
            current = child
        else:
            current[leaf] = value
    return nested


class YamlBackend(ConfigBackend):
    """Renders the binding configuration as an application.yml file."""

    FILE_EXTENSION = "yml"

    def generate(self, ir: IR) -> str:
        document = yaml.safe_dump(nest_properties(ir.application_properties), sort_keys=False, default_flow_style=False)
        comment = self.generation_comment(ir)
        if not comment:
            return document
        header = "".join(f"# {line}\n" for line in comment.splitlines())
        return header + document
