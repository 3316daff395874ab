"""
Contract object model and loader.
"""

from .nodes import (
    PUBLISH,
    SUBSCRIBE,
    Channel,
    Contract,
    Info,
    Message,
    Operation,
    Parameter,
    SchemaNode,
    iter_schema_properties,
)
from .parser import ContractParser, load_contract

__all__ = [
    "PUBLISH",
    "SUBSCRIBE",
    "Channel",
    "Contract",
    "ContractParser",
    "Info",
    "Message",
    "Operation",
    "Parameter",
    "SchemaNode",
    "iter_schema_properties",
    "load_contract",
]
