"""
Pipeline - semantic resolution of AsyncAPI contracts.

This module resolves an event-driven API contract into an intermediate
representation in several phases:

1. Phase 1 (Contract): Parse the AsyncAPI document into an object model
2. Phase 2 (Schemas): Resolve record and JSON schemas into data classes
3. Phase 3 (Channels): Classify channel operations into handlers
4. Phase 4 (Consolidation): Group handlers by custom name, merge shared destinations
5. Phase 5 (Assembly): Derive imports, includes and binding properties
6. Phase 6 (Printers): Optional binding configuration files
"""

from __future__ import annotations

from .analyzer.ir_nodes import IR
from .backends import PropertiesBackend, YamlBackend
from .config import Binder, GeneratorConfig, View
from .contract import ContractParser, load_contract
from .errors import ContractError, InvalidBinderError, InvalidViewError
from .generator import PipelineGenerator

__all__ = [
    "PipelineGenerator",
    "GeneratorConfig",
    "Binder",
    "View",
    "IR",
    "ContractParser",
    "load_contract",
    "PropertiesBackend",
    "YamlBackend",
    "ContractError",
    "InvalidBinderError",
    "InvalidViewError",
]
