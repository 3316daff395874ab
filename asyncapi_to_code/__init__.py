"""AsyncAPI to Code

A Python package resolving AsyncAPI contracts into an intermediate
representation of data classes and Spring Cloud Stream message handlers,
with printers for the binding configuration.
"""

__version__ = "0.1.0"

from .pipeline import (
    IR,
    Binder,
    ContractError,
    ContractParser,
    GeneratorConfig,
    InvalidBinderError,
    InvalidViewError,
    PipelineGenerator,
    PropertiesBackend,
    View,
    YamlBackend,
    load_contract,
)

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
