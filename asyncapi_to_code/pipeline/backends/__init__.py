"""
Configuration backends.

Contains printers for the Spring Cloud Stream binding configuration.
"""

from __future__ import annotations

from .base import ConfigBackend
from .properties_backend import PropertiesBackend
from .yaml_backend import YamlBackend

__all__ = [
    "ConfigBackend",
    "PropertiesBackend",
    "YamlBackend",
]
