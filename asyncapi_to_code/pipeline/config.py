"""
Configuration for the resolution pipeline.

Caller-supplied options that change how a contract is resolved. The contract
itself can override some of them (see the view resolution in the classifier).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .errors import InvalidBinderError, InvalidViewError


class Binder(str, Enum):
    """Spring Cloud Stream binder the generated application targets."""

    KAFKA = "kafka"
    RABBIT = "rabbit"
    SOLACE = "solace"


class View(str, Enum):
    """Which side of a publish/subscribe pair produces messages.

    PROVIDER treats publish operations as the producing side, CLIENT inverts it.
    """

    PROVIDER = "provider"
    CLIENT = "client"


@dataclass
class GeneratorConfig:
    """Configuration options for contract resolution."""

    # Binder vocabulary used for application properties (kafka, rabbit or solace)
    binder: str = Binder.KAFKA.value

    # Direction view; None lets the contract's x-view or the default decide
    view: str | None = None

    # Package the data classes are generated into (None = com.company fallback)
    package_name: str | None = None

    # How dynamic (parameterized) destinations are published
    dynamic_type: str = "streamBridge"

    # Generate reactive (Flux based) handlers
    reactive: bool = False

    # Map destination parameters to message headers on consumers
    parameters_to_headers: bool = False

    # Add generation comment at top of printed files
    add_generation_comment: bool = True

    def validate(self) -> None:
        """Check the options that must be valid before any processing.

        Raises:
            InvalidBinderError: If the binder is not kafka, rabbit or solace
            InvalidViewError: If the view is set to an unknown value
        """
        if self.binder not in {binder.value for binder in Binder}:
            raise InvalidBinderError(self.binder)
        if self.view is not None and self.view not in {view.value for view in View}:
            raise InvalidViewError(self.view)

    @staticmethod
    def from_dict(d: dict) -> GeneratorConfig:
        """Create a config from a dictionary."""
        config = GeneratorConfig()
        for k, v in d.items():
            if hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "binder": self.binder,
            "view": self.view,
            "package_name": self.package_name,
            "dynamic_type": self.dynamic_type,
            "reactive": self.reactive,
            "parameters_to_headers": self.parameters_to_headers,
            "add_generation_comment": self.add_generation_comment,
        }
