"""
Errors surfaced to callers of the pipeline.

Everything else (missing names, odd compositions, malformed bindings) is
recovered locally with a logged warning.
"""

from __future__ import annotations


class InvalidBinderError(ValueError):
    """Raised when the requested binder is not kafka, rabbit or solace.

    The binder decides which binding vocabulary is legal downstream, so it is
    validated before the contract is touched.
    """

    def __init__(self, binder: str):
        self.binder = binder
        super().__init__(f"Please provide a parameter named 'binder' with the value kafka, rabbit or solace (got {binder!r}).")


class InvalidViewError(ValueError):
    """Raised when the configured view is neither provider nor client."""

    def __init__(self, view: str):
        self.view = view
        super().__init__(f"Unknown view {view!r}: expected 'provider' or 'client'.")


class ContractError(ValueError):
    """Raised when a document cannot be read as an AsyncAPI contract."""
