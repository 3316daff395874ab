"""
Result assembler.

Derives what the application printer needs from the final handlers
(imports, feature flags and binding properties) and builds the IR.
"""

from __future__ import annotations

import logging

from ..config import Binder, GeneratorConfig
from ..contract.nodes import Contract
from .context import ResolverContext
from .ir_nodes import IR, Handler, HandlerKind, ModelSchema
from .type_mapping import MESSAGE_TYPE, OBJECT_TYPE, STRING_TYPE, is_builtin_type, unwrap_generic

logger = logging.getLogger(__name__)

FALLBACK_PACKAGE = "com.company"

FUNCTION_DEFINITION_KEY = "spring.cloud.function.definition"
BINDINGS_PREFIX = "spring.cloud.stream.bindings"

# Handler kinds registered as functions with Spring Cloud Function
DEFINED_KINDS = (HandlerKind.SUPPLIER, HandlerKind.CONSUMER, HandlerKind.FUNCTION)


def resolve_package_name(contract: Contract, config: GeneratorConfig) -> str | None:
    """
    Resolve the package the application and its data classes live in.

    The sources are evaluated in order: the configured package name, then the
    contract's info x-java-package. None when neither is set.
    """
    sources = (config.package_name, contract.info.extension("x-java-package"))
    return next((str(source) for source in sources if source), None)


class ResultAssembler:
    """Builds the IR from resolved schemas and consolidated handlers."""

    def __init__(self, context: ResolverContext, config: GeneratorConfig):
        self.context = context
        self.config = config

    def cross_reference_imports(self, handlers: list[Handler]) -> list[str]:
        """
        Fully qualified payload types the application must import.

        Args:
            handlers: The final handlers

        Returns:
            Sorted, de-duplicated import list
        """
        imports: set[str] = set()
        for handler in handlers:
            for payload in (handler.input_payload, handler.output_payload):
                if not payload or payload in (STRING_TYPE, MESSAGE_TYPE, OBJECT_TYPE):
                    continue
                type_name = unwrap_generic(payload)
                if is_builtin_type(type_name) or "anonymous" in type_name.lower():
                    continue
                if self.context.is_avro_class(type_name):
                    qualified = self.context.avro_import(type_name)
                    if qualified:
                        imports.add(qualified)
                    continue
                if self.context.package_name:
                    # Generated into the application's own package
                    continue
                imports.add(f"{FALLBACK_PACKAGE}.{type_name}")
        return sorted(imports)

    def extra_includes(self, handlers: list[Handler]) -> dict[str, bool]:
        """Feature flags telling the printer which imports and helpers it needs."""
        kinds = {handler.kind for handler in handlers}
        has_bean = HandlerKind.CONSUMER in kinds or HandlerKind.SUPPLIER in kinds
        return {
            "need_function": HandlerKind.FUNCTION in kinds,
            "need_consumer": HandlerKind.CONSUMER in kinds,
            "need_supplier": HandlerKind.SUPPLIER in kinds,
            "need_bean": has_bean,
            "need_message": any(handler.is_multi_message or handler.dynamic for handler in handlers),
            "dynamic": any(handler.dynamic for handler in handlers),
        }

    def application_properties(self, handlers: list[Handler]) -> dict[str, str]:
        """
        Flattened Spring Cloud Stream binding configuration.

        Send handlers publish through a dynamic bridge and get no binding.

        Args:
            handlers: The final handlers

        Returns:
            Ordered mapping of dotted property keys to values
        """
        properties: dict[str, str] = {}
        definitions = [handler.name for handler in handlers if handler.kind in DEFINED_KINDS]
        if definitions:
            properties[FUNCTION_DEFINITION_KEY] = ";".join(definitions)

        for handler in handlers:
            if handler.kind == HandlerKind.SUPPLIER:
                self._add_binding(properties, f"{handler.name}-out-0", handler.binding_destination)
            elif handler.kind == HandlerKind.CONSUMER:
                self._add_binding(properties, f"{handler.name}-in-0", self._input_destination(handler), handler.group)
            elif handler.kind == HandlerKind.FUNCTION:
                self._add_binding(properties, f"{handler.name}-in-0", self._input_destination(handler), handler.group)
                self._add_binding(properties, f"{handler.name}-out-0", handler.output_destination)
        return properties

    def _input_destination(self, handler: Handler) -> str | None:
        if handler.queue_name and handler.topic_subscriptions:
            return ",".join(handler.topic_subscriptions)
        return handler.input_destination or handler.binding_destination

    def _add_binding(
        self, properties: dict[str, str], binding: str, destination: str | None, group: str | None = None
    ) -> None:
        prefix = f"{BINDINGS_PREFIX}.{binding}"
        if destination:
            properties[f"{prefix}.destination"] = destination
        if group:
            properties[f"{prefix}.group"] = group
        if self.config.binder == Binder.SOLACE.value:
            properties[f"{prefix}.binder"] = Binder.SOLACE.value

    def assemble(self, contract: Contract, view: str, schemas: list[ModelSchema], handlers: list[Handler]) -> IR:
        """
        Build the IR.

        Args:
            contract: The parsed contract
            view: The resolved view
            schemas: Data classes (record classes first)
            handlers: The final handlers

        Returns:
            The complete IR
        """
        names = [handler.name for handler in handlers]
        for name in sorted({name for name in names if names.count(name) > 1}):
            logger.warning("Handler name %s is used more than once", name)

        return IR(
            title=contract.info.title,
            version=contract.info.version,
            view=view,
            package_name=self.context.package_name,
            schemas=list(schemas),
            handlers=list(handlers),
            cross_reference_imports=self.cross_reference_imports(handlers),
            extra_includes=self.extra_includes(handlers),
            application_properties=self.application_properties(handlers),
        )
