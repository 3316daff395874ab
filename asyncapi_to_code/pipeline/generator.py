"""
Pipeline generator - orchestrates the resolution of one contract.

Phases:
1. Record schemas (Avro) into data classes
2. JSON schemas into data classes
3. Channel operations into raw handlers
4. Custom-name grouping, then destination consolidation
5. Assembly of imports, includes and binding properties into the IR
"""

from __future__ import annotations

import logging

from .analyzer.assembler import ResultAssembler, resolve_package_name
from .analyzer.avro_resolver import AvroSchemaResolver
from .analyzer.channel_classifier import ChannelClassifier
from .analyzer.consolidator import consolidate, group_by_custom_name
from .analyzer.context import ResolverContext
from .analyzer.ir_nodes import IR
from .analyzer.schema_resolver import SchemaModelResolver
from .config import GeneratorConfig
from .contract.nodes import Contract

logger = logging.getLogger(__name__)


class PipelineGenerator:
    """
    Main entry point for contract resolution.

    Every call to generate() builds a fresh ResolverContext, so a generator
    can be run repeatedly and several generators can share a contract.
    """

    def __init__(self, contract: Contract, config: GeneratorConfig | None = None):
        """
        Initialize the generator.

        Args:
            contract: The parsed contract
            config: Generator configuration (defaults apply when None)
        """
        self.contract = contract
        self.config = config or GeneratorConfig()

    def generate(self) -> IR:
        """
        Resolve the contract into its IR.

        Returns:
            The IR

        Raises:
            InvalidBinderError: If the configured binder is not supported
            InvalidViewError: If the configured view is unknown
        """
        self.config.validate()

        context = ResolverContext(package_name=resolve_package_name(self.contract, self.config))

        record_schemas = AvroSchemaResolver(context).resolve(self.contract)

        schema_resolver = SchemaModelResolver(context)
        schema_resolver.resolve(self.contract)
        json_schemas = schema_resolver.classify_all(self.contract)

        classifier = ChannelClassifier(context, self.config)
        handlers = classifier.classify(self.contract)
        handlers = group_by_custom_name(handlers, classifier.view)
        handlers = consolidate(handlers)

        ir = ResultAssembler(context, self.config).assemble(
            self.contract, classifier.view, record_schemas + json_schemas, handlers
        )

        logger.info(
            "Resolved %r: %d data class(es), %d handler(s), %s view",
            ir.title,
            len(ir.schemas),
            len(ir.handlers),
            ir.view,
        )
        return ir
