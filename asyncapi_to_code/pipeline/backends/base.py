"""
Base class for binding configuration backends.

Defines the interface that all configuration printers must implement.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

import jinja2

from ..analyzer.ir_nodes import IR
from ..config import GeneratorConfig


class ConfigBackend(ABC):
    """Abstract base class for binding configuration printers."""

    # Template directory name (empty when the backend renders without templates)
    TEMPLATE_DIR: str = ""

    # File extension
    FILE_EXTENSION: str = ""

    def __init__(self, config: GeneratorConfig, command_line: str | None = None):
        """
        Initialize the backend.

        Args:
            config: Generator configuration
            command_line: Command line echoed in the generation comment
        """
        self.config = config
        self.command_line = command_line
        self.jinja_env = None
        if self.TEMPLATE_DIR:
            self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        template_dir = Path(__file__).parent.parent.parent / "templates" / self.TEMPLATE_DIR
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
            keep_trailing_newline=True,
        )

    @abstractmethod
    def generate(self, ir: IR) -> str:
        """
        Generate the configuration file from IR.

        Args:
            ir: The intermediate representation

        Returns:
            File contents as a string
        """

    def generation_comment(self, ir: IR) -> str | None:
        """Comment lines (without the comment marker) describing how the file was produced."""
        if not self.config.add_generation_comment:
            return None
        lines = [f"Generated from {ir.title or 'an AsyncAPI contract'} {ir.version}".rstrip()]
        if self.command_line:
            lines.append(f"by command: {self.command_line}")
        return "\n".join(lines)
