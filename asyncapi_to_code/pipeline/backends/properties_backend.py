"""
application.properties printer.
"""

from __future__ import annotations

from ..analyzer.ir_nodes import IR
from .base import ConfigBackend


def escape_property_value(value: str) -> str:
    """Escape a value for the java.util.Properties format."""
    escaped = value.replace("\\", "\\\\").replace("\n", "\\n")
    if escaped.startswith(" "):
        escaped = "\\" + escaped
    return escaped


class PropertiesBackend(ConfigBackend):
    """Renders the binding configuration as an application.properties file."""

    TEMPLATE_DIR = "properties"
    FILE_EXTENSION = "properties"

    def __init__(self, config, command_line=None):
        super().__init__(config, command_line)
        self.jinja_env.filters["property_value"] = escape_property_value
        self.template = self.jinja_env.get_template("application.properties.jinja2")

    def generate(self, ir: IR) -> str:
        comment = self.generation_comment(ir)
        return self.template.render(
            generation_comment=comment.splitlines() if comment else [],
            properties=ir.application_properties,
            send_handlers=[handler for handler in ir.handlers if handler.send_method_name],
        )
