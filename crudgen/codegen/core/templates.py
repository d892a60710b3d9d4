"""
Jinja2 environment used to render artifacts.

Undefined variables are errors: a template that references a missing
context key fails instead of emitting blanks. Every Jinja2 failure surfaces
as a crudgen TemplateError.
"""

import json
from typing import Dict, Any, Optional
from pathlib import Path

from jinja2 import (
    ChoiceLoader,
    DictLoader,
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateNotFound,
)
from jinja2 import TemplateError as JinjaTemplateError

from .errors import TemplateError


class TemplateEngine:
    """Jinja2 environment with in-memory overrides and Go/SQL filters."""

    def __init__(self, template_dir: Optional[Path] = None):
        self.template_dir = template_dir
        self._memory_templates: Dict[str, str] = {}
        self._env = None
        self._setup_environment()

    def _setup_environment(self):
        loaders = [DictLoader(self._memory_templates)]
        if self.template_dir and self.template_dir.exists():
            loaders.append(FileSystemLoader(str(self.template_dir)))

        self._env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=False,
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

        self._env.filters["comment"] = self._comment_filter
        self._env.filters["go_string"] = self._go_string_filter
        self._env.filters["to_json"] = self._to_json_filter

    def render_template(self, template_name: str, context: Dict[str, Any],
                        artifact: Optional[str] = None) -> str:
        """
        Render a template with the given context.

        Args:
            template_name: Name of template file
            context: Variables to pass to template
            artifact: Artifact kind being rendered, attached to errors

        Returns:
            Rendered template content

        Raises:
            TemplateError: If the template is missing or fails to render
        """
        try:
            template = self._env.get_template(template_name)
            return template.render(**context)
        except TemplateNotFound as e:
            raise TemplateError(
                f"Template not found: {e.name}", artifact=artifact
            ) from e
        except JinjaTemplateError as e:
            raise TemplateError(
                f"Failed to render template {template_name}: {e}", artifact=artifact
            ) from e

    def render_string(self, template_string: str, context: Dict[str, Any]) -> str:
        """Render template source held in a string."""
        try:
            template = self._env.from_string(template_string)
            return template.render(**context)
        except JinjaTemplateError as e:
            raise TemplateError(f"Failed to render template string: {e}") from e

    def add_template(self, name: str, content: str):
        """
        Add an in-memory template. In-memory templates shadow files.

        Args:
            name: Template name
            content: Template content
        """
        self._memory_templates[name] = content
        if self._env.cache is not None:
            self._env.cache.clear()

    def template_exists(self, template_name: str) -> bool:
        """Check if a template exists."""
        try:
            self._env.get_template(template_name)
            return True
        except TemplateNotFound:
            return False

    # Filters

    def _comment_filter(self, value: str, style: str = "//") -> str:
        """Prefix every line with a comment marker; blank lines get a bare marker."""
        lines = str(value).split("\n")
        return "\n".join(f"{style} {line}" if line.strip() else style for line in lines)

    def _go_string_filter(self, value: str) -> str:
        """Quote a value as a Go interpreted string literal."""
        return json.dumps(str(value))

    def _to_json_filter(self, value: Any, indent: Optional[int] = None) -> str:
        return json.dumps(value, indent=indent)


def create_template_engine(template_dir: Optional[Path] = None) -> TemplateEngine:
    """Create a template engine, optionally backed by a template directory."""
    return TemplateEngine(template_dir)
