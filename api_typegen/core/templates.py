"""
Jinja2 environment shared by the template-driven renderers.

Templates are looked up first among in-memory overrides, then in the
renderer's template directory. Undefined variables are errors.
"""

from pathlib import Path
from typing import Any, Dict, Optional

import jinja2
from jinja2 import ChoiceLoader, DictLoader, Environment, FileSystemLoader, StrictUndefined

from ..logging_config import get_logger
from .naming import field_name, struct_name, to_camel_case, to_pascal_case, to_snake_case

logger = get_logger(__name__)

NAMING_FILTERS = {
    "snake_case": to_snake_case,
    "camel_case": to_camel_case,
    "pascal_case": to_pascal_case,
    "struct_name": struct_name,
    "field_name": field_name,
}


class TemplateError(Exception):
    """A template is missing or failed to render."""

    pass


class TemplateEngine:
    """Jinja2 wrapper with the naming filters and in-memory overrides."""

    def __init__(self, template_dir: Optional[Path] = None):
        """
        Args:
            template_dir: Directory of ``.j2`` files; omitted or missing means
                in-memory templates only
        """
        self.template_dir = template_dir
        self._overrides = DictLoader({})

        loaders = [self._overrides]
        if template_dir is not None and template_dir.exists():
            loaders.append(FileSystemLoader(str(template_dir)))
        elif template_dir is not None:
            logger.warning(f"Template directory {template_dir} does not exist")

        self._env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=False,
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self._env.filters.update(NAMING_FILTERS)

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render a named template.

        Raises:
            TemplateError: If the template is missing, malformed or refers to
                an undefined variable
        """
        try:
            return self._env.get_template(template_name).render(**context)
        except jinja2.TemplateError as e:
            logger.error(f"Template {template_name} failed: {e}")
            raise TemplateError(f"Failed to render template {template_name}: {e}") from e

    def render_string(self, template_string: str, context: Dict[str, Any]) -> str:
        try:
            return self._env.from_string(template_string).render(**context)
        except jinja2.TemplateError as e:
            raise TemplateError(f"Failed to render template string: {e}") from e

    def add_template(self, name: str, content: str):
        """Register an in-memory template; it shadows a file of the same name."""
        self._overrides.mapping[name] = content

    def template_exists(self, template_name: str) -> bool:
        return template_name in self._env.list_templates()


def create_template_engine(template_dir: Optional[Path] = None) -> TemplateEngine:
    """Create a template engine, optionally backed by a template directory."""
    return TemplateEngine(template_dir)
