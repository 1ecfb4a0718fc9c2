"""
Jinja2 template set loading and rendering.

Lookup order for a template name (first hit wins):
    <override>/<framework>/   user template set for this framework
    <override>/               user templates shared by all frameworks
    templates/<framework>/    built-in framework templates
    templates/common/         built-in shared templates
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from jinja2 import (
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateError,
    TemplateNotFound,
)

from ..errors import TemplateSetError
from ..gen_logging import get_logger
from ..php import camel_case, pascal_case, php_literal, snake_case
from .formatters import format_generated_code

logger = get_logger(__name__)

BUILTIN_TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"


def _to_yaml(value) -> str:
    return yaml.safe_dump(value, sort_keys=False, default_flow_style=False)


def _comment_safe(text) -> str:
    # "Accept */*" would close the docblock
    return str(text or "").replace("*/", "*\\/")


def _doc_line(text) -> str:
    """Free text folded onto one docblock line."""
    return " ".join(_comment_safe(text).split())


def _docblock(text: str, indent: int = 4) -> str:
    """Render free text as docblock body lines (' * ...'), one per source line."""
    pad = " " * indent
    lines = [line.rstrip() for line in _comment_safe(text).strip().splitlines()]
    return "\n".join(f"{pad} * {line}" if line else f"{pad} *" for line in lines)


def template_search_path(framework: str, override_dir: Optional[Path] = None) -> List[Path]:
    paths = []
    if override_dir is not None:
        override_dir = Path(override_dir)
        if not override_dir.is_dir():
            raise TemplateSetError(f"Template directory '{override_dir}' does not exist")
        paths += [override_dir / framework, override_dir]
    paths += [BUILTIN_TEMPLATES_DIR / framework, BUILTIN_TEMPLATES_DIR / "common"]
    return [p for p in paths if p.is_dir()]


class TemplateRenderer:
    """Renders artifacts with the template set of one framework profile."""

    def __init__(self, profile, override_dir=None):
        self.profile = profile
        self.search_path = template_search_path(profile.name, override_dir)
        self.env = Environment(
            loader=ChoiceLoader([FileSystemLoader(str(p)) for p in self.search_path]),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
            autoescape=False,
        )
        self.env.filters["php"] = php_literal
        self.env.filters["camel"] = camel_case
        self.env.filters["pascal"] = pascal_case
        self.env.filters["snake"] = snake_case
        self.env.filters["to_yaml"] = _to_yaml
        self.env.filters["docblock"] = _docblock
        self.env.filters["doc_line"] = _doc_line

    def template_source(self, name: str) -> str:
        """Which directory a template resolves from (for inspect/debug output)."""
        for directory in self.search_path:
            if (directory / name).is_file():
                return str(directory)
        raise TemplateSetError(f"Template '{name}' not found for framework '{self.profile.name}'")

    def render(self, template_name: str, context: Dict[str, Any]) -> str:
        try:
            template = self.env.get_template(template_name)
            text = template.render(**context)
        except TemplateNotFound as e:
            raise TemplateSetError(
                f"Template '{e.name}' not found for framework '{self.profile.name}' "
                f"(searched: {', '.join(str(p) for p in self.search_path)})"
            ) from e
        except TemplateError as e:
            raise TemplateSetError(f"Failed to render '{template_name}': {e}") from e
        return format_generated_code(text, php=template_name.endswith(".php.jinja"))


def render_artifacts(artifacts, renderer: TemplateRenderer) -> Dict[str, str]:
    """Render every artifact; returns {relative path: file content} in plan order."""
    rendered: Dict[str, str] = {}
    for artifact in artifacts:
        rendered[artifact.path] = renderer.render(artifact.template, artifact.context)
        logger.debug(f"    [RENDER] {artifact.kind:<14} {artifact.path}")
    return rendered
