"""Artifact planning, rendering and writing."""

from .artifacts import Artifact, plan_artifacts
from .context import ContextBuilder, php_uses, route_path
from .formatters import format_generated_code
from .renderer import BUILTIN_TEMPLATES_DIR, TemplateRenderer, render_artifacts, template_search_path
from .writer import WriteReport, is_ignored, read_ignore_patterns, read_manifest, write_artifacts

__all__ = [
    "Artifact",
    "BUILTIN_TEMPLATES_DIR",
    "ContextBuilder",
    "TemplateRenderer",
    "WriteReport",
    "format_generated_code",
    "is_ignored",
    "php_uses",
    "plan_artifacts",
    "read_ignore_patterns",
    "read_manifest",
    "render_artifacts",
    "route_path",
    "template_search_path",
    "write_artifacts",
]
