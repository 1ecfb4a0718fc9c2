"""
Artifact planning: decide which files a document produces for a framework.

One Artifact per (ArtifactSpec, scope item):
    tag        -> one per tag (controllers, API interfaces)
    schema     -> one per object schema (DTOs)
    enum       -> one per enum schema
    operation  -> one per operation that needs a validator
    global     -> exactly one (routes, readme)
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..errors import ScaffoldError
from ..frameworks.profiles import (
    SCOPE_ENUM,
    SCOPE_GLOBAL,
    SCOPE_OPERATION,
    SCOPE_SCHEMA,
    SCOPE_TAG,
)
from ..gen_logging import get_logger
from ..mapping import SchemaGraph
from .context import ContextBuilder

logger = get_logger(__name__)


@dataclass
class Artifact:
    kind: str
    path: str
    template: str
    context: Dict[str, Any] = field(default_factory=dict)
    subject: Optional[str] = None


def plan_artifacts(document, profile, config) -> List[Artifact]:
    """Return every artifact to render, in a stable order, minus skipped kinds."""
    builder = ContextBuilder(document, profile, config)
    skipped = set(config.skip_artifacts)
    graph = SchemaGraph(document)
    ordered_schemas = [document.schemas[name] for name in graph.generation_order()]
    by_tag = document.operations_by_tag()

    artifacts: List[Artifact] = []
    readme_specs = []
    for spec in profile.artifacts:
        if spec.kind in skipped:
            logger.debug(f"  Skipping artifact kind '{spec.kind}'")
            continue

        if spec.scope == SCOPE_TAG:
            for tag_class, operations in by_tag.items():
                context = (
                    builder.controller(tag_class, operations)
                    if spec.kind == "controller"
                    else builder.api_interface(tag_class, operations)
                )
                artifacts.append(Artifact(
                    spec.kind, profile.class_path(spec, tag_class), spec.template, context, tag_class
                ))

        elif spec.scope == SCOPE_SCHEMA:
            for schema in ordered_schemas:
                if schema.is_object:
                    artifacts.append(Artifact(
                        spec.kind, profile.class_path(spec, schema.class_name), spec.template,
                        builder.dto(schema), schema.name,
                    ))

        elif spec.scope == SCOPE_ENUM:
            for schema in ordered_schemas:
                if schema.is_enum:
                    artifacts.append(Artifact(
                        spec.kind, profile.class_path(spec, schema.class_name), spec.template,
                        builder.enum(schema), schema.name,
                    ))

        elif spec.scope == SCOPE_OPERATION:
            for operation in document.operations:
                if profile.has_validator(operation):
                    subject = profile.operation_class(operation)
                    artifacts.append(Artifact(
                        spec.kind, profile.class_path(spec, subject), spec.template,
                        builder.validator(operation), operation.operation_id,
                    ))

        elif spec.scope == SCOPE_GLOBAL:
            if spec.kind == "readme":
                # Rendered last so it can list every other file
                readme_specs.append(spec)
                continue
            artifacts.append(Artifact(spec.kind, spec.path, spec.template, builder.routes(), None))

        else:
            raise ScaffoldError(f"Unknown artifact scope '{spec.scope}' for kind '{spec.kind}'")

    for spec in readme_specs:
        artifacts.append(Artifact(spec.kind, spec.path, spec.template, builder.readme(artifacts), None))

    _check_unique_paths(artifacts)
    logger.debug(f"  Planned {len(artifacts)} artifact(s)")
    return artifacts


def _check_unique_paths(artifacts: List[Artifact]) -> None:
    seen: Dict[str, Artifact] = {}
    for artifact in artifacts:
        other = seen.get(artifact.path)
        if other is not None:
            raise ScaffoldError(
                f"Two artifacts map to the same file '{artifact.path}': "
                f"{other.kind} ({other.subject}) and {artifact.kind} ({artifact.subject})"
            )
        seen[artifact.path] = artifact
