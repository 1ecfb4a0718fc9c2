"""
Coverage checklist for generated output.

Scores an output directory against the document it was generated from:
every tag, operation, validator and reachable schema must show up in the
files the framework profile says it should.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from .gen_logging import get_logger
from .generators.context import route_path
from .mapping import SchemaGraph
from .php import php_string

logger = get_logger(__name__)

CATEGORY_TAGS = "tags"
CATEGORY_OPERATIONS = "operations"
CATEGORY_ROUTES = "routes"
CATEGORY_VALIDATORS = "validators"
CATEGORY_SCHEMAS = "schemas"
CATEGORY_PROPERTIES = "properties"


@dataclass
class ChecklistItem:
    category: str
    subject: str
    requirement: str
    passed: bool
    detail: str = ""


@dataclass
class ChecklistReport:
    framework: str
    items: List[ChecklistItem] = field(default_factory=list)

    @property
    def score(self) -> float:
        """Fraction of items passed; an empty checklist scores 1.0."""
        if not self.items:
            return 1.0
        return sum(1 for item in self.items if item.passed) / len(self.items)

    @property
    def failed(self) -> List[ChecklistItem]:
        return [item for item in self.items if not item.passed]

    def by_category(self) -> Dict[str, List[ChecklistItem]]:
        grouped: Dict[str, List[ChecklistItem]] = {}
        for item in self.items:
            grouped.setdefault(item.category, []).append(item)
        return grouped

    def add(self, category, subject, requirement, passed, detail="") -> None:
        self.items.append(ChecklistItem(category, subject, requirement, bool(passed), detail))


class _Files:
    """Cached reads below the output directory."""

    def __init__(self, root: Path):
        self.root = root
        self._cache: Dict[str, Optional[str]] = {}

    def read(self, rel_path: str) -> Optional[str]:
        if rel_path not in self._cache:
            path = self.root / rel_path
            self._cache[rel_path] = path.read_text(encoding="utf-8") if path.is_file() else None
        return self._cache[rel_path]


def _declares_method(text: Optional[str], method: str) -> bool:
    return text is not None and f"function {method}(" in text


def _route_declared(text: Optional[str], routes_file: str, path: str, http_method: str) -> bool:
    if text is None:
        return False
    if routes_file.endswith((".yaml", ".yml")):
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as e:
            logger.debug(f"  {routes_file} is not valid YAML: {e}")
            return False
        if not isinstance(data, dict):
            return False
        return any(
            isinstance(entry, dict)
            and entry.get("path") == path
            and http_method in entry.get("methods", [])
            for entry in data.values()
        )
    quoted_path = php_string(path)
    verb_call = f"{http_method.lower()}("
    quoted_verb = php_string(http_method)
    return any(
        quoted_path in line and (verb_call in line or quoted_verb in line)
        for line in text.splitlines()
    )


def evaluate_output(document, profile, out_dir, config) -> ChecklistReport:
    """Check generated files in `out_dir` against `document` for `profile`."""
    files = _Files(Path(out_dir))
    report = ChecklistReport(framework=profile.name)
    skipped = set(config.skip_artifacts)

    def spec_for(kind):
        spec = profile.artifact(kind)
        return None if spec is None or kind in skipped else spec

    controller_spec = spec_for("controller")
    interface_spec = spec_for("api_interface")
    validator_spec = spec_for("validator")
    routes_spec = spec_for("routes")
    dto_spec = spec_for("dto")
    enum_spec = spec_for("enum")

    # Tags
    for tag_class, operations in document.operations_by_tag().items():
        controller_path = profile.class_path(controller_spec, tag_class) if controller_spec else None
        interface_path = profile.class_path(interface_spec, tag_class) if interface_spec else None
        if controller_path:
            report.add(CATEGORY_TAGS, tag_class, "controller file exists",
                       files.read(controller_path) is not None, controller_path)
        if interface_path:
            report.add(CATEGORY_TAGS, tag_class, "API interface file exists",
                       files.read(interface_path) is not None, interface_path)

        # Operations
        for op in operations:
            if controller_path:
                report.add(CATEGORY_OPERATIONS, op.operation_id, "controller method",
                           _declares_method(files.read(controller_path), op.method_name),
                           f"{controller_path}: function {op.method_name}(")
            if interface_path:
                report.add(CATEGORY_OPERATIONS, op.operation_id, "interface method",
                           _declares_method(files.read(interface_path), op.method_name),
                           f"{interface_path}: function {op.method_name}(")
            if routes_spec:
                path = route_path(op)
                report.add(CATEGORY_ROUTES, op.operation_id, "route registered",
                           _route_declared(files.read(routes_spec.path), routes_spec.path, path, op.http_method),
                           f"{op.http_method} {path} in {routes_spec.path}")
            if validator_spec and profile.has_validator(op):
                validator_path = profile.class_path(validator_spec, profile.operation_class(op))
                report.add(CATEGORY_VALIDATORS, op.operation_id, "validator file exists",
                           files.read(validator_path) is not None, validator_path)

    # Schemas reachable from operations
    graph = SchemaGraph(document)
    for name in sorted(graph.operation_schemas()):
        schema = document.schema(name)
        if schema.is_enum and enum_spec:
            enum_path = profile.class_path(enum_spec, schema.class_name)
            report.add(CATEGORY_SCHEMAS, name, "enum file exists", files.read(enum_path) is not None, enum_path)
        elif schema.is_object and dto_spec:
            dto_path = profile.class_path(dto_spec, schema.class_name)
            text = files.read(dto_path)
            report.add(CATEGORY_SCHEMAS, name, "DTO file exists", text is not None, dto_path)
            if text is None:
                continue
            for prop in schema.properties:
                report.add(CATEGORY_PROPERTIES, f"{name}.{prop.name}", "DTO declares property",
                           f"${prop.php_name}" in text, dto_path)

    logger.debug(f"  Checklist: {len(report.items) - len(report.failed)}/{len(report.items)} passed")
    return report
