"""
Framework profiles: which artifacts a framework gets, where they live and
which template renders them.

A profile is pure data. The templates under templates/<framework>/ supply
the framework-specific source text; templates/common/ holds the pieces
shared by every framework (interfaces, DTOs, enums, the API readme).
"""

from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Dict, List, Optional

from ..errors import ConfigError
from ..php import pascal_case

# Artifact scopes
SCOPE_TAG = "tag"
SCOPE_SCHEMA = "schema"
SCOPE_ENUM = "enum"
SCOPE_OPERATION = "operation"
SCOPE_GLOBAL = "global"


@dataclass(frozen=True)
class ArtifactSpec:
    """One kind of generated file."""
    kind: str
    template: str
    scope: str
    namespace: Optional[str] = None  # relative to the root namespace
    suffix: str = ""
    path: Optional[str] = None  # fixed output path for global artifacts


@dataclass
class FrameworkProfile:
    name: str
    label: str
    src_dir: str
    rule_dialect: str  # laravel | symfony | respect
    upload_class: str
    response_class: str
    artifacts: List[ArtifactSpec] = field(default_factory=list)
    validates_body: bool = True
    description: str = ""

    def artifact(self, kind: str) -> Optional[ArtifactSpec]:
        for spec in self.artifacts:
            if spec.kind == kind:
                return spec
        return None

    @property
    def kinds(self) -> List[str]:
        return [spec.kind for spec in self.artifacts]

    def has_validator(self, operation) -> bool:
        """Whether `operation` gets an artifact of the 'validator' kind."""
        if operation.query_params:
            return True
        return self.validates_body and operation.request_body is not None

    def class_name(self, spec: ArtifactSpec, subject_class: str) -> str:
        return f"{subject_class}{spec.suffix}"

    def namespace(self, spec: ArtifactSpec, root_namespace: str) -> str:
        if not spec.namespace:
            return root_namespace
        return f"{root_namespace}\\{spec.namespace}"

    def fqcn(self, spec: ArtifactSpec, root_namespace: str, subject_class: str) -> str:
        return f"{self.namespace(spec, root_namespace)}\\{self.class_name(spec, subject_class)}"

    def class_path(self, spec: ArtifactSpec, subject_class: str) -> str:
        """PSR-4 path of a class artifact relative to the project root."""
        parts = [self.src_dir] + (spec.namespace.split("\\") if spec.namespace else [])
        return str(PurePosixPath(*parts, f"{self.class_name(spec, subject_class)}.php"))

    def operation_class(self, operation) -> str:
        """Subject class used for per-operation artifacts."""
        return pascal_case(operation.method_name)


def _common_artifacts(src_layout: Dict[str, str]) -> List[ArtifactSpec]:
    return [
        ArtifactSpec("api_interface", "api_interface.php.jinja", SCOPE_TAG, src_layout["api"], "ApiInterface"),
        ArtifactSpec("dto", "dto.php.jinja", SCOPE_SCHEMA, src_layout["dto"]),
        ArtifactSpec("enum", "enum.php.jinja", SCOPE_ENUM, src_layout["enum"]),
        ArtifactSpec("readme", "README.md.jinja", SCOPE_GLOBAL, path="docs/API.md"),
    ]


LARAVEL = FrameworkProfile(
    name="laravel",
    label="Laravel",
    src_dir="app",
    rule_dialect="laravel",
    upload_class="\\Illuminate\\Http\\UploadedFile",
    response_class="Illuminate\\Http\\JsonResponse",
    description="Controllers, FormRequest validators and routes/api.php",
    artifacts=[
        ArtifactSpec("controller", "controller.php.jinja", SCOPE_TAG, "Http\\Controllers", "Controller"),
        ArtifactSpec("validator", "validator.php.jinja", SCOPE_OPERATION, "Http\\Requests", "Request"),
        ArtifactSpec("routes", "routes.php.jinja", SCOPE_GLOBAL, path="routes/api.php"),
    ] + _common_artifacts({"api": "Contracts\\Api", "dto": "DTO", "enum": "Enums"}),
)

LUMEN = FrameworkProfile(
    name="lumen",
    label="Lumen",
    src_dir="app",
    rule_dialect="laravel",
    upload_class="\\Illuminate\\Http\\UploadedFile",
    response_class="Illuminate\\Http\\JsonResponse",
    description="Controllers using $this->validate(), rule classes and routes/web.php",
    artifacts=[
        ArtifactSpec("controller", "controller.php.jinja", SCOPE_TAG, "Http\\Controllers", "Controller"),
        ArtifactSpec("validator", "validator.php.jinja", SCOPE_OPERATION, "Http\\Validators", "Validator"),
        ArtifactSpec("routes", "routes.php.jinja", SCOPE_GLOBAL, path="routes/web.php"),
    ] + _common_artifacts({"api": "Contracts\\Api", "dto": "DTO", "enum": "Enums"}),
)

SYMFONY = FrameworkProfile(
    name="symfony",
    label="Symfony",
    src_dir="src",
    rule_dialect="symfony",
    upload_class="\\Symfony\\Component\\HttpFoundation\\File\\UploadedFile",
    response_class="Symfony\\Component\\HttpFoundation\\JsonResponse",
    validates_body=False,
    description="Controllers with MapRequestPayload/MapQueryString, Assert DTOs and YAML routes",
    artifacts=[
        ArtifactSpec("controller", "controller.php.jinja", SCOPE_TAG, "Controller", "Controller"),
        ArtifactSpec("validator", "validator.php.jinja", SCOPE_OPERATION, "Dto\\Query", "Query"),
        ArtifactSpec("routes", "routes.yaml.jinja", SCOPE_GLOBAL, path="config/routes/api.yaml"),
    ] + _common_artifacts({"api": "Api", "dto": "Dto", "enum": "Enum"}),
)

SLIM = FrameworkProfile(
    name="slim",
    label="Slim",
    src_dir="src",
    rule_dialect="respect",
    upload_class="\\Psr\\Http\\Message\\UploadedFileInterface",
    response_class="Psr\\Http\\Message\\ResponseInterface",
    description="PSR-7 controllers, Respect\\Validation validators and config/routes.php",
    artifacts=[
        ArtifactSpec("controller", "controller.php.jinja", SCOPE_TAG, "Controller", "Controller"),
        ArtifactSpec("validator", "validator.php.jinja", SCOPE_OPERATION, "Validation", "Validator"),
        ArtifactSpec("routes", "routes.php.jinja", SCOPE_GLOBAL, path="config/routes.php"),
    ] + _common_artifacts({"api": "Api", "dto": "Dto", "enum": "Enum"}),
)

_REGISTRY: Dict[str, FrameworkProfile] = {}


def register_profile(profile: FrameworkProfile) -> None:
    """Register (or replace) a framework profile under its lower-cased name."""
    _REGISTRY[profile.name.lower()] = profile


def get_profile(name: str) -> FrameworkProfile:
    key = (name or "").lower()
    if key not in _REGISTRY:
        raise ConfigError(
            f"Unknown framework '{name}'. Available: {', '.join(available_frameworks())}"
        )
    return _REGISTRY[key]


def available_frameworks() -> List[str]:
    return sorted(_REGISTRY)


for _profile in (LARAVEL, LUMEN, SYMFONY, SLIM):
    register_profile(_profile)
