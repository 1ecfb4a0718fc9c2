"""
Generator configuration.

Layering: dataclass defaults < config file (YAML/JSON) < CLI options.
Config files may use OpenAPI Generator style camelCase keys
(invokerPackage, additionalProperties, templateDir...) or snake_case.
"""

import json
import re
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigError
from .frameworks import get_profile
from .gen_logging import get_logger
from .php import is_valid_namespace

logger = get_logger(__name__)

MIN_PHP_VERSION = (8, 1)

KEY_ALIASES = {
    "generatorName": "framework",
    "invokerPackage": "root_namespace",
    "rootNamespace": "root_namespace",
    "phpVersion": "php_version",
    "strictTypes": "strict_types",
    "skipArtifacts": "skip_artifacts",
    "securityMiddleware": "security_middleware",
    "additionalProperties": "variables",
    "templateDir": "templates_dir",
    "templatesDir": "templates_dir",
    "skipOverwrite": "skip_existing",
    "skipExisting": "skip_existing",
    "dryRun": "dry_run",
}

# "php-laravel" / "php-slim4" style generator names
_GENERATOR_NAME = re.compile(r"^php-([a-z]+?)\d*$")


def normalize_framework_name(name: str) -> str:
    """'php-slim4' -> 'slim', 'Laravel' -> 'laravel'."""
    name = (name or "").strip().lower()
    match = _GENERATOR_NAME.match(name)
    return match.group(1) if match else name


def _parse_php_version(version: str):
    match = re.match(r"^(\d+)\.(\d+)", str(version))
    if not match:
        raise ConfigError(f"Invalid PHP version '{version}' (expected e.g. '8.2')")
    return int(match.group(1)), int(match.group(2))


@dataclass
class GeneratorConfig:
    framework: str = "laravel"
    root_namespace: str = "App"
    php_version: str = "8.1"
    strict_types: bool = True
    skip_artifacts: List[str] = field(default_factory=list)
    security_middleware: Dict[str, List[str]] = field(default_factory=dict)
    variables: Dict[str, Any] = field(default_factory=dict)
    templates_dir: Optional[str] = None
    skip_existing: bool = False
    dry_run: bool = False

    @property
    def readonly_classes(self) -> bool:
        """PHP 8.2 allows `readonly class`; 8.1 only readonly properties."""
        return _parse_php_version(self.php_version) >= (8, 2)

    def validated(self) -> "GeneratorConfig":
        """Normalize and check the configuration; returns self."""
        self.framework = normalize_framework_name(self.framework)
        profile = get_profile(self.framework)

        self.root_namespace = (self.root_namespace or "").strip("\\")
        if not is_valid_namespace(self.root_namespace):
            raise ConfigError(f"Invalid PHP namespace '{self.root_namespace}'")

        if _parse_php_version(self.php_version) < MIN_PHP_VERSION:
            raise ConfigError(
                f"PHP {self.php_version} is not supported; generated code needs "
                f"PHP {MIN_PHP_VERSION[0]}.{MIN_PHP_VERSION[1]}+ (enums, readonly properties)"
            )

        if isinstance(self.skip_artifacts, str):
            self.skip_artifacts = [k.strip() for k in self.skip_artifacts.split(",") if k.strip()]
        for kind in self.skip_artifacts:
            if kind not in profile.kinds:
                logger.warning(f"  [WARN] Unknown artifact kind '{kind}' for {profile.label} (ignored)")

        normalized = {}
        for scheme, middleware in (self.security_middleware or {}).items():
            normalized[scheme] = [middleware] if isinstance(middleware, str) else list(middleware)
        self.security_middleware = normalized
        return self

    def merged(self, **overrides) -> "GeneratorConfig":
        """Copy with every non-None override applied (CLI options win over the file)."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        unknown = set(changes) - {f.name for f in fields(self)}
        if unknown:
            raise ConfigError(f"Unknown configuration option(s): {', '.join(sorted(unknown))}")
        return replace(self, **changes).validated()


def load_config(path) -> GeneratorConfig:
    """Read a YAML/JSON config file into a validated GeneratorConfig."""
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
        data = json.loads(content) if path.suffix == ".json" else yaml.safe_load(content)
    except OSError as e:
        raise ConfigError(f"Cannot read config file '{path}': {e}") from e
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot parse config file '{path}': {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file '{path}' must contain a mapping")

    known = {f.name for f in fields(GeneratorConfig)}
    kwargs: Dict[str, Any] = {}
    for key, value in data.items():
        target = KEY_ALIASES.get(key, key)
        if target not in known:
            logger.warning(f"  [WARN] Unknown config key '{key}' in {path} (ignored)")
            continue
        kwargs[target] = value

    logger.debug(f"  Loaded config {path}: {sorted(kwargs)}")
    return GeneratorConfig(**kwargs).validated()
