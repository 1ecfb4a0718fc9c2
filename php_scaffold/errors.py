"""Exception hierarchy for the generator."""


class ScaffoldError(Exception):
    """Base class for every error raised by php_scaffold."""


class SpecLoadError(ScaffoldError):
    """The OpenAPI document could not be read or parsed."""


class SpecValidationError(ScaffoldError):
    """The OpenAPI document is structurally invalid for generation."""

    def __init__(self, message, problems=None):
        self.problems = list(problems or [])
        if self.problems:
            message = message + "\n" + "\n".join(f"  - {p}" for p in self.problems)
        super().__init__(message)


class ConfigError(ScaffoldError):
    """Invalid generator configuration (unknown framework, bad namespace...)."""


class TemplateSetError(ScaffoldError):
    """A template is missing or failed to render."""
