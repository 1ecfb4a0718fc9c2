"""Framework profiles (template sets + artifact layout)."""

from .profiles import (
    LARAVEL,
    LUMEN,
    SLIM,
    SYMFONY,
    ArtifactSpec,
    FrameworkProfile,
    available_frameworks,
    get_profile,
    register_profile,
)

__all__ = [
    "LARAVEL",
    "LUMEN",
    "SLIM",
    "SYMFONY",
    "ArtifactSpec",
    "FrameworkProfile",
    "available_frameworks",
    "get_profile",
    "register_profile",
]
