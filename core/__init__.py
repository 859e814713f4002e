from .manifest import (
    Environment,
    ManifestCache,
    ManifestError,
    current_env,
    get_manifest_cache,
    reset_manifest_cache,
)
from .settings import get_settings, reset_settings_cache

__all__ = [
    "Environment",
    "ManifestCache",
    "ManifestError",
    "current_env",
    "get_manifest_cache",
    "reset_manifest_cache",
    "get_settings",
    "reset_settings_cache",
]
