from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Callable

import pytest

# Ensure project root is importable as a module path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from core.manifest import Manifest, parse_manifest, reset_manifest_cache
from core.settings import reset_settings_cache


SAMPLE_MANIFEST: dict[str, Any] = {
    "js/app.js": {
        "file": "app-ab12.js",
        "css": ["app-ab12.css"],
        "imports": ["js/chunk.js"],
    },
    "js/chunk.js": {"file": "chunk-cd34.js"},
    "js/inertia.tsx": {"file": "inertia-ef56.js", "isEntry": True},
}

_ENV_VARS = (
    "APP_ENV",
    "APP_NAME",
    "INSTALL_ROOT",
    "VITE_DEV_SERVER",
    "STATIC_URL_PREFIX",
    "INERTIA_VERSION",
    "INERTIA_CAMELIZE_PROPS",
    "APP_VERSION",
    "JSON_LOGS",
    "LOG_LEVEL",
)


class StaticLoader:
    """In-memory loader that counts how often it is asked to load."""

    def __init__(self, data: dict[str, Any]) -> None:
        self.data = data
        self.calls = 0

    def load(self) -> Manifest:
        self.calls += 1
        return parse_manifest(json.dumps(self.data).encode("utf-8"))


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_settings_cache()
    reset_manifest_cache()
    yield
    reset_settings_cache()
    reset_manifest_cache()


@pytest.fixture()
def sample_loader() -> StaticLoader:
    return StaticLoader(SAMPLE_MANIFEST)


@pytest.fixture()
def write_manifest(tmp_path) -> Callable[..., Path]:
    """Write manifest content (dict or raw bytes) to tmp_path and return its path."""

    def _write(content: Any = None, relative: str = "static/assets/vite_manifest.json") -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if content is None:
            content = SAMPLE_MANIFEST
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(json.dumps(content), encoding="utf-8")
        return path

    return _write


@pytest.fixture()
def make_loader() -> Callable[[dict[str, Any]], StaticLoader]:
    return StaticLoader
