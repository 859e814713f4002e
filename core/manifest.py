"""Vite manifest resolution.

The build tool writes ``static/assets/vite_manifest.json`` mapping logical entry keys
(``"js/app.js"``) to content-hashed output files plus their stylesheet and import
edges. Templates ask a :class:`ManifestCache` for the physical paths.

Loading policy depends on the environment and is chosen once, when the cache is
constructed:

- production: a missing, unreadable or malformed manifest is logged and replaced by
  an empty manifest so request handling keeps working (lookups return ``""``);
- everything else: the same failures raise, surfacing a broken dev toolchain.
"""

from __future__ import annotations

import enum
import importlib.util
import json
import logging
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, NamedTuple, Optional, Protocol, Union

from .settings import KitSettings, get_settings


logger = logging.getLogger("vite_kit.manifest")

MANIFEST_FILE = "static/assets/vite_manifest.json"
MAIN_JS_FILE = "js/app.js"
INERTIA_JS_FILE = "js/inertia.tsx"

REMEDIATION_HINT = (
    'Run "python -m scripts.manage digest" (or your bundler build) after building your '
    'static files or remove the APP_ENV=prod configuration.'
)


class ManifestError(Exception):
    """Base class for manifest loading failures."""

    def __init__(self, path: Union[str, Path], message: str) -> None:
        super().__init__(message)
        self.path = Path(path)


class ManifestMissing(ManifestError, FileNotFoundError):
    pass


class ManifestUnreadable(ManifestError, OSError):
    pass


class ManifestMalformed(ManifestError, ValueError):
    pass


class ManifestEntry(NamedTuple):
    file: Optional[str] = None
    css: tuple[str, ...] = ()
    imports: tuple[str, ...] = ()


Manifest = Mapping[str, ManifestEntry]

EMPTY_MANIFEST: Manifest = MappingProxyType({})


def _entry_from_json(path: Path, key: str, value: Any) -> ManifestEntry:
    if not isinstance(value, dict):
        raise ManifestMalformed(path, f"Manifest entry {key!r} is not an object")
    file = value.get("file")
    css = value.get("css")
    imports = value.get("imports")
    return ManifestEntry(
        file=file if isinstance(file, str) else None,
        css=tuple(c for c in css if isinstance(c, str)) if isinstance(css, list) else (),
        # Non-string import keys can never match an entry; keep their position as a miss
        imports=tuple(i if isinstance(i, str) else "" for i in imports) if isinstance(imports, list) else (),
    )


def parse_manifest(raw: bytes, path: Union[str, Path] = "<memory>") -> Manifest:
    """Decode manifest bytes into a read-only mapping of entries."""
    path = Path(path)
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError, RecursionError) as exc:
        raise ManifestMalformed(path, f"Manifest at {path} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ManifestMalformed(path, f"Manifest at {path} must be a JSON object")
    # Fully build before publishing; callers only ever see the finished mapping
    entries = {str(k): _entry_from_json(path, str(k), v) for k, v in data.items()}
    return MappingProxyType(entries)


def read_manifest_file(path: Union[str, Path]) -> Manifest:
    """Strict read: exists -> bytes -> decode, raising a typed error at the failing step."""
    path = Path(path)
    try:
        found = path.exists()
    except OSError as exc:
        raise ManifestUnreadable(path, f"Could not read static manifest at {path}: {exc}") from exc
    if not found:
        raise ManifestMissing(path, f"Could not find static manifest at {path}")
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise ManifestUnreadable(path, f"Could not read static manifest at {path}: {exc}") from exc
    return parse_manifest(raw, path)


class Environment(str, enum.Enum):
    PRODUCTION = "prod"
    DEVELOPMENT = "dev"
    TEST = "test"


def current_env(settings: KitSettings | None = None) -> Environment:
    settings = settings or get_settings()
    try:
        return Environment(settings.app_env)
    except ValueError:
        return Environment.DEVELOPMENT


def app_dir(app_name: str) -> Path:
    """Return the installation directory of the importable package ``app_name``."""
    try:
        spec = importlib.util.find_spec(app_name)
    except (ImportError, ValueError) as exc:
        raise ManifestMissing(app_name, f"Application {app_name!r} is not importable: {exc}") from exc
    if spec is None:
        raise ManifestMissing(app_name, f"Application {app_name!r} is not importable")
    if spec.submodule_search_locations:
        return Path(list(spec.submodule_search_locations)[0])
    if spec.origin:
        return Path(spec.origin).parent
    raise ManifestMissing(app_name, f"Application {app_name!r} has no install location")


class Loader(Protocol):
    def load(self) -> Manifest:
        ...


class ProductionLoader:
    """Reads the manifest from the installed application; degrades to empty on failure."""

    def __init__(self, app_name: str, relative: str = MANIFEST_FILE, root: Union[str, Path, None] = None) -> None:
        self.app_name = app_name
        self.relative = relative
        self.root = Path(root) if root else None

    def manifest_path(self) -> Path:
        root = self.root if self.root is not None else app_dir(self.app_name)
        return root / self.relative

    def load(self) -> Manifest:
        path: Union[str, Path] = f"{self.app_name}:{self.relative}"
        try:
            path = self.manifest_path()
            return read_manifest_file(path)
        except ManifestError as exc:
            logger.error(
                "%s. %s",
                exc,
                REMEDIATION_HINT,
                extra={"manifest_path": str(path), "env": Environment.PRODUCTION.value},
            )
            return EMPTY_MANIFEST


class DevelopmentLoader:
    """Reads the manifest relative to the working directory; every failure raises."""

    def __init__(self, app_name: str = "app", relative: str = MANIFEST_FILE, path: Union[str, Path, None] = None) -> None:
        self.app_name = app_name
        self.relative = relative
        self.path = Path(path) if path else None

    def manifest_path(self) -> Path:
        if self.path is not None:
            return self.path
        return Path.cwd() / self.app_name / self.relative

    def load(self) -> Manifest:
        return read_manifest_file(self.manifest_path())


def loader_for(env: Environment, settings: KitSettings | None = None) -> Loader:
    settings = settings or get_settings()
    if env is Environment.PRODUCTION:
        return ProductionLoader(settings.app_name, root=settings.install_root)
    return DevelopmentLoader(settings.app_name)


def _prepend_slash(path: Any) -> str:
    if isinstance(path, str):
        return "/" + path
    return ""


class ManifestCache:
    """Holds at most one parsed manifest; Empty -> Populated, never back.

    Publication is a single attribute assignment, so concurrent first readers at worst
    parse the file twice and publish equivalent values.
    """

    def __init__(self, loader: Loader) -> None:
        self.loader = loader
        self._manifest: Optional[Manifest] = None

    @property
    def populated(self) -> bool:
        return self._manifest is not None

    def read(self) -> Manifest:
        manifest = self._manifest
        if manifest is None:
            manifest = self.loader.load()
            self._manifest = manifest
        return manifest

    def entry(self, key: str) -> Optional[ManifestEntry]:
        return self.read().get(key)

    def resolve_file(self, key: str) -> str:
        entry = self.entry(key)
        return _prepend_slash(entry.file) if entry else ""

    def resolve_css(self, key: str) -> str:
        entry = self.entry(key)
        if not entry or not entry.css:
            return ""
        return _prepend_slash(entry.css[0])

    def resolve_imports(self, key: str) -> list[str]:
        """Resolve the entry's direct imports; imports of imports are not followed."""
        entry = self.entry(key)
        if not entry:
            return []
        return [self.resolve_file(imported) for imported in entry.imports]

    def main_js(self) -> str:
        return self.resolve_file(MAIN_JS_FILE)

    def inertia_js(self) -> str:
        return self.resolve_file(INERTIA_JS_FILE)

    def main_css(self) -> str:
        return self.resolve_css(MAIN_JS_FILE)


def from_settings(settings: KitSettings | None = None) -> ManifestCache:
    settings = settings or get_settings()
    return ManifestCache(loader_for(current_env(settings), settings))


@lru_cache(maxsize=1)
def get_manifest_cache() -> ManifestCache:
    return from_settings()


def reset_manifest_cache() -> None:
    """Testing helper to drop the process-default cache."""
    get_manifest_cache.cache_clear()
