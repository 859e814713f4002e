from __future__ import annotations

import hashlib
import json
import posixpath
import re
import shutil
import sys
from pathlib import Path
from typing import Any, Optional


ROOT = Path(__file__).resolve().parents[1]
SOURCE_DIR = ROOT / "assets"
DIST_DIR = ROOT / "app" / "static" / "assets"
MANIFEST_NAME = "vite_manifest.json"

SCRIPT_SUFFIXES = {".js", ".mjs", ".ts", ".tsx", ".jsx"}
STYLE_SUFFIXES = {".css"}

# Static relative ES imports: `import x from "./a.js"`, `import "./a.js"`, `export * from "./a.js"`
_IMPORT_RE = re.compile(
    r"""^\s*(?:import|export)\s+(?:[^'"]*?\s+from\s+)?['"](\.{1,2}/[^'"]+)['"]""",
    re.MULTILINE,
)


def content_hash(path: Path, chunk: int = 65536) -> str:
    h = hashlib.sha256()
    with path.open("rb") as f:
        while True:
            b = f.read(chunk)
            if not b:
                break
            h.update(b)
    return h.hexdigest()[:10]


def should_fingerprint(path: Path) -> bool:
    return path.suffix.lower() in SCRIPT_SUFFIXES | STYLE_SUFFIXES


def rel_from_source(path: Path, source_dir: Path) -> str:
    return str(path.relative_to(source_dir)).replace("\\", "/")


def _resolve_import(importer: str, spec: str, known: set[str]) -> Optional[str]:
    target = posixpath.normpath(posixpath.join(posixpath.dirname(importer), spec))
    if target in known:
        return target
    for suffix in sorted(SCRIPT_SUFFIXES):
        if target + suffix in known:
            return target + suffix
    return None


def scan_imports(path: Path, rel: str, known: set[str]) -> list[str]:
    text = path.read_text(encoding="utf-8", errors="replace")
    found: list[str] = []
    for spec in _IMPORT_RE.findall(text):
        target = _resolve_import(rel, spec, known)
        if target and target != rel and target not in found and Path(target).suffix in SCRIPT_SUFFIXES:
            found.append(target)
    return found


def sibling_css(rel: str, known: set[str]) -> Optional[str]:
    """js/app.js pairs with css/app.css when both exist."""
    stem = posixpath.splitext(posixpath.basename(rel))[0]
    candidate = f"css/{stem}.css"
    return candidate if candidate in known else None


def build(source_dir: Path = SOURCE_DIR, out_dir: Path = DIST_DIR) -> dict[str, dict[str, Any]]:
    """Fingerprint sources into out_dir and write a manifest in the bundler's format.

    ``file`` values are relative to the static root (out_dir's parent), e.g. ``assets/js/app.1a2b3c4d5e.js``.
    """
    source_dir = Path(source_dir)
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    prefix = out_dir.name

    sources = {
        rel_from_source(p, source_dir): p
        for p in sorted(source_dir.rglob("*"))
        if p.is_file() and should_fingerprint(p)
    }
    known = set(sources)

    outputs: dict[str, str] = {}
    for rel, p in sources.items():
        h = content_hash(p)
        target_name = f"{p.stem}.{h}{p.suffix}"
        subdir = p.parent.relative_to(source_dir)
        target_dir = out_dir / subdir
        target_dir.mkdir(parents=True, exist_ok=True)
        shutil.copy2(str(p), str(target_dir / target_name))
        outputs[rel] = str(Path(prefix) / subdir / target_name).replace("\\", "/")

    manifest: dict[str, dict[str, Any]] = {}
    for rel, p in sources.items():
        entry: dict[str, Any] = {"file": outputs[rel], "src": rel}
        if p.suffix in SCRIPT_SUFFIXES:
            entry["isEntry"] = True
            css = sibling_css(rel, known)
            if css:
                entry["css"] = [outputs[css]]
            imports = scan_imports(p, rel, known)
            if imports:
                entry["imports"] = imports
        manifest[rel] = entry

    (out_dir / MANIFEST_NAME).write_text(json.dumps(manifest, ensure_ascii=False, indent=2), encoding="utf-8")
    print(f"Built {len(manifest)} assets → {out_dir / MANIFEST_NAME}")
    return manifest


if __name__ == "__main__":
    src = Path(sys.argv[1]) if len(sys.argv) > 1 else SOURCE_DIR
    out = Path(sys.argv[2]) if len(sys.argv) > 2 else DIST_DIR
    build(src, out)
