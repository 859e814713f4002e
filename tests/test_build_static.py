from __future__ import annotations

import json
from pathlib import Path

from core.manifest import ManifestCache, ProductionLoader
from scripts.build_static import build, content_hash


def _sources(root: Path) -> Path:
    src = root / "src"
    (src / "js").mkdir(parents=True)
    (src / "css").mkdir()
    (src / "js" / "app.js").write_text(
        'import { chunk } from "./chunk.js";\n'
        'import "./util";\n'
        'import React from "react";\n'
        'console.log(chunk);\n',
        encoding="utf-8",
    )
    (src / "js" / "chunk.js").write_text('import "./util";\nexport const chunk = 1;\n', encoding="utf-8")
    (src / "js" / "util.ts").write_text("export {};\n", encoding="utf-8")
    (src / "css" / "app.css").write_text("body { margin: 0; }\n", encoding="utf-8")
    (src / "README.md").write_text("not an asset\n", encoding="utf-8")
    return src


def test_build_writes_bundler_style_manifest(tmp_path):
    src = _sources(tmp_path)
    out = tmp_path / "static" / "assets"
    manifest = build(src, out)

    assert set(manifest) == {"js/app.js", "js/chunk.js", "js/util.ts", "css/app.css"}
    app = manifest["js/app.js"]
    assert app["file"] == f"assets/js/app.{content_hash(src / 'js' / 'app.js')}.js"
    assert app["isEntry"] is True
    assert app["css"] == [manifest["css/app.css"]["file"]]
    # Relative imports only, in source order; bare package imports are skipped
    assert app["imports"] == ["js/chunk.js", "js/util.ts"]
    assert manifest["js/chunk.js"]["imports"] == ["js/util.ts"]
    assert "imports" not in manifest["js/util.ts"]

    on_disk = json.loads((out / "vite_manifest.json").read_text(encoding="utf-8"))
    assert on_disk == manifest
    for entry in manifest.values():
        assert (tmp_path / "static" / entry["file"]).is_file()


def test_built_manifest_resolves_through_production_loader(tmp_path):
    src = _sources(tmp_path)
    manifest = build(src, tmp_path / "static" / "assets")
    cache = ManifestCache(ProductionLoader("app", root=tmp_path))
    assert cache.resolve_file("js/app.js") == "/" + manifest["js/app.js"]["file"]
    assert cache.resolve_css("js/app.js") == "/" + manifest["css/app.css"]["file"]
    assert cache.resolve_imports("js/app.js") == [
        "/" + manifest["js/chunk.js"]["file"],
        "/" + manifest["js/util.ts"]["file"],
    ]


def test_content_change_changes_fingerprint(tmp_path):
    src = _sources(tmp_path)
    first = build(src, tmp_path / "out1")["js/util.ts"]["file"].split("/")[-1]
    (src / "js" / "util.ts").write_text("export const changed = true;\n", encoding="utf-8")
    second = build(src, tmp_path / "out2")["js/util.ts"]["file"].split("/")[-1]
    assert first != second
    assert build(src, tmp_path / "out3")["js/util.ts"]["file"].split("/")[-1] == second
