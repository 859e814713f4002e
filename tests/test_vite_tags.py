from __future__ import annotations

from core.manifest import DevelopmentLoader, ManifestCache
from core.settings import KitSettings
from core.vite import dev_env, react_refresh_preamble, static_url, template_globals, vite_tags


def test_dev_tags_point_at_dev_server(tmp_path):
    # Dev rendering never touches the manifest, so a missing file is fine here
    cache = ManifestCache(DevelopmentLoader(path=tmp_path / "missing.json"))
    settings = KitSettings(APP_ENV="dev")
    html = str(vite_tags(cache, "js/app.js", settings))
    assert '<script type="module" src="http://localhost:5173/@vite/client"></script>' in html
    assert 'src="http://localhost:5173/js/app.js"' in html
    assert not cache.populated


def test_prod_tags_use_manifest(sample_loader):
    cache = ManifestCache(sample_loader)
    settings = KitSettings(APP_ENV="prod")
    html = str(vite_tags(cache, "js/app.js", settings))
    lines = html.splitlines()
    assert lines == [
        '<link rel="stylesheet" href="/static/app-ab12.css" />',
        '<link rel="modulepreload" href="/static/chunk-cd34.js" />',
        '<script type="module" crossorigin defer src="/static/app-ab12.js"></script>',
    ]


def test_prod_tags_for_missing_entry_are_empty(sample_loader):
    cache = ManifestCache(sample_loader)
    assert str(vite_tags(cache, "js/nope.js", KitSettings(APP_ENV="prod"))) == ""


def test_prod_tags_escape_paths(make_loader):
    cache = ManifestCache(make_loader({"js/app.js": {"file": 'app"><x.js'}}))
    html = str(vite_tags(cache, "js/app.js", KitSettings(APP_ENV="prod")))
    assert '"><x' not in html
    assert "&#34;&gt;&lt;x.js" in html


def test_static_url_prefix():
    assert static_url("/app.js", KitSettings(STATIC_URL_PREFIX="/cdn/")) == "/cdn/app.js"
    assert static_url("/app.js", KitSettings()) == "/static/app.js"
    assert static_url("", KitSettings()) == ""


def test_react_refresh_preamble_only_in_dev():
    assert "@react-refresh" in str(react_refresh_preamble(KitSettings(APP_ENV="dev")))
    assert str(react_refresh_preamble(KitSettings(APP_ENV="prod"))) == ""
    assert str(react_refresh_preamble(KitSettings(APP_ENV="test"))) == ""


def test_dev_env_flag():
    assert dev_env(KitSettings(APP_ENV="dev"))
    assert not dev_env(KitSettings(APP_ENV="prod"))
    assert not dev_env(KitSettings(APP_ENV="test"))


def test_template_globals_bind_cache_and_settings(sample_loader):
    cache = ManifestCache(sample_loader)
    g = template_globals(cache, KitSettings(APP_ENV="prod"))
    assert g["manifest"] is cache
    assert g["dev_env"]() is False
    assert 'src="/static/inertia-ef56.js"' in str(g["vite_tags"]("js/inertia.tsx"))
