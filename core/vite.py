from __future__ import annotations

from typing import Any, Callable

from markupsafe import Markup, escape

from .manifest import Environment, ManifestCache, current_env
from .settings import KitSettings, get_settings


_REACT_REFRESH_PREAMBLE = """<script type="module">
  import RefreshRuntime from '{server}/@react-refresh'
  RefreshRuntime.injectIntoGlobalHook(window)
  window.$RefreshReg$ = () => {{}}
  window.$RefreshSig$ = () => (type) => type
  window.__vite_plugin_react_preamble_installed__ = true
</script>"""


def dev_env(settings: KitSettings | None = None) -> bool:
    return current_env(settings or get_settings()) is Environment.DEVELOPMENT


def static_url(path: str, settings: KitSettings | None = None) -> str:
    """Mount a resolved manifest path ("/assets/app-ab12.js") under the static prefix."""
    if not path:
        return ""
    settings = settings or get_settings()
    return f"{settings.static_url_prefix}{path}"


def vite_tags(cache: ManifestCache, entry: str, settings: KitSettings | None = None) -> Markup:
    """Render the <script>/<link> tags for one entry point."""
    settings = settings or get_settings()
    if dev_env(settings):
        server = settings.vite_dev_server
        return Markup(
            '<script type="module" src="{}/@vite/client"></script>\n'
            '<script type="module" src="{}/{}"></script>'
        ).format(server, server, entry.lstrip("/"))

    tags: list[Markup] = []
    css = static_url(cache.resolve_css(entry), settings)
    if css:
        tags.append(Markup('<link rel="stylesheet" href="{}" />').format(css))
    for imported in cache.resolve_imports(entry):
        href = static_url(imported, settings)
        if href:
            tags.append(Markup('<link rel="modulepreload" href="{}" />').format(href))
    src = static_url(cache.resolve_file(entry), settings)
    if src:
        tags.append(Markup('<script type="module" crossorigin defer src="{}"></script>').format(src))
    return Markup("\n").join(tags)


def react_refresh_preamble(settings: KitSettings | None = None) -> Markup:
    settings = settings or get_settings()
    if not dev_env(settings):
        return Markup("")
    return Markup(_REACT_REFRESH_PREAMBLE.format(server=escape(settings.vite_dev_server)))


def template_globals(cache: ManifestCache, settings: KitSettings) -> dict[str, Callable[..., Any] | Any]:
    """Globals installed into the Jinja environment used by the layouts."""
    return {
        "manifest": cache,
        "dev_env": lambda: dev_env(settings),
        "vite_tags": lambda entry: vite_tags(cache, entry, settings),
        "react_refresh_preamble": lambda: react_refresh_preamble(settings),
        "static_url": lambda path: static_url(path, settings),
    }
