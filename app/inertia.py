from __future__ import annotations

import json
import re
from typing import Any, Optional

from fastapi import Request
from fastapi.responses import JSONResponse, Response

from core.settings import KitSettings


INERTIA_HEADER = "X-Inertia"
INERTIA_VERSION_HEADER = "X-Inertia-Version"
INERTIA_LOCATION_HEADER = "X-Inertia-Location"

_CAMEL_RE = re.compile(r"_([a-z0-9])")


def camelize(value: Any) -> Any:
    """Convert dict keys from snake_case to camelCase, recursing into dicts and lists."""
    if isinstance(value, dict):
        return {
            (_CAMEL_RE.sub(lambda m: m.group(1).upper(), k) if isinstance(k, str) else k): camelize(v)
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [camelize(v) for v in value]
    return value


def is_inertia_request(request: Request) -> bool:
    return (request.headers.get(INERTIA_HEADER) or "").strip().lower() == "true"


def _request_url(request: Request) -> str:
    url = request.url.path
    if request.url.query:
        url = f"{url}?{request.url.query}"
    return url


def build_page(request: Request, component: str, props: Optional[dict[str, Any]], settings: KitSettings) -> dict[str, Any]:
    props = dict(props or {})
    if settings.inertia_camelize_props:
        props = camelize(props)
    return {
        "component": component,
        "props": props,
        "url": _request_url(request),
        "version": settings.inertia_version,
    }


def render_inertia(request: Request, component: str, props: Optional[dict[str, Any]] = None) -> Response:
    """Answer with the page object as JSON for Inertia visits, or the root layout otherwise."""
    settings: KitSettings = request.app.state.settings
    page = build_page(request, component, props, settings)

    if is_inertia_request(request):
        client_version = request.headers.get(INERTIA_VERSION_HEADER)
        if request.method == "GET" and client_version is not None and client_version != settings.inertia_version:
            # Stale client assets: force a full reload
            return Response(status_code=409, headers={INERTIA_LOCATION_HEADER: str(request.url)})
        return JSONResponse(page, headers={INERTIA_HEADER: "true", "Vary": INERTIA_HEADER})

    templates = request.app.state.templates
    response = templates.TemplateResponse(
        request,
        "inertia_root.html",
        {
            "page": page,
            "page_json": json.dumps(page, ensure_ascii=False),
            "page_title": (props or {}).get("title"),
        },
    )
    response.headers["Vary"] = INERTIA_HEADER
    return response
