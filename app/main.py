from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from core.logging_utils import maybe_enable_json_logging, reset_request_id, set_request_id
from core.manifest import ManifestCache, current_env, from_settings
from core.settings import KitSettings, get_settings, reset_settings_cache
from core.vite import template_globals

from .routes.pages import router as pages_router


logger = logging.getLogger("vite_kit.app")

APP_DIR = Path(__file__).resolve().parent
TEMPLATE_DIR = APP_DIR / "templates"
STATIC_DIR = APP_DIR / "static"


def create_app(settings: Optional[KitSettings] = None, manifest: Optional[ManifestCache] = None) -> FastAPI:
    if settings is None:
        reset_settings_cache()
        settings = get_settings()
    maybe_enable_json_logging(settings)
    manifest = manifest or from_settings(settings)

    application = FastAPI(title="Vite Inertia Kit")
    application.state.settings = settings
    application.state.manifest = manifest

    templates = Jinja2Templates(directory=str(TEMPLATE_DIR))
    templates.env.globals.update(template_globals(manifest, settings))
    application.state.templates = templates

    application.include_router(pages_router)

    if STATIC_DIR.exists():
        application.mount(settings.static_url_prefix, StaticFiles(directory=str(STATIC_DIR)), name="static")

    @application.get("/healthz", include_in_schema=False)
    def healthz():
        # Forces the first manifest read; in dev a broken manifest surfaces here as a 500
        entries = len(manifest.read())
        return {"ok": True, "env": current_env(settings).value, "manifest_entries": entries}

    @application.middleware("http")
    async def request_id_middleware(request, call_next):
        rid = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        token = set_request_id(rid)
        try:
            resp = await call_next(request)
        finally:
            reset_request_id(token)
        resp.headers["X-Request-ID"] = rid
        return resp

    logger.info("app created", extra={"env": current_env(settings).value})
    return application


app = create_app()
