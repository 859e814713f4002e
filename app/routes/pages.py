from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from app.inertia import render_inertia

router = APIRouter(tags=["pages"])


@router.get("/", response_class=HTMLResponse, name="pages.home")
def home(request: Request):
    templates = request.app.state.templates
    return templates.TemplateResponse(request, "root.html", {"page_title": "Home"})


@router.get("/inertia", name="pages.inertia")
def inertia(request: Request):
    return render_inertia(request, "Dashboard", {"title": "Dashboard"})
