"""Host page and its static assets."""

from __future__ import annotations

from fastapi import APIRouter, Response
from fastapi.responses import HTMLResponse

from chatkit_starter.config.settings import settings
from chatkit_starter.web.static import (
    APP_CSS_PATH,
    APP_JS_PATH,
    get_app_css,
    get_app_js,
    render_page,
)

router = APIRouter(tags=["pages"])


@router.get("/", response_class=HTMLResponse)
async def index() -> HTMLResponse:
    """Serve the page hosting the ChatKit widget."""
    return HTMLResponse(
        render_page(
            script_url=settings.CHATKIT_SCRIPT_URL,
            workflow_id=settings.CHATKIT_WORKFLOW_ID,
        )
    )


@router.get(APP_JS_PATH)
async def get_app_script() -> Response:
    return Response(content=get_app_js(), media_type="application/javascript")


@router.get(APP_CSS_PATH)
async def get_app_stylesheet() -> Response:
    return Response(content=get_app_css(), media_type="text/css")
