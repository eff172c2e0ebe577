"""Create-session endpoint: the only server-side entry point of the broker.

``POST /api/create-session`` forwards a session request to the ChatKit API
and relays the client secret. Broker errors propagate to the application's
exception handlers, which render them as ``{"error": ...}``.
"""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from chatkit_starter.broker.errors import BrokerError
from chatkit_starter.broker.identity import SESSION_COOKIE_NAME, set_identifier_cookie
from chatkit_starter.broker.service import SessionBroker
from chatkit_starter.config.settings import settings
from chatkit_starter.config.ui import CREATE_SESSION_ENDPOINT

logger = logging.getLogger("chatkit_starter.api")

router = APIRouter(tags=["session"])

_REJECTED_METHODS = ["GET", "HEAD", "PUT", "PATCH", "DELETE", "OPTIONS"]


def get_broker() -> SessionBroker:
    """Dependency returning a broker bound to the process settings."""
    return SessionBroker(settings)


async def _read_json(request: Request):
    body = await request.body()
    if not body:
        return None
    try:
        return json.loads(body)
    except (ValueError, RecursionError):
        logger.debug("Ignoring unparseable create-session body")
        return None


@router.post(CREATE_SESSION_ENDPOINT)
async def create_session(
    request: Request,
    broker: SessionBroker = Depends(get_broker),
) -> JSONResponse:
    """Create a ChatKit session and (re)set the identifier cookie."""
    payload = await _read_json(request)
    try:
        grant = await broker.create_session(
            payload,
            cookie_value=request.cookies.get(SESSION_COOKIE_NAME),
        )
    except BrokerError:
        raise
    except Exception:
        logger.exception("Unexpected error while creating ChatKit session")
        return JSONResponse(status_code=500, content={"error": "Unexpected error"})

    response = JSONResponse(status_code=200, content=grant.to_response())
    set_identifier_cookie(response, grant.user_id, secure=broker.settings.secure_cookies)
    return response


@router.api_route(CREATE_SESSION_ENDPOINT, methods=_REJECTED_METHODS, include_in_schema=False)
async def create_session_method_not_allowed() -> JSONResponse:
    return JSONResponse(
        status_code=405,
        content={"error": "Method Not Allowed"},
        headers={"Allow": "POST"},
    )
