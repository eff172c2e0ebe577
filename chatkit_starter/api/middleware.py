"""Security-header and request-logging middleware for FastAPI."""

from __future__ import annotations

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from chatkit_starter.broker.identity import is_valid_identifier

logger = logging.getLogger("chatkit_starter.api")

REQUEST_ID_HEADER = "X-Request-ID"

# ---------------------------------------------------------------------------
# Content-Security-Policy
# ---------------------------------------------------------------------------

CSP_DIRECTIVES: tuple[str, ...] = (
    "default-src 'self'",
    "script-src 'self' 'unsafe-inline' 'unsafe-eval' https://cdn.platform.openai.com",
    "connect-src 'self' https://api.openai.com https://clientstream.launchdarkly.com "
    "https://events.launchdarkly.com https://api-js.mixpanel.com",
    "style-src 'self' 'unsafe-inline'",
    "img-src 'self' data: https:",
    "font-src 'self' data:",
    "frame-src 'self'",
    "worker-src 'self' blob:",
)

CONTENT_SECURITY_POLICY = "; ".join(CSP_DIRECTIVES)


class ContentSecurityPolicyMiddleware(BaseHTTPMiddleware):
    """Attach the static Content-Security-Policy header to every response."""

    async def dispatch(self, request: Request, call_next):  # noqa: ANN001
        response: Response = await call_next(request)
        response.headers["Content-Security-Policy"] = CONTENT_SECURITY_POLICY
        return response


# ---------------------------------------------------------------------------
# Request logging
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an ID and log one line per response.

    A well-formed UUID in the inbound ``X-Request-ID`` header is kept so a
    proxy's ID survives; anything else is replaced. Server errors log at
    WARNING. Only the path is logged: bodies and headers carry the client
    secret and the API key.
    """

    async def dispatch(self, request: Request, call_next):  # noqa: ANN001
        inbound = request.headers.get(REQUEST_ID_HEADER)
        request_id = inbound if is_valid_identifier(inbound) else str(uuid.uuid4())
        request.state.request_id = request_id

        started = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "%s %s -> %s in %.1fms request_id=%s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request_id,
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
