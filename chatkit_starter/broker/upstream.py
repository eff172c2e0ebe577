"""Async client for the ChatKit sessions endpoint of the OpenAI API.

One call, one request: the client opens an ``httpx.AsyncClient`` for the
duration of :meth:`ChatKitClient.create_session` and closes it again. It does
not retry and does not cache.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from chatkit_starter.broker.errors import UpstreamError
from chatkit_starter.config.settings import DEFAULT_CHATKIT_API_BASE

logger = logging.getLogger(__name__)

SESSIONS_PATH = "/v1/chatkit/sessions"
BETA_HEADER = "OpenAI-Beta"
BETA_VALUE = "chatkit_beta=v1"

_NESTED_KEYS = ("error", "details")
_MESSAGE_KEYS = ("message", "error", "details")


def extract_upstream_error(payload: Any) -> str | None:
    """Find the most specific human-readable message in an error payload.

    Nested ``error`` / ``details`` objects are searched first so that the
    innermost message wins over wrapper text; string ``message``, ``error``
    and ``details`` values at the current level are the fallback.
    """
    if isinstance(payload, str):
        return payload.strip() or None
    if not isinstance(payload, dict):
        return None

    for key in _NESTED_KEYS:
        child = payload.get(key)
        if isinstance(child, dict):
            found = extract_upstream_error(child)
            if found:
                return found

    for key in _MESSAGE_KEYS:
        value = payload.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return None


def _safe_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return {}


class ChatKitClient:
    """Creates ChatKit sessions on behalf of the browser.

    Parameters
    ----------
    api_key:
        Server-held OpenAI API key, sent as a bearer token.
    base_url:
        API base address, without a trailing slash.
    transport:
        Optional httpx transport; tests pass an ``httpx.MockTransport``.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_CHATKIT_API_BASE,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers={
                "Authorization": f"Bearer {self._api_key}",
                BETA_HEADER: BETA_VALUE,
                "Content-Type": "application/json",
            },
            transport=self._transport,
        )

    async def create_session(
        self,
        workflow_id: str,
        user: str,
        *,
        file_upload_enabled: bool = False,
    ) -> dict[str, Any]:
        """POST a new session request and return the upstream JSON body.

        Raises:
            UpstreamError: On a non-2xx response (with the upstream status and
                the extracted message) or when the API cannot be reached.
        """
        payload = {
            "workflow": {"id": workflow_id},
            "user": user,
            "chatkit_configuration": {
                "file_upload": {"enabled": file_upload_enabled},
            },
        }

        try:
            async with self._client() as client:
                resp = await client.post(SESSIONS_PATH, json=payload)
        except httpx.HTTPError as e:
            logger.warning("ChatKit API unreachable at %s: %s", self._base_url, type(e).__name__)
            raise UpstreamError("Failed to reach ChatKit API") from e

        body = _safe_json(resp)
        if resp.is_error:
            message = extract_upstream_error(body) or (
                f"Failed to create session: {resp.reason_phrase}"
            )
            logger.warning(
                "ChatKit session request failed status=%s workflow=%s",
                resp.status_code,
                workflow_id,
            )
            raise UpstreamError(message, status_code=resp.status_code, details=body)

        if not isinstance(body, dict):
            raise UpstreamError("Unexpected response from ChatKit API")
        return body
