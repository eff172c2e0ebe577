"""Client session orchestrator.

Bridges the widget host and the broker, and the widget's client tool calls
and local UI effects. The browser page ships a JavaScript port of the same
logic (see :mod:`chatkit_starter.web.static`); this module is the Python
rendition used by the CLI and the test suite.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol

import httpx

from chatkit_starter.broker.identity import SESSION_COOKIE_NAME
from chatkit_starter.broker.service import is_placeholder_workflow_id
from chatkit_starter.config.ui import COLOR_SCHEMES, CREATE_SESSION_ENDPOINT, ColorScheme
from chatkit_starter.web.state import ErrorState, PanelView
from chatkit_starter.web.widget_host import WidgetHost, WidgetMount, WidgetScriptError

logger = logging.getLogger(__name__)

MISSING_WORKFLOW_MESSAGE = "Set CHATKIT_WORKFLOW_ID in your .env file."


# ---------------------------------------------------------------------------
# Broker access
# ---------------------------------------------------------------------------


class SessionRequestError(Exception):
    """The broker refused or failed to issue a credential."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass
class SessionCredential:
    """Client secret returned by the broker. Never logged."""

    client_secret: str = field(repr=False)
    expires_after: Any = None


class SessionSource(Protocol):
    async def create_session(
        self, workflow_id: str | None = None, *, file_upload: bool = False
    ) -> SessionCredential: ...


class BrokerClient:
    """HTTP client for the create-session endpoint.

    The underlying ``httpx.AsyncClient`` keeps a cookie jar, so the anonymous
    identifier cookie set by the broker is sent back on later calls.
    """

    def __init__(
        self,
        base_url: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._http = httpx.AsyncClient(base_url=base_url.rstrip("/"), transport=transport)

    @property
    def identifier(self) -> str | None:
        """Anonymous identifier the broker stored in the cookie jar, if any."""
        return self._http.cookies.get(SESSION_COOKIE_NAME)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "BrokerClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def create_session(
        self, workflow_id: str | None = None, *, file_upload: bool = False
    ) -> SessionCredential:
        body: dict[str, Any] = {
            "chatkit_configuration": {"file_upload": {"enabled": file_upload}},
        }
        if workflow_id:
            body["workflow"] = {"id": workflow_id}

        try:
            resp = await self._http.post(CREATE_SESSION_ENDPOINT, json=body)
        except httpx.HTTPError as e:
            raise SessionRequestError(
                f"Unable to reach session endpoint: {type(e).__name__}"
            ) from e

        try:
            data = resp.json()
        except ValueError:
            data = {}

        if resp.is_error:
            message = data.get("error") if isinstance(data, dict) else None
            raise SessionRequestError(
                message or f"Failed to create session ({resp.status_code})",
                status_code=resp.status_code,
            )

        client_secret = data.get("client_secret") if isinstance(data, dict) else None
        if not client_secret:
            raise SessionRequestError("Missing client secret in response")
        return SessionCredential(client_secret=client_secret, expires_after=data.get("expires_after"))


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FactAction:
    """A fact the widget asked the host to record."""

    fact_id: str
    fact_text: str
    type: str = "save"


ThemeHandler = Callable[[ColorScheme], None]
FactHandler = Callable[[FactAction], Any]


class SessionOrchestrator:
    """Obtains a credential, hands it to the widget host, serves client tools.

    Parameters
    ----------
    broker:
        Source of session credentials (usually a :class:`BrokerClient`).
    widget_host:
        Host that detects widget readiness and mounts the widget.
    workflow_id:
        Workflow id sent to the broker; blank or placeholder values fail
        locally without a broker call.
    on_theme_request:
        Parent handler for ``switch_theme`` tool calls.
    on_widget_action:
        Parent handler for new ``record_fact`` tool calls.
    scheme:
        Initial color scheme.
    """

    def __init__(
        self,
        broker: SessionSource,
        widget_host: WidgetHost,
        workflow_id: str | None = None,
        on_theme_request: ThemeHandler | None = None,
        on_widget_action: FactHandler | None = None,
        *,
        scheme: ColorScheme = "light",
        script_timeout: float | None = None,
    ) -> None:
        self._broker = broker
        self._host = widget_host
        self._workflow_id = workflow_id
        self._on_theme_request = on_theme_request
        self._on_widget_action = on_widget_action
        self._script_timeout = script_timeout
        self.scheme: ColorScheme = scheme
        self.errors = ErrorState()
        self.instance_key = 0
        self.is_initializing = True
        self._seen_facts: set[str] = set()
        self._live = True

    # --- lifecycle ---

    @property
    def is_live(self) -> bool:
        return self._live

    def unmount(self) -> None:
        """Mark the orchestrator torn down; late results are discarded."""
        self._live = False
        self._host.unmount()

    @property
    def seen_facts(self) -> frozenset[str]:
        return frozenset(self._seen_facts)

    async def start(self) -> WidgetMount | None:
        """Wait for the widget script, obtain a credential, then render."""
        if not await self._await_script():
            return None
        return await self._acquire_and_render()

    async def retry_script(self) -> WidgetMount | None:
        self.errors.script = None
        self._host.reset()
        return await self.start()

    async def retry_session(self) -> WidgetMount | None:
        self.errors.session = None
        if not self._host.is_ready or self._host.failure is not None:
            return None
        return await self._acquire_and_render()

    async def reset_chat(self) -> WidgetMount | None:
        """Discard the current widget and start a fresh conversation."""
        self.instance_key += 1
        self.errors.clear()
        self._seen_facts.clear()
        self.is_initializing = True
        return await self.start()

    async def _await_script(self) -> bool:
        kwargs = {} if self._script_timeout is None else {"timeout": self._script_timeout}
        try:
            await self._host.wait_until_ready(**kwargs)
        except WidgetScriptError as e:
            if self._live:
                self.errors.script = str(e)
                self.errors.retryable = True
                self.is_initializing = False
            return False
        return self._live

    async def _acquire_and_render(self) -> WidgetMount | None:
        secret = await self.get_client_secret()
        if secret is None or not self._live:
            return None
        return self._host.render(secret, self.scheme, self.instance_key)

    # --- credential ---

    async def get_client_secret(self) -> str | None:
        """Ask the broker for a credential; failures become the session flag."""
        if self._workflow_id is not None and is_placeholder_workflow_id(self._workflow_id):
            if self._live:
                self.errors.session = MISSING_WORKFLOW_MESSAGE
                self.errors.retryable = False
                self.is_initializing = False
            return None

        if self._live:
            self.is_initializing = True
            self.errors.session = None
            self.errors.integration = None

        try:
            credential = await self._broker.create_session(
                self._workflow_id, file_upload=self._host.file_upload
            )
        except SessionRequestError as e:
            logger.warning("Failed to create ChatKit session: %s", e.message)
            if self._live:
                self.errors.session = e.message
                self.errors.retryable = True
                self.is_initializing = False
            return None
        except Exception:
            logger.exception("Unexpected error while creating ChatKit session")
            if self._live:
                self.errors.session = "Unable to start ChatKit session."
                self.errors.retryable = True
                self.is_initializing = False
            return None

        if not self._live:
            logger.debug("Discarding credential received after unmount")
            return None
        self.is_initializing = False
        return credential.client_secret

    # --- widget events ---

    async def handle_client_tool(
        self, name: str, params: dict[str, Any] | None = None
    ) -> dict[str, bool]:
        """Fulfil a client tool call declared by the workflow."""
        params = params or {}

        if name == "switch_theme":
            requested = params.get("theme")
            if requested in COLOR_SCHEMES:
                self.scheme = requested
                if self._on_theme_request is not None:
                    self._on_theme_request(requested)
                return {"success": True}
            return {"success": False}

        if name == "record_fact":
            fact_id = str(params.get("fact_id") or "")
            fact_text = str(params.get("fact_text") or "")
            if not fact_id:
                return {"success": False}
            if fact_id in self._seen_facts:
                return {"success": True}
            self._seen_facts.add(fact_id)
            if self._on_widget_action is not None:
                action = FactAction(fact_id=fact_id, fact_text=fact_text.replace("\n", " "))
                result = self._on_widget_action(action)
                if inspect.isawaitable(result):
                    await result
            return {"success": True}

        return {"success": False}

    def handle_thread_change(self) -> None:
        self._seen_facts.clear()

    def handle_widget_error(self, message: str) -> None:
        """The widget reported an error; it shows its own UI for it."""
        logger.info("ChatKit widget error: %s", message)
        if self._live:
            self.errors.integration = message

    # --- view ---

    def view(self) -> PanelView:
        if self.errors.script:
            return PanelView("script-error", self.errors.script, can_retry=self.errors.retryable)
        if self.errors.session:
            return PanelView("session-error", self.errors.session, can_retry=self.errors.retryable)
        if self.is_initializing:
            return PanelView("loading")
        return PanelView("ready")
