"""Session broker: validates settings, resolves identity, forwards one call.

The broker is stateless. Each :meth:`SessionBroker.create_session` call
checks the server-held secret and the workflow identifier before any network
traffic, then issues exactly one upstream request and maps the result into a
:class:`SessionGrant` or a :class:`~chatkit_starter.broker.errors.BrokerError`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from chatkit_starter.broker.errors import (
    ConfigurationError,
    UpstreamError,
    WorkflowValidationError,
)
from chatkit_starter.broker.identity import resolve_identifier
from chatkit_starter.broker.upstream import ChatKitClient
from chatkit_starter.config.settings import Settings

logger = logging.getLogger(__name__)

PLACEHOLDER_WORKFLOW_IDS = frozenset({"wf_placeholder"})
PLACEHOLDER_WORKFLOW_PREFIXES = ("wf_replace", "wf_your")


def is_placeholder_workflow_id(workflow_id: str | None) -> bool:
    """Return True for blank ids and the example values shipped in templates."""
    if workflow_id is None:
        return True
    value = workflow_id.strip().lower()
    if not value:
        return True
    return value in PLACEHOLDER_WORKFLOW_IDS or value.startswith(PLACEHOLDER_WORKFLOW_PREFIXES)


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class WorkflowRef(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None


class FileUploadOptions(BaseModel):
    model_config = ConfigDict(extra="ignore")

    enabled: bool = False


class ChatKitConfiguration(BaseModel):
    model_config = ConfigDict(extra="ignore")

    file_upload: FileUploadOptions | None = None


class CreateSessionRequest(BaseModel):
    """Optional body of a create-session call."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    workflow: WorkflowRef | None = None
    workflow_id: str | None = Field(default=None, alias="workflowId")
    chatkit_configuration: ChatKitConfiguration | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> "CreateSessionRequest":
        """Build a request from parsed JSON; non-objects count as empty."""
        if not isinstance(payload, dict):
            return cls()
        try:
            return cls.model_validate(payload)
        except ValidationError as e:
            raise WorkflowValidationError(
                f"Invalid request body: {e.error_count()} invalid field(s)"
            ) from e

    def requested_workflow_id(self) -> str | None:
        if self.workflow is not None and self.workflow.id is not None:
            return self.workflow.id
        return self.workflow_id

    @property
    def file_upload_enabled(self) -> bool:
        config = self.chatkit_configuration
        if config is None or config.file_upload is None:
            return False
        return config.file_upload.enabled


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------


@dataclass
class SessionGrant:
    """Outcome of a successful session creation.

    The client secret is excluded from ``repr`` so it never ends up in logs.
    """

    client_secret: str = field(repr=False)
    user_id: str
    expires_after: Any = None
    new_identifier: bool = False

    def to_response(self) -> dict[str, Any]:
        return {"client_secret": self.client_secret, "expires_after": self.expires_after}


# ---------------------------------------------------------------------------
# Broker
# ---------------------------------------------------------------------------


class SessionBroker:
    """Forwards create-session calls to the ChatKit API.

    Parameters
    ----------
    settings:
        Source of the API key, default workflow id, and API base.
    client:
        Optional pre-built upstream client; built from *settings* otherwise.
    """

    def __init__(self, settings: Settings, client: ChatKitClient | None = None) -> None:
        self._settings = settings
        self._client = client

    @property
    def settings(self) -> Settings:
        return self._settings

    def _upstream(self) -> ChatKitClient:
        if self._client is None:
            self._client = ChatKitClient(
                api_key=self._settings.OPENAI_API_KEY,
                base_url=self._settings.CHATKIT_API_BASE,
            )
        return self._client

    def resolve_workflow_id(self, request: CreateSessionRequest) -> str:
        """Pick the workflow id from the body or the configured default.

        Raises:
            WorkflowValidationError: If the resolved id is blank or a placeholder.
        """
        requested = request.requested_workflow_id()
        workflow_id = requested if requested is not None else self._settings.CHATKIT_WORKFLOW_ID
        if not workflow_id or not workflow_id.strip():
            raise WorkflowValidationError("Missing workflow id")
        if is_placeholder_workflow_id(workflow_id):
            raise WorkflowValidationError(
                f"Workflow id '{workflow_id}' is a placeholder. "
                "Set CHATKIT_WORKFLOW_ID to a published workflow id."
            )
        return workflow_id.strip()

    async def create_session(
        self,
        request: CreateSessionRequest | dict[str, Any] | None = None,
        cookie_value: str | None = None,
    ) -> SessionGrant:
        """Create one ChatKit session for the caller.

        *request* may be a parsed request model or the raw JSON payload; the
        payload is only validated once the API key is known to be set.

        Raises:
            ConfigurationError: If ``OPENAI_API_KEY`` is not set.
            WorkflowValidationError: If no usable workflow id resolves.
            UpstreamError: If the ChatKit API fails or returns no secret.
        """
        if not self._settings.OPENAI_API_KEY:
            raise ConfigurationError("Missing OPENAI_API_KEY environment variable")

        if not isinstance(request, CreateSessionRequest):
            request = CreateSessionRequest.from_payload(request)
        workflow_id = self.resolve_workflow_id(request)
        user_id, created = resolve_identifier(cookie_value)

        body = await self._upstream().create_session(
            workflow_id,
            user_id,
            file_upload_enabled=request.file_upload_enabled,
        )

        client_secret = body.get("client_secret")
        if not isinstance(client_secret, str) or not client_secret:
            raise UpstreamError("ChatKit API response did not include a client secret")

        logger.info(
            "Created ChatKit session workflow=%s new_identifier=%s",
            workflow_id,
            created,
        )
        return SessionGrant(
            client_secret=client_secret,
            user_id=user_id,
            expires_after=body.get("expires_after"),
            new_identifier=created,
        )
