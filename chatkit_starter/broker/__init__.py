"""Credential/session broker for the ChatKit widget.

Example usage:

    from chatkit_starter.broker import SESSION_COOKIE_NAME, CreateSessionRequest, SessionBroker
    from chatkit_starter.config import settings

    broker = SessionBroker(settings)
    grant = await broker.create_session(
        CreateSessionRequest.from_payload({"workflowId": "wf_123"}),
        cookie_value=request.cookies.get(SESSION_COOKIE_NAME),
    )
"""

from chatkit_starter.broker.errors import (
    BrokerError,
    ConfigurationError,
    UpstreamError,
    WorkflowValidationError,
)
from chatkit_starter.broker.identity import (
    SESSION_COOKIE_MAX_AGE,
    SESSION_COOKIE_NAME,
    is_valid_identifier,
    resolve_identifier,
    set_identifier_cookie,
)
from chatkit_starter.broker.service import (
    CreateSessionRequest,
    SessionBroker,
    SessionGrant,
    is_placeholder_workflow_id,
)
from chatkit_starter.broker.upstream import ChatKitClient, extract_upstream_error

__all__ = [
    # Errors
    "BrokerError",
    "ConfigurationError",
    "UpstreamError",
    "WorkflowValidationError",
    # Identity
    "SESSION_COOKIE_MAX_AGE",
    "SESSION_COOKIE_NAME",
    "is_valid_identifier",
    "resolve_identifier",
    "set_identifier_cookie",
    # Broker
    "CreateSessionRequest",
    "SessionBroker",
    "SessionGrant",
    "is_placeholder_workflow_id",
    # Upstream
    "ChatKitClient",
    "extract_upstream_error",
]
