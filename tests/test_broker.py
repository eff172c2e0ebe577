"""Tests for the session broker.

Tests cover:
- Anonymous identifier resolution and the cookie it lives in
- Upstream error message extraction
- ChatKitClient request shape, error mapping, and network failures
- SessionBroker validation order and workflow id resolution
"""

import uuid

import httpx
import pytest
from starlette.responses import Response

from chatkit_starter.broker import (
    SESSION_COOKIE_MAX_AGE,
    SESSION_COOKIE_NAME,
    ChatKitClient,
    ConfigurationError,
    CreateSessionRequest,
    SessionGrant,
    UpstreamError,
    WorkflowValidationError,
    extract_upstream_error,
    is_placeholder_workflow_id,
    is_valid_identifier,
    resolve_identifier,
    set_identifier_cookie,
)


# =============================================================================
# Identity
# =============================================================================

class TestIdentity:

    def test_missing_cookie_generates_identifier(self):
        identifier, created = resolve_identifier(None)
        assert created is True
        assert is_valid_identifier(identifier)

    def test_generated_identifiers_are_unique(self):
        ids = {resolve_identifier(None)[0] for _ in range(50)}
        assert len(ids) == 50

    def test_existing_cookie_is_reused(self):
        existing = str(uuid.uuid4())
        assert resolve_identifier(existing) == (existing, False)

    @pytest.mark.parametrize("value", ["", "not-a-uuid", "1234", "../etc/passwd"])
    def test_malformed_cookie_is_replaced(self, value):
        identifier, created = resolve_identifier(value)
        assert created is True
        assert identifier != value
        assert is_valid_identifier(identifier)

    def test_cookie_attributes(self):
        response = Response()
        identifier = str(uuid.uuid4())
        set_identifier_cookie(response, identifier)

        header = response.headers["set-cookie"]
        assert header.startswith(f"{SESSION_COOKIE_NAME}={identifier}")
        assert "HttpOnly" in header
        assert f"Max-Age={SESSION_COOKIE_MAX_AGE}" in header
        assert SESSION_COOKIE_MAX_AGE == 30 * 24 * 60 * 60
        assert "Path=/" in header
        assert "Secure" not in header

    def test_secure_cookie(self):
        response = Response()
        set_identifier_cookie(response, str(uuid.uuid4()), secure=True)
        assert "Secure" in response.headers["set-cookie"]


# =============================================================================
# Error extraction
# =============================================================================

class TestExtractUpstreamError:

    def test_string_error(self):
        assert extract_upstream_error({"error": "Invalid workflow"}) == "Invalid workflow"

    def test_openai_error_object(self):
        payload = {"error": {"message": "Workflow not found", "type": "invalid_request_error"}}
        assert extract_upstream_error(payload) == "Workflow not found"

    def test_innermost_message_wins(self):
        payload = {
            "error": {
                "message": "Request failed",
                "details": {"error": {"message": "Workflow wf_123 is not published"}},
            },
            "message": "Upstream error",
        }
        assert extract_upstream_error(payload) == "Workflow wf_123 is not published"

    def test_details_string(self):
        assert extract_upstream_error({"details": "Quota exceeded"}) == "Quota exceeded"

    def test_top_level_message(self):
        assert extract_upstream_error({"message": "Bad request"}) == "Bad request"

    @pytest.mark.parametrize("payload", [None, {}, [], {"error": {}}, {"error": ""}, 42])
    def test_nothing_usable(self, payload):
        assert extract_upstream_error(payload) is None


# =============================================================================
# Upstream client
# =============================================================================

class TestChatKitClient:

    @pytest.fixture
    def chatkit(self, fake_api):
        return ChatKitClient(
            api_key="sk-test-key",
            base_url="https://chatkit.test/",
            transport=fake_api.transport,
        )

    @pytest.mark.asyncio
    async def test_request_shape(self, chatkit, fake_api):
        body = await chatkit.create_session("wf_123", "user-1", file_upload_enabled=True)

        assert body == {"client_secret": "cs_secret_1", "expires_after": 600}
        assert len(fake_api.requests) == 1
        request = fake_api.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://chatkit.test/v1/chatkit/sessions"
        assert request.headers["Authorization"] == "Bearer sk-test-key"
        assert request.headers["OpenAI-Beta"] == "chatkit_beta=v1"
        assert fake_api.payloads[0] == {
            "workflow": {"id": "wf_123"},
            "user": "user-1",
            "chatkit_configuration": {"file_upload": {"enabled": True}},
        }

    @pytest.mark.asyncio
    async def test_file_upload_disabled_by_default(self, chatkit, fake_api):
        await chatkit.create_session("wf_123", "user-1")
        assert fake_api.payloads[0]["chatkit_configuration"]["file_upload"]["enabled"] is False

    @pytest.mark.asyncio
    async def test_error_status_mapped(self, chatkit, fake_api):
        fake_api.status_code = 404
        fake_api.body = {"error": {"message": "Workflow not found"}}

        with pytest.raises(UpstreamError) as exc_info:
            await chatkit.create_session("wf_missing", "user-1")

        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Workflow not found"
        assert exc_info.value.details == fake_api.body
        assert len(fake_api.requests) == 1

    @pytest.mark.asyncio
    async def test_error_without_message_uses_reason_phrase(self, chatkit, fake_api):
        fake_api.status_code = 502
        fake_api.body = {}

        with pytest.raises(UpstreamError) as exc_info:
            await chatkit.create_session("wf_123", "user-1")

        assert exc_info.value.status_code == 502
        assert exc_info.value.message == "Failed to create session: Bad Gateway"

    @pytest.mark.asyncio
    async def test_network_failure(self, chatkit, fake_api):
        fake_api.raise_error = httpx.ConnectError("connection refused")

        with pytest.raises(UpstreamError) as exc_info:
            await chatkit.create_session("wf_123", "user-1")

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "Failed to reach ChatKit API"


# =============================================================================
# Request model
# =============================================================================

class TestCreateSessionRequest:

    def test_empty_payloads(self):
        for payload in (None, {}, [], "text"):
            request = CreateSessionRequest.from_payload(payload)
            assert request.requested_workflow_id() is None
            assert request.file_upload_enabled is False

    def test_workflow_object_takes_precedence(self):
        request = CreateSessionRequest.from_payload(
            {"workflow": {"id": "wf_a"}, "workflowId": "wf_b"}
        )
        assert request.requested_workflow_id() == "wf_a"

    def test_workflow_id_key(self):
        request = CreateSessionRequest.from_payload({"workflowId": "wf_b"})
        assert request.requested_workflow_id() == "wf_b"

    def test_file_upload_toggle(self):
        request = CreateSessionRequest.from_payload(
            {"chatkit_configuration": {"file_upload": {"enabled": True}}}
        )
        assert request.file_upload_enabled is True

    def test_wrong_types_rejected(self):
        with pytest.raises(WorkflowValidationError, match="Invalid request body"):
            CreateSessionRequest.from_payload({"workflowId": 123})


# =============================================================================
# Broker
# =============================================================================

class TestPlaceholder:

    @pytest.mark.parametrize("value", [
        None, "", "   ", "wf_placeholder", "wf_replace_with_your_workflow_id", "WF_YOUR_ID",
    ])
    def test_placeholders(self, value):
        assert is_placeholder_workflow_id(value) is True

    @pytest.mark.parametrize("value", ["wf_68df4b13b3588190", "wf_abc"])
    def test_real_ids(self, value):
        assert is_placeholder_workflow_id(value) is False


class TestSessionBroker:

    @pytest.mark.asyncio
    async def test_success(self, broker_factory, fake_api):
        broker = broker_factory()
        grant = await broker.create_session({})

        assert isinstance(grant, SessionGrant)
        assert grant.client_secret == "cs_secret_1"
        assert grant.expires_after == 600
        assert grant.new_identifier is True
        assert fake_api.payloads[0]["workflow"] == {"id": "wf_default123"}
        assert fake_api.users == [grant.user_id]

    @pytest.mark.asyncio
    async def test_secret_not_in_repr(self, broker_factory):
        grant = await broker_factory().create_session({})
        assert "cs_secret_1" not in repr(grant)

    @pytest.mark.asyncio
    async def test_missing_api_key_makes_no_call(self, broker_factory, fake_api):
        broker = broker_factory(OPENAI_API_KEY="")
        with pytest.raises(ConfigurationError, match="OPENAI_API_KEY"):
            await broker.create_session({"workflowId": "wf_abc"})
        assert fake_api.requests == []

    @pytest.mark.asyncio
    async def test_missing_api_key_checked_before_body(self, broker_factory, fake_api):
        broker = broker_factory(OPENAI_API_KEY="")
        with pytest.raises(ConfigurationError):
            await broker.create_session({"workflowId": 123})

    @pytest.mark.asyncio
    async def test_placeholder_workflow_makes_no_call(self, broker_factory, fake_api):
        broker = broker_factory()
        with pytest.raises(WorkflowValidationError, match="placeholder"):
            await broker.create_session({"workflowId": "wf_placeholder"})
        assert fake_api.requests == []

    @pytest.mark.asyncio
    async def test_no_workflow_anywhere(self, broker_factory, fake_api):
        broker = broker_factory(CHATKIT_WORKFLOW_ID="")
        with pytest.raises(WorkflowValidationError, match="Missing workflow id"):
            await broker.create_session(None)
        assert fake_api.requests == []

    @pytest.mark.asyncio
    async def test_blank_supplied_workflow_is_not_replaced(self, broker_factory, fake_api):
        broker = broker_factory()
        with pytest.raises(WorkflowValidationError):
            await broker.create_session({"workflowId": ""})
        assert fake_api.requests == []

    @pytest.mark.asyncio
    async def test_body_workflow_overrides_default(self, broker_factory, fake_api):
        await broker_factory().create_session({"workflow": {"id": "wf_override"}})
        assert fake_api.payloads[0]["workflow"] == {"id": "wf_override"}

    @pytest.mark.asyncio
    async def test_cookie_identifier_forwarded(self, broker_factory, fake_api):
        existing = str(uuid.uuid4())
        grant = await broker_factory().create_session({}, cookie_value=existing)
        assert grant.user_id == existing
        assert grant.new_identifier is False
        assert fake_api.users == [existing]

    @pytest.mark.asyncio
    async def test_missing_client_secret_is_upstream_error(self, broker_factory, fake_api):
        fake_api.body = {"expires_after": 600}
        with pytest.raises(UpstreamError, match="client secret"):
            await broker_factory().create_session({})

    @pytest.mark.asyncio
    async def test_no_retry_on_failure(self, broker_factory, fake_api):
        fake_api.status_code = 500
        fake_api.body = {"error": "boom"}
        with pytest.raises(UpstreamError):
            await broker_factory().create_session({})
        assert len(fake_api.requests) == 1
