"""Error taxonomy for the session broker.

Every failure the broker can produce is a :class:`BrokerError` carrying the
HTTP status it maps to. The application's exception handlers turn these into
``{"error": ...}`` JSON responses, so nothing escapes as an unhandled fault.
"""

from __future__ import annotations

from typing import Any


class BrokerError(Exception):
    """Base class for broker failures."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message}


class ConfigurationError(BrokerError):
    """The server is missing a required setting (e.g. the API key)."""

    status_code = 500


class WorkflowValidationError(BrokerError):
    """The workflow identifier is missing, malformed, or a placeholder."""

    status_code = 400


class UpstreamError(BrokerError):
    """The remote ChatKit API failed or could not be reached."""

    status_code = 500

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: Any = None,
    ) -> None:
        super().__init__(message, status_code)
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        if self.details is not None:
            body["details"] = self.details
        return body
