"""UI error state and the overlay view derived from it."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

PanelStatus = Literal["script-error", "session-error", "loading", "ready"]


@dataclass
class ErrorState:
    """Three independently tracked failure flags.

    Attributes:
        script: Widget script failed to load. Blocks the whole widget.
        session: Session creation failed. Blocks the chat surface.
        integration: The widget reported a problem. Non-fatal; the widget
            shows its own error UI.
        retryable: Whether the blocking failure offers a retry action.
    """

    script: str | None = None
    session: str | None = None
    integration: str | None = None
    retryable: bool = False

    @property
    def blocking(self) -> str | None:
        """The message that blocks rendering, script errors first."""
        return self.script or self.session

    def clear(self) -> None:
        self.script = None
        self.session = None
        self.integration = None
        self.retryable = False


@dataclass(frozen=True)
class PanelView:
    """What the host page shows over (or instead of) the widget."""

    status: PanelStatus
    message: str | None = None
    can_retry: bool = False

    @property
    def blocking(self) -> bool:
        return self.status in ("script-error", "session-error")
