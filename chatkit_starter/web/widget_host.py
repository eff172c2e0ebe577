"""Widget host: waits for the widget definition, then mounts the widget.

In the browser the widget is the ``openai-chatkit`` custom element defined by
the CDN script. The host learns that the definition is available either from
a load event or by polling the custom-element registry; here those are the
:meth:`WidgetHost.mark_loaded` call and the *probe* callable.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from chatkit_starter.config.ui import (
    GREETING,
    PLACEHOLDER_INPUT,
    STARTER_PROMPTS,
    ColorScheme,
    get_theme_config,
)

logger = logging.getLogger(__name__)

WIDGET_ELEMENT = "openai-chatkit"
SCRIPT_TIMEOUT_SECONDS = 5.0
POLL_INTERVAL_SECONDS = 0.1

SCRIPT_UNAVAILABLE_MESSAGE = (
    "ChatKit web component is unavailable. Verify that the script URL is reachable."
)


class WidgetScriptError(Exception):
    """The widget definition never became available."""


def build_widget_options(scheme: ColorScheme, *, file_upload: bool = False) -> dict[str, Any]:
    """Assemble the widget options from the configuration record."""
    return {
        "theme": {"colorScheme": scheme, **get_theme_config(scheme).to_dict()},
        "startScreen": {
            "greeting": GREETING,
            "prompts": [p.to_dict() for p in STARTER_PROMPTS],
        },
        "composer": {
            "placeholder": PLACEHOLDER_INPUT,
            "attachments": {"enabled": file_upload},
        },
        "threadItemActions": {"feedback": False},
    }


@dataclass
class WidgetMount:
    """One instantiation of the widget."""

    instance_key: int
    client_secret: str = field(repr=False)
    options: dict[str, Any] = field(default_factory=dict)


class WidgetHost:
    """Detects widget readiness and renders the widget.

    Parameters
    ----------
    probe:
        Optional callable returning True once the widget element is defined.
    on_mount:
        Optional callback receiving each new :class:`WidgetMount`.
    file_upload:
        Whether the composer offers attachments. The orchestrator requests
        sessions with the same setting.
    """

    def __init__(
        self,
        probe: Callable[[], bool] | None = None,
        on_mount: Callable[[WidgetMount], None] | None = None,
        *,
        file_upload: bool = True,
    ) -> None:
        self._probe = probe
        self._on_mount = on_mount
        self._file_upload = file_upload
        self._ready = asyncio.Event()
        self._failure: str | None = None
        self._mount: WidgetMount | None = None

    @property
    def file_upload(self) -> bool:
        return self._file_upload

    # --- readiness ---

    @property
    def is_ready(self) -> bool:
        if not self._ready.is_set() and self._probe is not None and self._probe():
            self._ready.set()
        return self._ready.is_set()

    @property
    def failure(self) -> str | None:
        return self._failure

    def mark_loaded(self) -> None:
        """Load event: the widget script finished loading."""
        self._failure = None
        self._ready.set()

    def mark_failed(self, message: str = SCRIPT_UNAVAILABLE_MESSAGE) -> None:
        """Error event: the widget script failed to load."""
        self._failure = message
        self._ready.set()

    def reset(self) -> None:
        """Forget a previous failure so readiness can be detected again."""
        self._failure = None
        self._ready = asyncio.Event()

    async def wait_until_ready(
        self,
        timeout: float = SCRIPT_TIMEOUT_SECONDS,
        interval: float = POLL_INTERVAL_SECONDS,
    ) -> None:
        """Suspend until the widget definition is available.

        Raises:
            WidgetScriptError: If loading failed or *timeout* elapsed.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not self.is_ready:
            remaining = deadline - loop.time()
            if remaining <= 0:
                raise WidgetScriptError(SCRIPT_UNAVAILABLE_MESSAGE)
            try:
                await asyncio.wait_for(self._ready.wait(), timeout=min(interval, remaining))
            except asyncio.TimeoutError:
                continue
        if self._failure is not None:
            raise WidgetScriptError(self._failure)

    # --- rendering ---

    @property
    def mount(self) -> WidgetMount | None:
        return self._mount

    def render(self, client_secret: str, scheme: ColorScheme, instance_key: int) -> WidgetMount:
        """Mount the widget; a new *instance_key* discards the previous one."""
        if self._mount is not None and self._mount.instance_key != instance_key:
            logger.debug("Discarding widget instance %s", self._mount.instance_key)
        self._mount = WidgetMount(
            instance_key=instance_key,
            client_secret=client_secret,
            options=build_widget_options(scheme, file_upload=self._file_upload),
        )
        if self._on_mount is not None:
            self._on_mount(self._mount)
        return self._mount

    def unmount(self) -> None:
        self._mount = None
