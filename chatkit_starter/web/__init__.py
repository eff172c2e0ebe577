"""Browser-facing side of the starter: host page, widget host, orchestrator.

Example usage:

    from chatkit_starter.web import BrokerClient, SessionOrchestrator, WidgetHost

    host = WidgetHost()
    host.mark_loaded()
    async with BrokerClient("http://localhost:8000") as broker:
        orchestrator = SessionOrchestrator(broker, host, workflow_id="wf_123")
        mount = await orchestrator.start()
"""

from chatkit_starter.web.orchestrator import (
    BrokerClient,
    FactAction,
    SessionCredential,
    SessionOrchestrator,
    SessionRequestError,
)
from chatkit_starter.web.state import ErrorState, PanelView
from chatkit_starter.web.static import (
    APP_CSS_PATH,
    APP_JS_PATH,
    get_app_css,
    get_app_js,
    get_sri_hash,
    render_page,
)
from chatkit_starter.web.widget_host import (
    WidgetHost,
    WidgetMount,
    WidgetScriptError,
    build_widget_options,
)

__all__ = [
    # Orchestrator
    "BrokerClient",
    "FactAction",
    "SessionCredential",
    "SessionOrchestrator",
    "SessionRequestError",
    # State
    "ErrorState",
    "PanelView",
    # Widget host
    "WidgetHost",
    "WidgetMount",
    "WidgetScriptError",
    "build_widget_options",
    # Static assets
    "APP_CSS_PATH",
    "APP_JS_PATH",
    "get_app_css",
    "get_app_js",
    "get_sri_hash",
    "render_page",
]
