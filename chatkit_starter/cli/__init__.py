"""
ChatKit starter - Command Line Interface

Built with Typer for the command-line experience and Rich for output.

Usage:
    $ chatkit-starter --help
    $ chatkit-starter serve --reload
    $ chatkit-starter session --url http://127.0.0.1:8000
    $ chatkit-starter config show
    $ chatkit-starter doctor run

Sub-command Groups:
    config   - Configuration inspection
    doctor   - Diagnostic commands
"""

from __future__ import annotations

import asyncio
import logging

import typer
from rich.panel import Panel

from chatkit_starter import __version__
from chatkit_starter.cli.output import console, err_console

# Create main application
app = typer.Typer(
    name="chatkit-starter",
    help="ChatKit starter - host page and session broker",
    no_args_is_help=True,
    rich_markup_mode="rich",
    pretty_exceptions_enable=True,
    pretty_exceptions_show_locals=False,
)

# Create sub-command groups
config_app = typer.Typer(
    name="config",
    help="Configuration inspection commands",
    no_args_is_help=True,
)

doctor_app = typer.Typer(
    name="doctor",
    help="Troubleshooting and diagnostic commands",
    no_args_is_help=True,
)

# Register sub-commands
app.add_typer(config_app, name="config")
app.add_typer(doctor_app, name="doctor")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"ChatKit starter version {__version__}")
        raise typer.Exit()


def verbose_callback(value: bool) -> None:
    """Set verbose mode."""
    if value:
        logging.basicConfig(level=logging.DEBUG)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        callback=verbose_callback,
        help="Enable verbose output.",
    ),
) -> None:
    """
    ChatKit starter - host page and session broker for an embedded ChatKit widget.

    Use --help on any subcommand for detailed information.
    """


@app.command()
def serve(
    host: str = typer.Option(
        "127.0.0.1",
        "--host",
        "-h",
        help="Host to bind to.",
    ),
    port: int = typer.Option(
        8000,
        "--port",
        "-p",
        help="Port to bind to.",
    ),
    reload: bool = typer.Option(
        False,
        "--reload",
        "-r",
        help="Enable auto-reload for development.",
    ),
) -> None:
    """
    Start the web server.

    Serves the host page and the create-session endpoint.
    """
    import uvicorn

    from chatkit_starter.config.settings import settings

    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    console.print(Panel.fit(
        f"Starting ChatKit starter on [cyan]http://{host}:{port}[/cyan]",
        title="Server",
    ))

    if reload:
        console.print("[yellow]Auto-reload enabled (development mode)[/yellow]")

    console.print("Press [bold]Ctrl+C[/bold] to stop")
    console.print()

    uvicorn.run("chatkit_starter.main:app", host=host, port=port, reload=reload)


async def _probe_script(url: str) -> str | None:
    """Fetch the widget script; return an error message or None."""
    import httpx

    try:
        async with httpx.AsyncClient(follow_redirects=True) as client:
            resp = await client.get(url)
    except httpx.HTTPError as e:
        return f"Failed to load the ChatKit script: {type(e).__name__}"
    if resp.is_error:
        return f"Failed to load the ChatKit script: HTTP {resp.status_code}"
    return None


async def _run_sessions(url: str, workflow_id: str, count: int, check_script: bool) -> int:
    from chatkit_starter.cli.output import print_error, print_info, print_success
    from chatkit_starter.config.settings import settings
    from chatkit_starter.web.orchestrator import BrokerClient, SessionOrchestrator
    from chatkit_starter.web.widget_host import WidgetHost

    host = WidgetHost()
    if check_script:
        failure = await _probe_script(settings.CHATKIT_SCRIPT_URL)
        if failure:
            host.mark_failed(failure)
        else:
            host.mark_loaded()
    else:
        host.mark_loaded()

    identifiers: list[str | None] = []
    async with BrokerClient(url) as broker:
        orchestrator = SessionOrchestrator(broker, host, workflow_id=workflow_id or None)
        mount = await orchestrator.start()
        for _ in range(count):
            view = orchestrator.view()
            if mount is None or view.blocking:
                print_error(view.message or "Session was not created", hint=(
                    "Retry is available" if view.can_retry else "Fix the configuration and retry"
                ))
                return 1
            identifiers.append(broker.identifier)
            print_success(
                f"Widget instance {mount.instance_key} received a client secret",
                details=f"secret length={len(mount.client_secret)}",
            )
            if len(identifiers) < count:
                mount = await orchestrator.reset_chat()
        orchestrator.unmount()

    if count > 1:
        stable = len(set(identifiers)) == 1
        print_info(f"Anonymous identifier {'stable' if stable else 'changed'} across {count} sessions")
    return 0


@app.command()
def session(
    url: str = typer.Option(
        "http://127.0.0.1:8000",
        "--url",
        "-u",
        help="Base URL of a running ChatKit starter server.",
    ),
    workflow_id: str = typer.Option(
        "",
        "--workflow-id",
        "-w",
        help="Workflow id override; defaults to the server's configured id.",
    ),
    count: int = typer.Option(
        1,
        "--count",
        "-n",
        min=1,
        help="Number of consecutive sessions to create.",
    ),
    check_script: bool = typer.Option(
        True,
        "--check-script/--no-check-script",
        help="Verify that the widget script URL is reachable first.",
    ),
) -> None:
    """
    Create sessions through a running broker, the way the host page does.

    The client secret itself is never printed.
    """
    exit_code = asyncio.run(_run_sessions(url, workflow_id, count, check_script))
    if exit_code:
        raise typer.Exit(exit_code)


def _register_subcommands() -> None:
    """Register all subcommand modules."""
    from chatkit_starter.cli import config  # noqa: F401
    from chatkit_starter.cli import doctor  # noqa: F401


# Expose the apps for use in submodules
__all__ = [
    "app",
    "config_app",
    "doctor_app",
    "console",
    "err_console",
]


def cli() -> None:
    """Entry point for the CLI."""
    app()


_register_subcommands()
