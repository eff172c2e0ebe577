"""
ChatKit starter CLI - Config Commands

Commands:
    show  - Show effective settings (secrets masked)
    ui    - Show the widget UI configuration record
"""

from __future__ import annotations

import typer
from rich.table import Table

from chatkit_starter.cli import config_app, console


def _settings_rows() -> list[tuple[str, str]]:
    from chatkit_starter.cli.output import mask_secret
    from chatkit_starter.config.settings import settings

    return [
        ("ENVIRONMENT", settings.ENVIRONMENT),
        ("OPENAI_API_KEY", mask_secret(settings.OPENAI_API_KEY)),
        ("CHATKIT_WORKFLOW_ID", settings.CHATKIT_WORKFLOW_ID or "(not set)"),
        ("CHATKIT_API_BASE", settings.CHATKIT_API_BASE),
        ("CHATKIT_SCRIPT_URL", settings.CHATKIT_SCRIPT_URL),
        ("LOG_LEVEL", settings.LOG_LEVEL),
        ("CORS_ORIGINS", ", ".join(settings.CORS_ORIGINS)),
    ]


@config_app.command("show")
def show_config(
    format: str = typer.Option(
        "table",
        "--format",
        "-f",
        help="Output format: table, json.",
    ),
) -> None:
    """
    Show the effective settings.

    Values come from the environment and the .env file. The API key is masked.
    """
    from chatkit_starter.cli.output import print_json

    rows = _settings_rows()
    if format == "json":
        print_json(dict(rows))
        return

    table = Table(title="ChatKit starter settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for name, value in rows:
        table.add_row(name, value)
    console.print(table)


@config_app.command("ui")
def show_ui_config() -> None:
    """Show the greeting, prompts, placeholder, and theme parameters."""
    from chatkit_starter.cli.output import print_json
    from chatkit_starter.config.ui import ui_config_dict

    print_json(ui_config_dict())
