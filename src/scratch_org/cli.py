import asyncio
import json
from pathlib import Path
from typing import Any
import uuid

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
import typer

from scratch_org.api import request_scratch_org_creation
from scratch_org.auth_store import FileAuthStore
from scratch_org.config import get_settings
from scratch_org.exceptions import ScratchOrgError
from scratch_org.hub import HubOrg, RestHubConnection
from scratch_org.logging_config import bind_request_id, clear_context, setup_logging
from scratch_org.models import ScratchOrgRequest
from scratch_org.settings_generator import SettingsGenerator

app = typer.Typer(help="Request scratch orgs from a hub org.")
console = Console()


@app.callback()
def callback():
    """
    Scratch org provisioner
    """


def parse_overrides(values: list[str]) -> dict[str, Any]:
    """Parse ``Key=Value`` pairs; values are read as JSON when possible."""
    overrides: dict[str, Any] = {}
    for item in values:
        if "=" not in item:
            raise typer.BadParameter(f"Expected Key=Value, got '{item}'", param_hint="--set")
        key, raw = item.split("=", 1)
        try:
            value = json.loads(raw)
        except ValueError:
            value = raw
        overrides[key.strip()] = value
    return overrides


def load_definition(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise typer.BadParameter(f"Cannot read definition file: {e}") from e
    if not isinstance(data, dict):
        raise typer.BadParameter("Definition file must contain a JSON object")
    return data


async def _create(request: ScratchOrgRequest, hub_username: str | None) -> bool:
    settings = get_settings()
    async with RestHubConnection.from_settings(settings) as connection:
        hub_org = HubOrg(connection, FileAuthStore(settings.auth_dir), username=hub_username)
        return await request_scratch_org_creation(hub_org, request, SettingsGenerator())


@app.command()
def create(
    definition_file: Path = typer.Option(
        ..., "--definition-file", "-f", help="Scratch org definition (JSON)"
    ),
    overrides: list[str] = typer.Option(
        [], "--set", "-s", help="Override a definition field: Key=Value"
    ),
    hub_username: str | None = typer.Option(None, "--hub-username", help="Hub org username"),
):
    """Submit a ScratchOrgInfo request to the hub org."""
    settings = get_settings()
    setup_logging(settings.service_name, settings.log_format, settings.log_level)
    bind_request_id(str(uuid.uuid4()))

    try:
        request = ScratchOrgRequest.from_definition(
            load_definition(definition_file), parse_overrides(overrides)
        )
    except ValidationError as e:
        console.print(f"[red]Invalid scratch org definition:[/red]\n{escape(str(e))}")
        raise typer.Exit(code=2) from e

    try:
        asyncio.run(_create(request, hub_username))
    except ScratchOrgError as e:
        console.print(f"[red]{e.name}:[/red] {escape(e.message)}")
        for action in e.actions:
            console.print(f"  - {escape(action)}")
        raise typer.Exit(code=e.exit_code) from e
    except ValueError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=1) from e
    finally:
        clear_context()

    console.print("[green]Scratch org request submitted.[/green]")


if __name__ == "__main__":
    app()
