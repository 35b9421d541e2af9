"""Config commands — backend profiles and designer defaults."""

from __future__ import annotations

from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.prompt import Confirm, Prompt

from studio_cli.client.backend import BackendClient
from studio_cli.config.manager import ConfigManager
from studio_cli.config.models import BackendProfile, DesignerSettings
from studio_cli.errors import StudioError, error_handler
from studio_cli.output.formatter import output

app = typer.Typer(name="config", help="Manage backend profiles and CLI configuration.")
console = Console()

NameArg = Annotated[str, typer.Argument(help="Profile name")]
FormatOpt = Annotated[str, typer.Option("--format", "-f", help="Output format")]


def _get_manager() -> ConfigManager:
    return ConfigManager()


def _require_profile(mgr: ConfigManager, name: str) -> BackendProfile:
    profile = mgr.get_profile(name)
    if profile is None:
        raise StudioError(f"Profile '{name}' not found")
    return profile


def _masked(token: str) -> str:
    return f"{token[:8]}..." if len(token) > 8 else "***"


@app.command()
@error_handler
def init() -> None:
    """Interactive setup: create a backend profile and make it the default."""
    mgr = _get_manager()
    console.print("[bold]studio-cli setup[/]\n")

    answers = {
        "name": Prompt.ask("Profile name", default="default"),
        "url": Prompt.ask("Backend URL (e.g. https://studio.example.com)"),
        "token": Prompt.ask("API token", default=None) or None,
        "user": Prompt.ask("Lock holder id (your user name)", default=None) or None,
        "verify_ssl": Confirm.ask("Verify TLS certificates?", default=True),
    }
    profile = BackendProfile(**answers)
    mgr.add_profile(profile)
    mgr.set_default(profile.name)
    console.print(f"\n[green]Profile '{profile.name}' saved as default[/] in {mgr.config_path}")


@app.command()
@error_handler
def add(
    name: NameArg,
    url: Annotated[str, typer.Option("--url", "-u", help="Backend URL")],
    token: Annotated[Optional[str], typer.Option("--token", "-t", help="API token")] = None,
    user: Annotated[Optional[str], typer.Option("--user", help="Lock holder id")] = None,
    no_verify_ssl: Annotated[bool, typer.Option("--no-verify-ssl", help="Skip TLS verification")] = False,
    make_default: Annotated[bool, typer.Option("--default", help="Make this the default profile")] = False,
) -> None:
    """Add or replace a backend profile."""
    mgr = _get_manager()
    mgr.add_profile(
        BackendProfile(name=name, url=url, token=token, user=user, verify_ssl=not no_verify_ssl)
    )
    if make_default:
        mgr.set_default(name)
    console.print(f"[green]Profile '{name}' added.[/]")


@app.command("list")
@error_handler
def list_profiles(fmt: FormatOpt = "table") -> None:
    """List configured backend profiles."""
    mgr = _get_manager()
    profiles = list(mgr.config.profiles.values())
    if not profiles:
        console.print("[yellow]No profiles configured. Run 'studio-cli config init' to get started.[/]")
        return

    default = mgr.config.default_profile
    output(
        {"profiles": [p.model_dump(exclude={"token"}, exclude_none=True) for p in profiles]},
        fmt,
        columns=["Name", "URL", "Holder", "Auth", "Default"],
        rows=[
            [p.name, p.url, p.user, "token" if p.auth_configured else "none", "*" if p.name == default else ""]
            for p in profiles
        ],
        title="Backend Profiles",
    )


@app.command()
@error_handler
def show(name: NameArg, fmt: FormatOpt = "table") -> None:
    """Show one profile; the token is masked."""
    profile = _require_profile(_get_manager(), name)
    data = profile.model_dump(exclude_none=True)
    if profile.token:
        data["token"] = _masked(profile.token)
    output(data, fmt, kv=True, title=f"Profile: {name}")


@app.command("set-default")
@error_handler
def set_default(name: NameArg) -> None:
    """Make NAME the default profile."""
    if not _get_manager().set_default(name):
        raise StudioError(f"Profile '{name}' not found")
    console.print(f"[green]Default profile set to '{name}'.[/]")


@app.command()
@error_handler
def test(
    name: Annotated[Optional[str], typer.Argument(help="Profile name (default profile if omitted)")] = None,
) -> None:
    """Check that the backend answers its health endpoint."""
    profile = _get_manager().resolve_backend(profile_name=name)
    console.print(f"Testing connection to [bold]{profile.url}[/]...")
    with BackendClient(profile) as client:
        info = client.health()
    console.print(
        f"[green]Connected![/] Backend: {info.get('name', 'unknown')} v{info.get('version', '?')}"
    )


@app.command()
@error_handler
def remove(
    name: NameArg,
    force: Annotated[bool, typer.Option("--force", "-f", help="Do not ask for confirmation")] = False,
) -> None:
    """Delete a backend profile."""
    mgr = _get_manager()
    _require_profile(mgr, name)
    if not force and not Confirm.ask(f"Remove profile '{name}'?"):
        console.print("Cancelled.")
        return
    mgr.remove_profile(name)
    console.print(f"[green]Profile '{name}' removed.[/]")


@app.command()
@error_handler
def designer(
    mobile_first: Annotated[
        Optional[bool], typer.Option("--mobile-first/--desktop-first", help="Cascade direction"),
    ] = None,
    breakpoints: Annotated[Optional[str], typer.Option("--breakpoints", help="Breakpoint set")] = None,
    lock_minutes: Annotated[Optional[int], typer.Option("--lock-minutes", help="Editing lock duration")] = None,
    fmt: FormatOpt = "table",
) -> None:
    """Show or change the designer defaults."""
    mgr = _get_manager()
    changes = {
        key: value
        for key, value in (
            ("mobile_first", mobile_first),
            ("breakpoints", breakpoints),
            ("lock_duration_minutes", lock_minutes),
        )
        if value is not None
    }
    if changes:
        merged = mgr.config.designer.model_dump() | changes
        mgr.config.designer = DesignerSettings.model_validate(merged)
        mgr.save()
        console.print("[green]Designer settings updated.[/]")
    output(mgr.config.designer.model_dump(), fmt, kv=True, title="Designer Settings")
