"""Lock commands — manage resource locks on the builder backend."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Annotated, Optional

import typer
from rich.console import Console

from studio_cli.client.backend import BackendClient
from studio_cli.commands._common import (
    FormatOpt,
    HolderOpt,
    ProfileOpt,
    TokenOpt,
    UrlOpt,
    get_manager,
)
from studio_cli.config.models import BackendProfile
from studio_cli.errors import error_handler
from studio_cli.locking.http_store import HttpLockStore
from studio_cli.locking.manager import LockManager
from studio_cli.models.lock import LockType, format_remaining
from studio_cli.output.formatter import output
from studio_cli.output.tables import LOCK_COLUMNS, lock_rows

app = typer.Typer(name="lock", help="Acquire, release, and inspect resource locks.")
console = Console()

ResourceArg = Annotated[str, typer.Argument(help="Locked resource (e.g. a table id)")]
LockTokenOpt = Annotated[str, typer.Option("--lock-token", help="Token returned by 'lock acquire'")]


@contextmanager
def _lock_manager(
    profile: str | None,
    url: str | None,
    token: str | None,
) -> Iterator[tuple[LockManager, BackendProfile]]:
    resolved = get_manager().resolve_backend(profile_name=profile, url=url, token=token)
    with BackendClient(resolved) as client:
        yield LockManager(HttpLockStore(client)), resolved


@app.command()
@error_handler
def acquire(
    resource_id: ResourceArg,
    lock_type: Annotated[LockType, typer.Option("--type", help="Lock type")] = LockType.FIELD_EDIT,
    minutes: Annotated[Optional[int], typer.Option("--minutes", "-m", help="Lock duration (default per type)")] = None,
    reason: Annotated[Optional[str], typer.Option("--reason", "-r", help="Why the lock is held")] = None,
    holder: HolderOpt = None,
    profile: ProfileOpt = None,
    url: UrlOpt = None,
    token: TokenOpt = None,
    fmt: FormatOpt = "table",
) -> None:
    """Acquire (or refresh) a lock on RESOURCE_ID."""
    with _lock_manager(profile, url, token) as (locks, resolved):
        holder_id = get_manager().resolve_holder(holder, resolved)
        lock = locks.acquire(resource_id, holder_id, lock_type, minutes, reason)
        now = locks.now()
    if fmt != "table":
        output(lock, fmt)
        return
    console.print(
        f"[green]Locked '{resource_id}'[/] for {holder_id} "
        f"({format_remaining(lock, now)} remaining)"
    )
    console.print(f"Lock token: [bold]{lock.token}[/]")


@app.command()
@error_handler
def release(
    resource_id: ResourceArg,
    lock_token: LockTokenOpt,
    strict: Annotated[bool, typer.Option("--strict", help="Fail when no lock exists")] = False,
    profile: ProfileOpt = None,
    url: UrlOpt = None,
    token: TokenOpt = None,
) -> None:
    """Release a lock you hold."""
    with _lock_manager(profile, url, token) as (locks, _):
        released = locks.release(resource_id, lock_token, strict=strict)
    if released:
        console.print(f"[green]Released lock on '{resource_id}'.[/]")
    else:
        console.print(f"[yellow]No lock on '{resource_id}'; nothing to release.[/]")


@app.command()
@error_handler
def extend(
    resource_id: ResourceArg,
    lock_token: LockTokenOpt,
    minutes: Annotated[int, typer.Option("--minutes", "-m", help="Minutes to add (1-120)")],
    profile: ProfileOpt = None,
    url: UrlOpt = None,
    token: TokenOpt = None,
) -> None:
    """Extend a lock you hold."""
    with _lock_manager(profile, url, token) as (locks, _):
        lock = locks.extend(resource_id, lock_token, minutes)
        now = locks.now()
    console.print(
        f"[green]Extended lock on '{resource_id}'[/] until "
        f"{lock.expires_at:%Y-%m-%d %H:%M:%S} ({format_remaining(lock, now)} remaining)"
    )


@app.command("list")
@error_handler
def list_locks(
    resource_id: Annotated[Optional[str], typer.Argument(help="Only this resource")] = None,
    profile: ProfileOpt = None,
    url: UrlOpt = None,
    token: TokenOpt = None,
    fmt: FormatOpt = "table",
) -> None:
    """List active locks."""
    with _lock_manager(profile, url, token) as (locks, _):
        active = locks.list_active(resource_id)
        now = locks.now()
    if not active and fmt == "table":
        console.print("[yellow]No active locks.[/]")
        return
    output(
        active,
        fmt,
        columns=LOCK_COLUMNS,
        rows=lock_rows(active, now),
        title="Active Locks",
    )


@app.command()
@error_handler
def cleanup(
    profile: ProfileOpt = None,
    url: UrlOpt = None,
    token: TokenOpt = None,
) -> None:
    """Purge expired lock rows."""
    with _lock_manager(profile, url, token) as (locks, _):
        removed = locks.cleanup_expired()
    console.print(f"[green]Removed {removed} expired lock(s).[/]")
