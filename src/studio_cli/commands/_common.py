"""Shared helpers for CLI commands — client factory, options, design file I/O."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Any

import typer
from pydantic import ValidationError as PydanticValidationError

from studio_cli.client.backend import BackendClient
from studio_cli.config.manager import ConfigManager
from studio_cli.designer.registry import ComponentRegistry, default_registry
from studio_cli.designer.tree import DesignTree
from studio_cli.errors import StudioError
from studio_cli.models.component import DesignDocument

# Shared Typer option type aliases
ProfileOpt = Annotated[
    str | None,
    typer.Option("--profile", "-p", help="Backend profile"),
]
UrlOpt = Annotated[
    str | None,
    typer.Option("--url", help="Backend URL override"),
]
TokenOpt = Annotated[
    str | None,
    typer.Option("--token", help="API token override"),
]
HolderOpt = Annotated[
    str | None,
    typer.Option("--holder", help="Lock holder id (defaults to profile user)"),
]
FormatOpt = Annotated[
    str,
    typer.Option("--format", "-f", help="Output format (table, json, yaml, csv)"),
]
DesignFileArg = Annotated[
    Path,
    typer.Argument(help="Design document (JSON)"),
]


def get_manager() -> ConfigManager:
    return ConfigManager()


def make_client(
    profile: str | None,
    url: str | None,
    token: str | None,
) -> BackendClient:
    """Create a BackendClient from CLI options, env vars, or config profile."""
    mgr = get_manager()
    resolved = mgr.resolve_backend(profile_name=profile, url=url, token=token)
    return BackendClient(resolved)


def get_registry() -> ComponentRegistry:
    return default_registry()


def load_design(path: Path, *, strict: bool = True) -> DesignTree:
    """Read a design document from *path* into a :class:`DesignTree`."""
    if not path.exists():
        raise StudioError(f"Design file not found: {path}")
    try:
        document = DesignDocument.model_validate_json(path.read_text(encoding="utf-8"))
    except PydanticValidationError as exc:
        raise StudioError(f"Invalid design document {path}: {exc}") from exc
    return DesignTree.from_document(document, get_registry(), strict=strict)


def save_design(tree: DesignTree, path: Path) -> None:
    """Write *tree* to *path* atomically."""
    path.parent.mkdir(parents=True, exist_ok=True)
    temp = path.with_suffix(path.suffix + ".tmp")
    temp.write_text(tree.to_document().model_dump_json(indent=2) + "\n", encoding="utf-8")
    temp.replace(path)


def parse_json_option(value: str | None, option: str) -> dict[str, Any] | None:
    """Parse a JSON object passed on the command line."""
    if value is None:
        return None
    try:
        data = json.loads(value)
    except json.JSONDecodeError as exc:
        raise StudioError(f"{option} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise StudioError(f"{option} must be a JSON object")
    return data
