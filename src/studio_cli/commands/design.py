"""Design commands — build and inspect design documents on disk."""

from __future__ import annotations

from typing import Annotated, Optional

import typer
from rich.console import Console

from studio_cli.commands._common import (
    DesignFileArg,
    FormatOpt,
    get_manager,
    get_registry,
    load_design,
    parse_json_option,
    save_design,
)
from studio_cli.designer.responsive import ResponsiveResolver
from studio_cli.designer.tree import DesignTree
from studio_cli.errors import InvalidDesign, StudioError, error_handler
from studio_cli.models.breakpoint import get_breakpoint_set
from studio_cli.models.component import ResponsiveConflict
from studio_cli.output.formatter import output
from studio_cli.output.tables import design_tree

app = typer.Typer(name="design", help="Create, edit, and validate design documents.")
console = Console()

IndexOpt = Annotated[
    Optional[int],
    typer.Option("--index", "-i", help="Position among the parent's children (default: last)"),
]


def _resolver(tree: DesignTree, desktop_first: bool) -> ResponsiveResolver:
    settings = get_manager().config.designer
    mobile_first = settings.mobile_first and not desktop_first
    return ResponsiveResolver(tree.breakpoints, mobile_first=mobile_first)


@app.command()
@error_handler
def new(
    path: DesignFileArg,
    name: Annotated[Optional[str], typer.Option("--name", "-n", help="Design name")] = None,
    root_type: Annotated[str, typer.Option("--root", help="Root component type")] = "container",
    breakpoints: Annotated[
        Optional[str], typer.Option("--breakpoints", "-b", help="Breakpoint set (tailwind, designer)"),
    ] = None,
    force: Annotated[bool, typer.Option("--force", help="Overwrite an existing file")] = False,
) -> None:
    """Create a design holding only a root component."""
    if path.exists() and not force:
        raise StudioError(f"{path} already exists (use --force to overwrite)")
    bp_name = breakpoints or get_manager().config.designer.breakpoints
    tree = DesignTree.new(
        get_registry(),
        root_type,
        name=name or path.stem,
        breakpoints=get_breakpoint_set(bp_name),
    )
    save_design(tree, path)
    console.print(f"[green]Created design '{tree.name}'[/] root: {tree.root_id}")


@app.command("tree")
@error_handler
def show_tree(path: DesignFileArg) -> None:
    """Show the component hierarchy."""
    console.print(design_tree(load_design(path)))


@app.command()
@error_handler
def insert(
    path: DesignFileArg,
    parent_id: Annotated[str, typer.Argument(help="Parent instance id")],
    type_name: Annotated[str, typer.Argument(help="Component type")],
    index: IndexOpt = None,
    props: Annotated[Optional[str], typer.Option("--props", help="Property overrides (JSON object)")] = None,
    styles: Annotated[Optional[str], typer.Option("--styles", help="Style overrides (JSON object)")] = None,
) -> None:
    """Insert a new component under PARENT_ID."""
    tree = load_design(path)
    instance = tree.insert(
        parent_id,
        type_name,
        index,
        props=parse_json_option(props, "--props"),
        styles=parse_json_option(styles, "--styles"),
    )
    save_design(tree, path)
    console.print(f"[green]Inserted {type_name}[/] {instance.id} under {parent_id}")


@app.command()
@error_handler
def move(
    path: DesignFileArg,
    instance_id: Annotated[str, typer.Argument(help="Instance to move")],
    parent_id: Annotated[str, typer.Argument(help="New parent instance id")],
    index: IndexOpt = None,
) -> None:
    """Move a component (and its subtree) under a new parent or position."""
    tree = load_design(path)
    tree.move(instance_id, parent_id, index)
    save_design(tree, path)
    console.print(f"[green]Moved[/] {instance_id} under {parent_id}")


@app.command()
@error_handler
def remove(
    path: DesignFileArg,
    instance_id: Annotated[str, typer.Argument(help="Instance to remove")],
) -> None:
    """Remove a component and everything below it."""
    tree = load_design(path)
    removed = tree.remove(instance_id)
    save_design(tree, path)
    console.print(f"[green]Removed {len(removed)} instance(s).[/]")


@app.command()
@error_handler
def duplicate(
    path: DesignFileArg,
    instance_id: Annotated[str, typer.Argument(help="Instance to copy")],
) -> None:
    """Copy a component and its subtree right after the original."""
    tree = load_design(path)
    copy = tree.duplicate(instance_id)
    save_design(tree, path)
    copied = 1 + len(tree.descendants(copy.id))
    console.print(f"[green]Duplicated {instance_id}[/] as {copy.id} ({copied} instance(s))")


@app.command("set")
@error_handler
def set_values(
    path: DesignFileArg,
    instance_id: Annotated[str, typer.Argument(help="Instance id")],
    props: Annotated[Optional[str], typer.Option("--props", help="Props to merge (JSON; null deletes)")] = None,
    styles: Annotated[Optional[str], typer.Option("--styles", help="Styles to merge (JSON; null deletes)")] = None,
) -> None:
    """Merge base props/styles into a component."""
    if props is None and styles is None:
        raise StudioError("Nothing to set: pass --props and/or --styles")
    tree = load_design(path)
    tree.update(
        instance_id,
        props=parse_json_option(props, "--props"),
        styles=parse_json_option(styles, "--styles"),
    )
    save_design(tree, path)
    console.print(f"[green]Updated[/] {instance_id}")


@app.command()
@error_handler
def responsive(
    path: DesignFileArg,
    instance_id: Annotated[str, typer.Argument(help="Instance id")],
    breakpoint: Annotated[str, typer.Argument(help="Breakpoint name")],
    rule: Annotated[
        Optional[str],
        typer.Option("--json", help='Override rule, e.g. {"styles": {"width": "50%"}, "visible": true}'),
    ] = None,
    clear: Annotated[bool, typer.Option("--clear", help="Remove the override")] = False,
) -> None:
    """Set or clear a breakpoint override."""
    if rule is None and not clear:
        raise StudioError("Pass --json RULE or --clear")
    tree = load_design(path)
    tree.set_responsive(instance_id, breakpoint, None if clear else parse_json_option(rule, "--json"))
    save_design(tree, path)
    action = "Cleared" if clear else "Set"
    console.print(f"[green]{action} '{breakpoint}' override[/] on {instance_id}")


@app.command()
@error_handler
def validate(path: DesignFileArg, fmt: FormatOpt = "table") -> None:
    """Check the design for structural violations."""
    tree = load_design(path, strict=False)
    violations = tree.validate_tree()
    if not violations:
        console.print(f"[green]Design is valid[/] ({len(tree)} instances).")
        return
    output(
        violations,
        fmt,
        columns=["Code", "Instance", "Message"],
        rows=[[v.code, v.instance_id, v.message] for v in violations],
        title="Violations",
    )
    raise typer.Exit(InvalidDesign.exit_code)


@app.command()
@error_handler
def resolve(
    path: DesignFileArg,
    instance_id: Annotated[str, typer.Argument(help="Instance id")],
    breakpoint: Annotated[str, typer.Option("--breakpoint", "-b", help="Breakpoint name")],
    desktop_first: Annotated[bool, typer.Option("--desktop-first", help="Cascade from the largest breakpoint")] = False,
    fmt: FormatOpt = "table",
) -> None:
    """Show the effective props, styles, and visibility at a breakpoint."""
    tree = load_design(path)
    resolved = _resolver(tree, desktop_first).resolve(tree.get(instance_id), breakpoint)
    if fmt != "table":
        output(resolved, fmt)
        return
    data = {"visible": resolved.visible}
    data.update({f"props.{k}": v for k, v in resolved.props.items()})
    data.update({f"styles.{k}": v for k, v in resolved.styles.items()})
    output(data, fmt, kv=True, title=f"{instance_id} @ {breakpoint}")


@app.command()
@error_handler
def check(
    path: DesignFileArg,
    instance_id: Annotated[Optional[str], typer.Argument(help="Instance id (default: all)")] = None,
    desktop_first: Annotated[bool, typer.Option("--desktop-first", help="Cascade from the largest breakpoint")] = False,
    fmt: FormatOpt = "table",
) -> None:
    """Report responsive authoring conflicts."""
    tree = load_design(path)
    resolver = _resolver(tree, desktop_first)
    targets = [tree.get(instance_id)] if instance_id else list(tree.walk())
    conflicts: list[ResponsiveConflict] = []
    duplicates: dict[str, list[str]] = {}
    # A grid overflow is reported once per row and breakpoint, not once per column
    seen_grids: set[tuple[str | None, tuple[str, ...]]] = set()
    for instance in targets:
        for conflict in resolver.validate_responsive_config(instance, tree.siblings(instance.id)):
            if conflict.type == "layout_conflict":
                key = (instance.parent_id, tuple(conflict.breakpoints))
                if key in seen_grids:
                    continue
                seen_grids.add(key)
            conflicts.append(conflict)
        repeated = resolver.find_duplicate_rules(instance)
        if repeated:
            duplicates[instance.id] = repeated

    if not conflicts and not duplicates:
        console.print("[green]No responsive conflicts found.[/]")
        return
    if conflicts:
        output(
            conflicts,
            fmt,
            columns=["Severity", "Type", "Instance", "Breakpoints", "Message"],
            rows=[
                [c.severity, c.type, c.instance_id, ", ".join(c.breakpoints), c.message]
                for c in conflicts
            ],
            title="Responsive Conflicts",
        )
    if fmt == "table":
        for iid, names in duplicates.items():
            console.print(f"[dim]{iid}: rules at {', '.join(names)} repeat the previous breakpoint[/]")
    if any(c.severity == "error" for c in conflicts):
        raise typer.Exit(1)
