"""Registry commands — inspect the component catalog."""

from __future__ import annotations

from typing import Annotated, Optional

import typer

from studio_cli.commands._common import FormatOpt, get_registry
from studio_cli.errors import error_handler
from studio_cli.output.formatter import output

app = typer.Typer(name="registry", help="Inspect registered component types.")


def _names(values: frozenset[str] | None) -> str:
    return ", ".join(sorted(values)) if values is not None else "any"


@app.command("list")
@error_handler
def list_types(
    category: Annotated[Optional[str], typer.Option("--category", "-c", help="Filter by category")] = None,
    fmt: FormatOpt = "table",
) -> None:
    """List component types."""
    registry = get_registry()
    definitions = (
        registry.by_category(category) if category
        else [registry.get(t) for t in registry.types]
    )
    rows = [
        [d.type, d.name, d.category, "yes" if d.constraints.can_contain_children else "no"]
        for d in definitions
    ]
    output(
        definitions,
        fmt,
        columns=["Type", "Name", "Category", "Container"],
        rows=rows,
        title="Component Types",
    )


@app.command()
@error_handler
def show(
    type_name: Annotated[str, typer.Argument(help="Component type")],
    fmt: FormatOpt = "table",
) -> None:
    """Show a component type's defaults and placement constraints."""
    definition = get_registry().get(type_name)
    if fmt != "table":
        output(definition, fmt)
        return
    c = definition.constraints
    output(
        {
            "type": definition.type,
            "name": definition.name,
            "category": definition.category,
            "description": definition.description,
            "default props": definition.default_props,
            "default styles": definition.default_styles,
            "can contain children": c.can_contain_children,
            "can be root": c.can_be_root,
            "max depth": c.max_depth if c.max_depth is not None else "unlimited",
            "max children": c.max_children if c.max_children is not None else "unlimited",
            "allowed parents": _names(c.allowed_parents),
            "allowed children": _names(c.allowed_children),
        },
        fmt,
        kv=True,
        title=f"Component: {definition.type}",
    )
