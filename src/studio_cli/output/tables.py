"""Rich table and tree rendering helpers."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Any

from rich.table import Table
from rich.tree import Tree

from studio_cli.designer.tree import DesignTree
from studio_cli.models.lock import ResourceLock, format_remaining


def make_table(
    title: str | None,
    columns: Sequence[str],
    rows: Sequence[Sequence[Any]],
    *,
    show_lines: bool = False,
) -> Table:
    """Build a Rich Table from column headers and row data."""
    table = Table(title=title, show_lines=show_lines)
    for col in columns:
        table.add_column(col, no_wrap=False)
    for row in rows:
        table.add_row(*(str(cell) if cell is not None else "" for cell in row))
    return table


def kv_table(data: dict[str, Any], *, title: str | None = None) -> Table:
    """Render a key-value dict as a two-column table."""
    table = Table(title=title, show_header=False, show_lines=False)
    table.add_column("Key", style="bold cyan", no_wrap=True)
    table.add_column("Value")
    for key, value in data.items():
        table.add_row(key, str(value) if value is not None else "")
    return table


def design_tree(tree: DesignTree) -> Tree:
    """Render the component hierarchy, children in document order."""
    label = tree.name or "design"
    root = Tree(f"[bold]{label}[/]")
    nodes: dict[str | None, Tree] = {None: root}
    for instance in tree.walk():
        parent = nodes.get(instance.parent_id, root)
        marker = f" [dim]({', '.join(instance.responsive)})[/]" if instance.responsive else ""
        nodes[instance.id] = parent.add(f"[green]{instance.type}[/] {instance.id}{marker}")
    return root


LOCK_COLUMNS = ["Resource", "Holder", "Type", "Expires", "Remaining", "Reason"]


def lock_rows(locks: Sequence[ResourceLock], now: datetime) -> list[list[Any]]:
    return [
        [
            lock.resource_id,
            lock.holder_id,
            lock.lock_type.value,
            f"{lock.expires_at:%Y-%m-%d %H:%M:%S}",
            format_remaining(lock, now),
            lock.reason,
        ]
        for lock in locks
    ]
