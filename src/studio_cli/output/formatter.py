"""Output dispatcher — renders command results as table, JSON, YAML, or CSV."""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Callable, Sequence
from typing import Any

import yaml
from pydantic import BaseModel
from rich.console import Console

from studio_cli.output.tables import kv_table, make_table

console = Console()

FORMATS = ("table", "json", "yaml", "csv")

Columns = Sequence[str]
Rows = Sequence[Sequence[Any]]


def to_plain(data: Any) -> Any:
    """Convert models (also nested in lists and dicts) to JSON-safe values."""
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json")
    if isinstance(data, (list, tuple)):
        return [to_plain(item) for item in data]
    if isinstance(data, dict):
        return {key: to_plain(value) for key, value in data.items()}
    return data


def output_json(data: Any) -> None:
    console.print_json(json.dumps(to_plain(data), default=str))


def output_yaml(data: Any) -> None:
    text = yaml.safe_dump(to_plain(data), default_flow_style=False, sort_keys=False)
    console.print(text, end="", markup=False, highlight=False)


def output_csv(columns: Columns, rows: Rows) -> None:
    """Print rows as CSV with a header line; ``None`` cells are left empty."""
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(columns)
    for row in rows:
        writer.writerow(["" if cell is None else str(cell) for cell in row])
    console.print(buf.getvalue(), end="", markup=False, highlight=False)


def output_table(
    data: Any,
    *,
    columns: Columns | None = None,
    rows: Rows | None = None,
    title: str | None = None,
    kv: bool = False,
) -> None:
    if isinstance(data, dict) and (kv or not columns):
        console.print(kv_table(data, title=title))
    elif columns and rows is not None:
        console.print(make_table(title, columns, rows))
    else:
        console.print(data)


def _tabular(
    render: Callable[[Columns, Rows], None],
) -> Callable[..., None]:
    # CSV needs explicit columns; anything else is emitted as JSON
    def dispatch(data: Any, columns: Columns | None, rows: Rows | None, **_: Any) -> None:
        if columns and rows is not None:
            render(columns, rows)
        else:
            output_json(data)

    return dispatch


_RENDERERS: dict[str, Callable[..., None]] = {
    "json": lambda data, *_, **__: output_json(data),
    "yaml": lambda data, *_, **__: output_yaml(data),
    "csv": _tabular(output_csv),
    "table": lambda data, columns, rows, **kw: output_table(data, columns=columns, rows=rows, **kw),
}


def output(
    data: Any,
    fmt: str = "table",
    *,
    columns: Columns | None = None,
    rows: Rows | None = None,
    title: str | None = None,
    kv: bool = False,
) -> None:
    """Render *data* in *fmt*.

    ``columns``/``rows`` drive the table and CSV views; JSON and YAML always
    serialize *data* itself so scripts get the full records.
    """
    renderer = _RENDERERS.get(fmt)
    if renderer is None:
        raise ValueError(f"Unknown output format '{fmt}'. Expected one of: {', '.join(FORMATS)}")
    renderer(data, columns, rows, title=title, kv=kv)
