"""
CLI utility helpers - input loading, option parsing, and output formatting.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from execspec.core.errors import ExecSpecError
from execspec.execution import ExecutionSpec, new_execution_spec

console = Console()
err_console = Console(stderr=True)


# ── Input helpers ────────────────────────────────────────────────────────


def load_spec(path: Path) -> ExecutionSpec:
    """Read *path* and materialize it, exiting with an error on bad input."""
    try:
        return new_execution_spec(path.read_bytes())
    except ExecSpecError as e:
        fail(e)


def parse_pairs(pairs: list[str] | None, *, option: str) -> dict[str, str]:
    """Turn ``["a=1", "b=2"]`` into ``{"a": "1", "b": "2"}``."""
    result: dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"expected KEY=VALUE, got {pair!r}", param_hint=option)
        result[key] = value
    return result


# ── Output helpers ───────────────────────────────────────────────────────


def fail(error: ExecSpecError) -> NoReturn:
    """Print *error* to stderr and exit 1."""
    err_console.print(f"[bold red]Error[/bold red]: {escape(str(error))}")
    raise typer.Exit(code=1)


def output_dict(data: dict[str, Any], *, as_json: bool = False, title: str = "") -> None:
    """Render a summary dict as JSON or as a key/value table."""
    if as_json:
        console.print_json(json.dumps(data, default=str))
        return

    table = Table(title=title or None, show_header=False, pad_edge=False)
    table.add_column("field", style="cyan")
    table.add_column("value", overflow="fold")
    for key, value in data.items():
        if isinstance(value, dict):
            value = ", ".join(f"{k}={v}" for k, v in value.items()) or "-"
        table.add_row(key, escape(str(value)) if value not in ("", None) else "[dim]-[/dim]")
    console.print(table)
