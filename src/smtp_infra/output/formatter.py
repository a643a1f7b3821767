"""Output dispatcher — renders data as a table, JSON, or YAML."""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import yaml
from rich.console import Console

from smtp_infra.errors import ConfigurationError
from smtp_infra.output.tables import kv_table, make_table

console = Console()

FORMATS = ("table", "json", "yaml")


def _plain(data: Any) -> Any:
    if hasattr(data, "model_dump"):
        return data.model_dump(mode="json")
    return data


def output_json(data: Any) -> None:
    """Print data as formatted JSON."""
    console.print_json(json.dumps(_plain(data), indent=2, default=str))


def output_yaml(data: Any) -> None:
    """Print data as YAML."""
    console.print(
        yaml.safe_dump(_plain(data), default_flow_style=False, sort_keys=False),
        end="",
        markup=False,
    )


def output_table(
    data: Any,
    *,
    columns: Sequence[str] | None = None,
    rows: Sequence[Sequence[Any]] | None = None,
    title: str | None = None,
) -> None:
    """Print data as a Rich table."""
    if columns and rows is not None:
        console.print(make_table(title, columns, rows))
    elif isinstance(data, dict):
        console.print(kv_table(data, title=title))
    else:
        console.print(data)


def output(
    data: Any,
    fmt: str = "table",
    *,
    columns: Sequence[str] | None = None,
    rows: Sequence[Sequence[Any]] | None = None,
    title: str | None = None,
) -> None:
    """Dispatch output to the appropriate formatter."""
    if fmt == "json":
        output_json(data)
    elif fmt == "yaml":
        output_yaml(data)
    else:
        output_table(data, columns=columns, rows=rows, title=title)


def write_document(data: Any, path: Path) -> None:
    """Write *data* to *path* as YAML (``.yaml``/``.yml``) or JSON."""
    plain = _plain(data)
    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        text = yaml.safe_dump(plain, default_flow_style=False, sort_keys=False)
    elif suffix in (".json", ""):
        text = json.dumps(plain, indent=2) + "\n"
    else:
        raise ConfigurationError(
            f"Unsupported output file type '{suffix}'. Use .json, .yaml, or .yml."
        )
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
