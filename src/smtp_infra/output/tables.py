"""Rich table rendering helpers."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Sequence

from rich.markup import escape
from rich.table import Table

from smtp_infra.models.validation import Severity, ValidationIssue

_SEVERITY_STYLES = {Severity.WARNING: "yellow", Severity.ERROR: "bold red"}


def render_cell(value: Any) -> str:
    """Render a config value for a table cell.

    Flags read yes/no, CIDR lists and other sequences are comma-joined, and
    tag mappings become ``Key=Value`` pairs. Text is escaped so values are
    never read as Rich markup.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, Mapping):
        return escape(", ".join(f"{k}={v}" for k, v in value.items()))
    if isinstance(value, (list, tuple)):
        return escape(", ".join(render_cell(v) for v in value))
    return escape(str(value))


def make_table(
    title: str | None,
    columns: Sequence[str],
    rows: Sequence[Sequence[Any]],
    *,
    row_styles: Sequence[str | None] | None = None,
) -> Table:
    """Build a Rich Table from column headers and row data."""
    table = Table(title=title)
    for col in columns:
        table.add_column(col)
    styles = row_styles or [None] * len(rows)
    for row, style in zip(rows, styles):
        table.add_row(*(render_cell(cell) for cell in row), style=style)
    return table


def kv_table(data: Mapping[str, Any], *, title: str | None = None) -> Table:
    """Render a settings mapping as a two-column table."""
    table = Table(title=title, show_header=False)
    table.add_column("Setting", style="bold cyan", no_wrap=True)
    table.add_column("Value")
    for key, value in data.items():
        table.add_row(key, render_cell(value))
    return table


def issues_table(issues: Sequence[ValidationIssue], *, title: str | None = None) -> Table:
    """Render validation issues, one row each, coloured by severity."""
    table = make_table(
        title,
        ["Severity", "Code", "Message"],
        [[issue.severity.value, issue.code, issue.message] for issue in issues],
        row_styles=[_SEVERITY_STYLES[issue.severity] for issue in issues],
    )
    table.columns[0].no_wrap = True
    table.columns[1].no_wrap = True
    table.columns[1].style = "cyan"
    return table
