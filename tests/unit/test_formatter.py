"""Tests for output formatting."""

from __future__ import annotations

import json
from io import StringIO
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml
from rich.console import Console

from smtp_infra.errors import ConfigurationError
from smtp_infra.models.validation import Severity, ValidationIssue
from smtp_infra.output.formatter import output, write_document
from smtp_infra.output.tables import issues_table, kv_table, render_cell


def _capture() -> tuple[Console, StringIO]:
    buf = StringIO()
    return Console(file=buf, force_terminal=False, width=200), buf


class TestOutput:
    def test_json(self):
        console, buf = _capture()
        with patch("smtp_infra.output.formatter.console", console):
            output({"key": "val"}, "json")
        assert json.loads(buf.getvalue()) == {"key": "val"}

    def test_yaml(self):
        console, buf = _capture()
        with patch("smtp_infra.output.formatter.console", console):
            output({"ports": [25, 587]}, "yaml")
        assert yaml.safe_load(buf.getvalue()) == {"ports": [25, 587]}

    def test_pydantic_model(self):
        console, buf = _capture()
        issue = ValidationIssue(severity=Severity.WARNING, code="c", message="m")
        with patch("smtp_infra.output.formatter.console", console):
            output(issue, "json")
        assert json.loads(buf.getvalue())["severity"] == "warning"

    def test_table_columns(self):
        console, buf = _capture()
        with patch("smtp_infra.output.formatter.console", console):
            output({}, "table", columns=["Kind", "Name"], rows=[["network", "vpc"]], title="T")
        assert "network" in buf.getvalue()

    def test_table_kv_fallback(self):
        console, buf = _capture()
        with patch("smtp_infra.output.formatter.console", console):
            output({"key": None, "other": "val"}, "table")
        assert "other" in buf.getvalue()


class TestWriteDocument:
    def test_json_file(self, tmp_path: Path):
        path = tmp_path / "out" / "spec.json"
        write_document({"a": [1, 2]}, path)
        assert json.loads(path.read_text()) == {"a": [1, 2]}

    def test_yaml_file(self, tmp_path: Path):
        path = tmp_path / "spec.yml"
        write_document({"a": {"b": "c"}}, path)
        assert yaml.safe_load(path.read_text()) == {"a": {"b": "c"}}

    def test_unsupported_suffix(self, tmp_path: Path):
        with pytest.raises(ConfigurationError, match="Unsupported output file type"):
            write_document({}, tmp_path / "spec.txt")


def test_issues_table_rows():
    console, buf = _capture()
    console.print(issues_table([
        ValidationIssue(severity=Severity.ERROR, code="backups-required", message="m"),
    ]))
    assert "backups-required" in buf.getvalue()


def test_issues_table_styles_rows_by_severity():
    table = issues_table([
        ValidationIssue(severity=Severity.WARNING, code="ssh-open-to-world", message="m"),
        ValidationIssue(severity=Severity.ERROR, code="backups-required", message="m"),
    ])
    assert [row.style for row in table.rows] == ["yellow", "bold red"]
    assert [c.header for c in table.columns] == ["Severity", "Code", "Message"]


class TestRenderCell:
    def test_flags(self):
        assert render_cell(True) == "yes"
        assert render_cell(False) == "no"

    def test_none_is_blank(self):
        assert render_cell(None) == ""

    def test_cidrs_joined(self):
        assert render_cell(("10.0.0.0/8", "203.0.113.0/24")) == "10.0.0.0/8, 203.0.113.0/24"

    def test_tags_as_pairs(self):
        assert render_cell({"Environment": "dev", "ManagedBy": "CDK"}) == (
            "Environment=dev, ManagedBy=CDK"
        )

    def test_markup_escaped(self):
        assert render_cell("[bold]x") == "\\[bold]x"

    def test_kv_table_renders_values(self):
        console, buf = _capture()
        console.print(kv_table({"backups_enabled": True, "allowed_ssh_cidrs": ("0.0.0.0/0",)}))
        text = buf.getvalue()
        assert "yes" in text
        assert "0.0.0.0/0" in text
