"""Integration tests for context commands."""

from __future__ import annotations

from typer.testing import CliRunner

from smtp_infra.app import app

runner = CliRunner()


class TestContextCommands:
    def test_show_empty(self):
        result = runner.invoke(app, ["context", "show", "dev"])
        assert result.exit_code == 0
        assert "No saved context" in result.output

    def test_set_and_show(self):
        result = runner.invoke(
            app, ["context", "set", "production", "--key-pair", "ops", "--ssh-cidr", "203.0.113.0/24"],
        )
        assert result.exit_code == 0
        assert "saved" in result.output

        result = runner.invoke(app, ["context", "show", "production"])
        assert result.exit_code == 0
        assert "ops" in result.output
        assert "203.0.113.0/24" in result.output

    def test_set_nothing(self):
        result = runner.invoke(app, ["context", "set", "dev"])
        assert result.exit_code == 1

    def test_set_unknown_environment(self):
        result = runner.invoke(app, ["context", "set", "qa", "--key-pair", "ops"])
        assert result.exit_code == 2

    def test_set_unknown_preset(self):
        result = runner.invoke(app, ["context", "set", "dev", "--preset", "huge"])
        assert result.exit_code == 5

    def test_set_malformed_cidr(self):
        result = runner.invoke(app, ["context", "set", "dev", "--ssh-cidr", "10.0.0.300/8"])
        assert result.exit_code == 5
        assert "Invalid SSH CIDR" in result.output
        shown = runner.invoke(app, ["context", "show", "dev"])
        assert "No saved context" in shown.output

    def test_clear(self):
        runner.invoke(app, ["context", "set", "dev", "--key-pair", "ops"])
        result = runner.invoke(app, ["context", "clear", "dev", "--force"])
        assert result.exit_code == 0
        assert "cleared" in result.output

    def test_clear_nonexistent(self):
        result = runner.invoke(app, ["context", "clear", "dev", "--force"])
        assert result.exit_code == 1
