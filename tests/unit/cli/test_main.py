"""
Tests for CLI main functionality.
"""

from __future__ import annotations

import pytest
from typer.testing import CliRunner

from vidy import __version__
from vidy.cli.main import app


@pytest.fixture
def runner():
    """CLI test runner."""
    return CliRunner()


def test_cli_version(runner):
    """Test version flag."""
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert f"vidy v{__version__}" in result.stdout


def test_cli_help(runner):
    """Test help command."""
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "Video-sharing platform backend" in result.stdout


def test_cli_status(runner):
    """Test status command."""
    result = runner.invoke(app, ["status"])
    assert result.exit_code == 0
    assert "vidy is ready to use" in result.stdout
    assert "SQLite" in result.stdout


def test_cli_version_command(runner):
    """Test explicit version command."""
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "vidy" in result.stdout
    assert "Version" in result.stdout


def test_cli_no_subcommand_shows_help(runner):
    """Test that no args shows help."""
    result = runner.invoke(app, [])
    assert "Video-sharing platform backend" in result.stdout


def test_cli_invalid_subcommand(runner):
    """Test unknown commands fail."""
    result = runner.invoke(app, ["invalid-command"])
    assert result.exit_code != 0


def test_api_group_help(runner):
    """Test the api subcommand group lists its commands."""
    result = runner.invoke(app, ["api", "--help"])
    assert result.exit_code == 0
    assert "start" in result.stdout
