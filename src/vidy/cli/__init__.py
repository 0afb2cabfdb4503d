"""
CLI interface module for vidy.

Provides a Typer-based command-line interface for running the API server
and managing the database schema.
"""

from __future__ import annotations

__all__: list[str] = []
