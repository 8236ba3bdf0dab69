"""CLI application setup using Typer.

Provides the command-line interface for swe_llm.
"""

from swe_llm.cli.main import app

__all__ = ["app"]
