"""Command-line interface for download-ticks."""

from download_ticks.cli.main import cli, main

__all__ = ["cli", "main"]
