"""Command line entry points."""

from .commands import cli, main

__all__ = ["cli", "main"]
