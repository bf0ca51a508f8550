"""Command line interface (`formulary` console script)."""

from .app import main

__all__ = ["main"]
