"""
CLI layer for joinix-core.

Thin terminal transport over ``joinix.geo`` and ``joinix.events``:
argument parsing, coloured output, and table formatting.

Entry point::

    joinix --help
"""

from joinix.cli.app import app

__all__ = ["app"]
