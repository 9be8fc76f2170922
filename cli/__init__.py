"""CLI package for gchatctl

Subcommands: auth (setup, login, status, logout), chat spaces list, version.
"""

from cli.main import main

__all__ = [
    "main",
]
