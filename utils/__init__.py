"""Shared utilities package for gchatctl"""

from .storage import TokenStorage, safe_name
from .debug_console import (
    DebugCapturingConsole,
    create_debug_console,
    setup_debug_logger,
)

__all__ = [
    "TokenStorage",
    "safe_name",
    "DebugCapturingConsole",
    "create_debug_console",
    "setup_debug_logger",
]
