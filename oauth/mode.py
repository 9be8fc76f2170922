"""Login mode selection"""

import sys

from .errors import InvalidModeError

MODE_AUTO = "auto"
MODE_BROWSER = "browser"
MODE_DEVICE = "device"


def resolve_mode(mode: str, no_open: bool, interactive: bool) -> str:
    """Pick the login flow

    Explicit browser or device always wins. auto falls back to the device
    flow when the browser is suppressed or there is no terminal to return to.

    Raises:
        InvalidModeError: For anything other than auto, browser or device
    """
    normalized = (mode or "").strip().lower()
    if normalized == MODE_AUTO:
        if no_open or not interactive:
            return MODE_DEVICE
        return MODE_BROWSER
    if normalized in (MODE_BROWSER, MODE_DEVICE):
        return normalized
    raise InvalidModeError(mode)


def is_interactive() -> bool:
    """True when stdin is attached to a terminal"""
    try:
        return sys.stdin is not None and sys.stdin.isatty()
    except (AttributeError, ValueError):
        return False
