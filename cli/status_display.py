"""Status display functionality for CLI"""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from rich.table import Table

from oauth.models import StoredToken


def _format_time(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def build_token_status(profile: str, stored: StoredToken, token_path: Path) -> Dict[str, Any]:
    """
    Summarize a stored token record

    Args:
        profile: Profile name
        stored: Loaded token record
        token_path: Location of the record on disk

    Returns:
        JSON-serializable status dict
    """
    token = stored.token
    refresh_present = bool(token.refresh_token.strip())
    return {
        "profile": profile,
        "authenticated": bool(token.access_token.strip()) or refresh_present,
        "valid": token.is_valid(),
        "expiry": _format_time(token.expiry),
        "saved_at": _format_time(stored.saved_at),
        "mode": stored.mode,
        "scopes": list(stored.scopes),
        "refresh_token_present": refresh_present,
        "token_path": str(token_path),
    }


def show_token_status(status: Dict[str, Any], console):
    """
    Display token status as a table

    Args:
        status: Dict from build_token_status
        console: Rich console for output
    """
    table = Table(title=f"Profile: {status['profile']}")
    table.add_column("Property", style="cyan")
    table.add_column("Value")

    table.add_row("Authenticated", "Yes" if status["authenticated"] else "No")
    valid_style = "green" if status["valid"] else "yellow"
    table.add_row("Valid Now", f"[{valid_style}]{'Yes' if status['valid'] else 'No'}[/]")
    table.add_row("Expiry", status["expiry"] or "none")
    table.add_row("Refresh Token", "Yes" if status["refresh_token_present"] else "No")
    if status["saved_at"]:
        table.add_row("Saved At", status["saved_at"])
    table.add_row("Mode", status["mode"] or "-")
    table.add_row("Scopes", "\n".join(status["scopes"]) or "-")
    table.add_row("Token File", status["token_path"])

    console.print(table)
