"""Chat command handlers for CLI"""

import json
import logging
from typing import List

from rich.console import Console
from rich.table import Table

from chat.api_client import ChatSpace, list_spaces
from config.app_config import ConfigStore
from oauth.errors import ConfigurationError
from oauth.token_manager import TokenLifecycleManager
from utils.storage import TokenStorage
from cli.auth_handlers import load_auth_context

logger = logging.getLogger(__name__)


async def spaces_list(
    console: Console,
    storage: TokenStorage,
    config_store: ConfigStore,
    profile: str = "",
    limit: int = 100,
    json_output: bool = False,
) -> List[ChatSpace]:
    """
    Handle `chat spaces list`

    The stored token is refreshed on demand and re-saved only if it changed.

    Args:
        console: Rich console for output
        storage: Token storage
        config_store: AppConfig storage
        profile: --profile value
        limit: Maximum number of spaces
        json_output: Print JSON instead of a table

    Returns:
        The spaces that were listed
    """
    if limit <= 0:
        raise ConfigurationError("--limit must be greater than 0")

    ctx = load_auth_context(storage, config_store, profile)
    manager = TokenLifecycleManager(storage, ctx.profile, ctx.stored, ctx.config.oauth_client)

    try:
        async with manager.http_client() as client:
            spaces = await list_spaces(client, limit)
    except Exception:
        # a token refreshed before the failing call must still be saved
        await manager.persist_if_changed(refresh=False)
        raise
    await manager.persist_if_changed()

    if json_output:
        payload = {
            "profile": ctx.profile,
            "count": len(spaces),
            "spaces": [s.model_dump(by_alias=True) for s in spaces],
        }
        console.print_json(json.dumps(payload))
        return spaces

    if not spaces:
        console.print(f"No spaces found for profile {ctx.profile!r}")
        return spaces

    table = Table(title=f"Spaces ({len(spaces)}) for profile {ctx.profile!r}")
    table.add_column("Name", style="cyan")
    table.add_column("Type")
    table.add_column("Display Name")
    for space in spaces:
        table.add_row(
            space.name,
            space.space_type or "SPACE",
            space.display_name.strip() or "(no display name)",
        )
    console.print(table)
    return spaces
