"""Token lifecycle: seed a refreshing source from storage, re-persist on change"""

import logging
from typing import TYPE_CHECKING, Optional

import httpx

from settings import REQUEST_TIMEOUT
from .models import OAuthClient, StoredToken, utcnow
from .token_source import RefreshingTokenSource, TokenSourceAuth

if TYPE_CHECKING:
    from utils.storage import TokenStorage

logger = logging.getLogger(__name__)


class TokenLifecycleManager:
    """Wraps a refreshing token source seeded with a loaded record

    After the source has been used, persist_if_changed() writes the record
    back only when access token, refresh token, token type or expiry moved.
    Scope and mode changes are deliberately not compared.
    """

    def __init__(
        self,
        storage: "TokenStorage",
        profile: str,
        stored: StoredToken,
        oauth_client: OAuthClient,
        source: Optional[RefreshingTokenSource] = None,
        token_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize lifecycle manager

        Args:
            storage: Token storage instance
            profile: Profile the record was loaded for
            stored: The record as loaded
            oauth_client: Client credentials used for refresh
            source: Token source (creates a RefreshingTokenSource if None)
            token_client: Unauthenticated httpx client used for refresh calls
        """
        self.storage = storage
        self.profile = profile
        self.stored = stored
        self.source = source or RefreshingTokenSource(oauth_client, stored.token, client=token_client)

    def http_client(self, **kwargs) -> httpx.AsyncClient:
        """Create an httpx client whose requests carry a valid bearer token"""
        kwargs.setdefault("timeout", REQUEST_TIMEOUT)
        return httpx.AsyncClient(auth=TokenSourceAuth(self.source), **kwargs)

    async def persist_if_changed(self, refresh: bool = True) -> bool:
        """Save the source's current token if it differs from the loaded one

        Args:
            refresh: Ask the source for a valid token first. Pass False after a
                failed request to save whatever the source already holds.

        Returns:
            True if a write happened
        """
        current = await self.source.token() if refresh else self.source.current
        if self.stored.token.same_material(current):
            logger.debug(f"Token for profile {self.profile!r} unchanged, not saving")
            return False

        updated = self.stored.model_copy(update={"token": current.model_copy(), "saved_at": utcnow()})
        self.storage.save(self.profile, updated)
        self.stored = updated
        logger.info(f"Saved refreshed token for profile {self.profile!r}")
        return True
