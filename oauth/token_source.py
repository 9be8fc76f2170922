"""Refreshing token source and the httpx auth that draws from it"""

import logging
from typing import AsyncGenerator, Generator, Optional

import httpx

from .models import OAuthClient, OAuthToken
from .token_exchange import refresh_access_token

logger = logging.getLogger(__name__)


class RefreshingTokenSource:
    """Yields a currently valid token, refreshing it when expired

    Seeded with a previously stored token. A refresh replaces the held
    token in memory only; persisting it is the caller's concern.
    """

    def __init__(
        self,
        oauth_client: OAuthClient,
        token: OAuthToken,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.oauth_client = oauth_client
        self._token = token.model_copy()
        self._client = client

    @property
    def current(self) -> OAuthToken:
        """The held token without triggering a refresh"""
        return self._token

    async def token(self) -> OAuthToken:
        """Return a valid token

        Raises:
            TokenRefreshError: Token expired and could not be refreshed
        """
        if self._token.is_valid():
            return self._token

        logger.info("Access token expired, attempting automatic refresh...")
        self._token = await refresh_access_token(
            self.oauth_client,
            self._token.refresh_token,
            client=self._client,
        )
        return self._token


class TokenSourceAuth(httpx.Auth):
    """httpx auth flow adding the bearer header from a RefreshingTokenSource"""

    def __init__(self, source: RefreshingTokenSource):
        self.source = source

    async def async_auth_flow(self, request: httpx.Request) -> AsyncGenerator[httpx.Request, httpx.Response]:
        token = await self.source.token()
        request.headers["Authorization"] = f"{token.token_type or 'Bearer'} {token.access_token}"
        yield request

    def sync_auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        raise RuntimeError("TokenSourceAuth requires httpx.AsyncClient")
