"""Loopback-redirect authorization code flow with PKCE"""

import logging
from typing import Callable, Optional, Sequence

import httpx
from rich.console import Console

from settings import DEFAULT_LOGIN_TIMEOUT
from .authorization import build_authorization_url, open_browser
from .callback_server import OAuthCallbackServer
from .errors import ConfigurationError
from .models import OAuthClient, OAuthToken
from .pkce import create_state, generate_pkce
from .scopes import effective_scopes
from .token_exchange import exchange_code

logger = logging.getLogger(__name__)

NO_REFRESH_TOKEN_WARNING = "no refresh token returned; try revoking prior consent and log in again"


async def login_browser_flow(
    oauth_client: OAuthClient,
    scopes: Sequence[str],
    no_open: bool = False,
    timeout: float = DEFAULT_LOGIN_TIMEOUT,
    console: Optional[Console] = None,
    opener: Callable[[str], bool] = open_browser,
    client: Optional[httpx.AsyncClient] = None,
) -> OAuthToken:
    """Run the browser login flow end to end

    Binds a loopback listener, prints (and optionally opens) the
    authorization URL, waits for the redirect and exchanges the code.

    Args:
        oauth_client: Client credentials; client_id is required
        scopes: Requested scopes, defaults are used when empty
        no_open: Only print the URL, do not launch a browser
        timeout: Seconds to wait for the callback
        console: Rich console for user-facing output
        opener: Browser launcher, returns False when it could not open
        client: Optional httpx client for the token exchange

    Returns:
        The issued OAuthToken

    Raises:
        ConfigurationError: Missing client id or non-positive timeout
        StateMismatchError, MissingCodeError: Invalid callback
        CallbackTimeoutError: No callback in time
        TokenExchangeError: Token endpoint rejected the code
    """
    console = console or Console()
    if not oauth_client.client_id.strip():
        raise ConfigurationError("missing client ID")
    if timeout <= 0:
        raise ConfigurationError("--timeout must be greater than 0")
    scopes = effective_scopes(scopes)

    state = create_state()
    pkce = generate_pkce()

    server = OAuthCallbackServer(expected_state=state)
    await server.start()
    try:
        redirect_uri = server.redirect_uri
        auth_url = build_authorization_url(
            client_id=oauth_client.client_id,
            redirect_uri=redirect_uri,
            scopes=scopes,
            state=state,
            pkce=pkce,
        )
        logger.debug(f"Authorization URL issued for redirect {redirect_uri}")

        console.print("Open this URL to authorize:")
        console.print(auth_url, markup=False, highlight=False, soft_wrap=True)
        if not no_open:
            opened = False
            try:
                opened = opener(auth_url)
            except Exception as e:
                logger.warning(f"Could not open browser automatically: {e}")
            if not opened:
                console.print("[yellow]warning:[/yellow] could not open browser automatically")

        console.print("[dim]Waiting for browser callback...[/dim]")
        code = await server.wait_for_callback(timeout)
    finally:
        await server.stop()

    token = await exchange_code(
        oauth_client,
        code=code,
        code_verifier=pkce.verifier,
        redirect_uri=redirect_uri,
        client=client,
    )
    if not token.refresh_token:
        logger.warning(NO_REFRESH_TOKEN_WARNING)
        console.print(f"[yellow]warning:[/yellow] {NO_REFRESH_TOKEN_WARNING}")
    return token
