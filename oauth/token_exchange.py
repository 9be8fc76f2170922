"""OAuth token endpoint calls: authorization code exchange and refresh"""

import logging
from typing import Dict, Optional

import httpx

from settings import GOOGLE_TOKEN_URL, REQUEST_TIMEOUT
from .errors import TokenExchangeError, TokenRefreshError
from .models import OAuthClient, OAuthToken, utcnow

logger = logging.getLogger(__name__)


async def post_form(
    url: str,
    data: Dict[str, str],
    client: Optional[httpx.AsyncClient] = None,
) -> httpx.Response:
    """POST a form-encoded body, reusing the caller's client when given"""
    headers = {"Accept": "application/json"}
    if client is not None:
        return await client.post(url, data=data, headers=headers)
    async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as own_client:
        return await own_client.post(url, data=data, headers=headers)


def _client_fields(oauth_client: OAuthClient) -> Dict[str, str]:
    fields = {"client_id": oauth_client.client_id}
    if oauth_client.client_secret.strip():
        fields["client_secret"] = oauth_client.client_secret
    return fields


async def exchange_code(
    oauth_client: OAuthClient,
    code: str,
    code_verifier: str,
    redirect_uri: str,
    client: Optional[httpx.AsyncClient] = None,
) -> OAuthToken:
    """Exchange an authorization code for tokens

    Args:
        oauth_client: Client credentials
        code: Authorization code from the callback
        code_verifier: PKCE verifier (never the challenge)
        redirect_uri: The loopback redirect URI used in the authorization request
        client: Optional httpx client to reuse

    Returns:
        OAuthToken with expiry computed from expires_in

    Raises:
        TokenExchangeError: If the token endpoint rejects the exchange
    """
    data = {
        "grant_type": "authorization_code",
        "code": code,
        "redirect_uri": redirect_uri,
        "code_verifier": code_verifier,
        **_client_fields(oauth_client),
    }
    issued_at = utcnow()
    response = await post_form(GOOGLE_TOKEN_URL, data, client)

    if response.status_code != 200:
        error_detail = response.text.strip()
        raise TokenExchangeError(
            f"token exchange failed: {response.status_code} - {error_detail}",
            detail=error_detail,
            status_code=response.status_code,
        )

    try:
        payload = response.json()
    except ValueError as e:
        raise TokenExchangeError(f"token exchange returned invalid JSON: {e}", detail=response.text) from e

    token = OAuthToken.from_response(payload, issued_at)
    if not token.access_token:
        raise TokenExchangeError("token exchange response missing access_token", detail=response.text)

    logger.info("Authorization code exchanged for OAuth tokens")
    return token


async def refresh_access_token(
    oauth_client: OAuthClient,
    refresh_token: str,
    client: Optional[httpx.AsyncClient] = None,
) -> OAuthToken:
    """Refresh an access token

    Google usually omits refresh_token from the response; the old one is kept.

    Raises:
        TokenRefreshError: If no refresh token is given or the provider rejects it
    """
    if not refresh_token:
        raise TokenRefreshError("access token expired and no refresh token available")

    data = {
        "grant_type": "refresh_token",
        "refresh_token": refresh_token,
        **_client_fields(oauth_client),
    }
    logger.info("Attempting to refresh OAuth tokens...")
    issued_at = utcnow()
    response = await post_form(GOOGLE_TOKEN_URL, data, client)

    if response.status_code != 200:
        error_detail = response.text.strip()
        logger.error(f"Token refresh failed with status {response.status_code}: {error_detail}")
        raise TokenRefreshError(
            f"token refresh failed: {response.status_code} - {error_detail}",
            detail=error_detail,
            status_code=response.status_code,
        )

    try:
        payload = response.json()
    except ValueError as e:
        raise TokenRefreshError(f"token refresh returned invalid JSON: {e}", detail=response.text) from e

    token = OAuthToken.from_response(payload, issued_at)
    if not token.access_token:
        raise TokenRefreshError("token refresh response missing access_token", detail=response.text)
    if not token.refresh_token:
        token.refresh_token = refresh_token

    logger.info("Successfully refreshed OAuth tokens")
    return token
