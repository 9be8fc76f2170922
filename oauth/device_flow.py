"""Device authorization grant: request a user code, then poll for approval"""

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Awaitable, Callable, Optional, Sequence

import httpx
from pydantic import ValidationError
from rich.console import Console

from settings import (
    DEFAULT_DEVICE_INTERVAL,
    DEVICE_GRANT_TYPE,
    GOOGLE_DEVICE_URL,
    GOOGLE_TOKEN_URL,
    SLOW_DOWN_INCREMENT,
)
from .errors import (
    ConfigurationError,
    DeviceAuthorizationDeniedError,
    DeviceCodeExpiredError,
    DeviceCodeRequestError,
    DeviceLoginTimeoutError,
    DeviceTokenError,
)
from .models import DeviceCode, DeviceTokenResponse, OAuthClient, OAuthToken, utcnow
from .scopes import effective_scopes
from .token_exchange import post_form

logger = logging.getLogger(__name__)


@dataclass
class DevicePollResult:
    """Outcome of a single poll: a token, or pending (possibly slow_down)"""
    token: Optional[OAuthToken] = None
    pending: bool = False
    slow_down: bool = False


async def request_device_code(
    oauth_client: OAuthClient,
    scopes: Sequence[str],
    client: Optional[httpx.AsyncClient] = None,
) -> DeviceCode:
    """Request a device/user code pair

    Raises:
        DeviceCodeRequestError: On a non-2xx response or malformed body
    """
    data = {
        "client_id": oauth_client.client_id,
        "scope": " ".join(scopes),
    }
    response = await post_form(GOOGLE_DEVICE_URL, data, client)
    if response.status_code >= 300:
        body = response.text.strip()
        raise DeviceCodeRequestError(
            f"device code request failed: {body}",
            detail=body,
            status_code=response.status_code,
        )

    try:
        dc = DeviceCode.model_validate(response.json())
    except (ValueError, ValidationError) as e:
        raise DeviceCodeRequestError(f"device code response invalid: {e}", detail=response.text) from e

    if dc.interval <= 0:
        dc.interval = DEFAULT_DEVICE_INTERVAL
    return dc


async def poll_device_token(
    oauth_client: OAuthClient,
    device_code: str,
    client: Optional[httpx.AsyncClient] = None,
) -> DevicePollResult:
    """Poll the token endpoint once and classify the answer

    Raises:
        DeviceAuthorizationDeniedError: access_denied
        DeviceCodeExpiredError: expired_token
        DeviceTokenError: Any other provider error
    """
    data = {"client_id": oauth_client.client_id}
    if oauth_client.client_secret.strip():
        data["client_secret"] = oauth_client.client_secret
    data["device_code"] = device_code
    data["grant_type"] = DEVICE_GRANT_TYPE

    polled_at = utcnow()
    response = await post_form(GOOGLE_TOKEN_URL, data, client)

    # Pending answers arrive with a 4xx status, so the body decides
    try:
        tr = DeviceTokenResponse.model_validate(response.json())
    except (ValueError, ValidationError) as e:
        body = response.text.strip()
        raise DeviceTokenError(
            f"device token request failed ({response.status_code}): {body}",
            detail=body,
            status_code=response.status_code,
        ) from e

    if tr.error:
        if tr.error == "authorization_pending":
            return DevicePollResult(pending=True)
        if tr.error == "slow_down":
            return DevicePollResult(pending=True, slow_down=True)
        if tr.error == "access_denied":
            raise DeviceAuthorizationDeniedError()
        if tr.error == "expired_token":
            raise DeviceCodeExpiredError()
        raise DeviceTokenError(
            f"device token error: {tr.error}",
            detail=tr.error,
            status_code=response.status_code,
        )

    if not tr.access_token:
        return DevicePollResult(pending=True)

    token = OAuthToken(
        access_token=tr.access_token,
        token_type=tr.token_type,
        refresh_token=tr.refresh_token,
        expiry=polled_at + timedelta(seconds=tr.expires_in),
    )
    return DevicePollResult(token=token)


async def login_device_flow(
    oauth_client: OAuthClient,
    scopes: Sequence[str],
    console: Optional[Console] = None,
    client: Optional[httpx.AsyncClient] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> OAuthToken:
    """Run the device login flow end to end

    Args:
        oauth_client: Client credentials; client_id is required
        scopes: Requested scopes, defaults are used when empty
        console: Rich console for user-facing output
        client: Optional httpx client for provider calls
        sleep: Awaitable sleep used between polls
        clock: Monotonic clock used for the local deadline

    Returns:
        The issued OAuthToken

    Raises:
        DeviceLoginTimeoutError: The local deadline passed without approval
    """
    console = console or Console()
    if not oauth_client.client_id.strip():
        raise ConfigurationError("missing client ID")
    scopes = effective_scopes(scopes)

    dc = await request_device_code(oauth_client, scopes, client)
    issued = clock()

    console.print("Use this device code to authorize:")
    console.print(f"  Code: [bold]{dc.user_code}[/bold]")
    console.print(f"  URL:  {dc.display_url}", highlight=False)
    console.print("Waiting for approval...")

    deadline = issued + dc.expires_in
    interval = dc.interval

    while clock() < deadline:
        result = await poll_device_token(oauth_client, dc.device_code, client)
        if result.token is not None:
            logger.info("Device authorization approved")
            return result.token
        if result.slow_down:
            interval += SLOW_DOWN_INCREMENT
            logger.debug(f"Provider asked to slow down, polling every {interval}s")
        else:
            logger.debug("Device authorization pending")

        remaining = deadline - clock()
        if remaining <= 0:
            break
        await sleep(min(interval, remaining))

    raise DeviceLoginTimeoutError()
