"""Authentication handlers for CLI"""

import json
import logging
import os
import re
from typing import Awaitable, Callable, NamedTuple, Optional

from rich.console import Console
from rich.prompt import Prompt

import settings
from config.app_config import AppConfig, ConfigStore, choose_profile
from oauth.authorization import open_browser
from oauth.browser_flow import login_browser_flow
from oauth.device_flow import login_device_flow
from oauth.errors import AuthError, ConfigurationError, TokenNotFoundError
from oauth.mode import MODE_BROWSER, is_interactive, resolve_mode
from oauth.models import OAuthClient, OAuthToken, StoredToken, utcnow
from oauth.scopes import choose_scopes
from utils.storage import TokenStorage
from cli.status_display import build_token_status, show_token_status

logger = logging.getLogger(__name__)

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_DURATION_UNITS = {"h": 3600.0, "m": 60.0, "s": 1.0, "ms": 0.001}

BrowserLogin = Callable[..., Awaitable[OAuthToken]]
DeviceLogin = Callable[..., Awaitable[OAuthToken]]


class AuthContext(NamedTuple):
    """Everything an authenticated command needs"""
    profile: str
    config: AppConfig
    stored: StoredToken


def parse_duration(raw: str) -> float:
    """
    Parse a --timeout value into seconds

    Accepts bare seconds ("180", "2.5") or unit strings ("90s", "3m", "1h", "1m30s", "500ms").

    Raises:
        ConfigurationError: Unparseable or non-positive value
    """
    value = (raw or "").strip()
    try:
        seconds = float(value)
    except ValueError:
        if not value or _DURATION_PART.sub("", value):
            raise ConfigurationError(f"invalid --timeout {raw!r}, expected e.g. 90s, 3m or 1m30s") from None
        seconds = sum(float(n) * _DURATION_UNITS[unit] for n, unit in _DURATION_PART.findall(value))

    if seconds <= 0:
        raise ConfigurationError("--timeout must be greater than 0")
    return seconds


def print_client_id_help(console: Console):
    console.print("OAuth setup needed once:")
    console.print("  1) Open Google Cloud Console > APIs & Services > Credentials")
    console.print("  2) Create OAuth Client ID (Desktop app)")
    console.print("  3) Paste the Client ID below")
    console.print("Tip: run [bold]gchatctl auth setup[/bold] for direct links.")
    console.print("Client secret is optional for browser login.")


def resolve_oauth_client(
    cfg: AppConfig,
    console: Console,
    client_id: str = "",
    client_secret: str = "",
    interactive: bool = False,
    prompt: Optional[Callable[[str], str]] = None,
) -> OAuthClient:
    """
    Pick client credentials: flag > environment > saved config

    The client id is prompted for when still missing and a terminal is attached.

    Raises:
        ConfigurationError: No client id could be obtained
    """
    cid = _first_non_empty(client_id, os.getenv("GCHATCTL_CLIENT_ID"), cfg.oauth_client.client_id)
    secret = _first_non_empty(client_secret, os.getenv("GCHATCTL_CLIENT_SECRET"), cfg.oauth_client.client_secret)

    if not cid:
        if not interactive:
            raise ConfigurationError(
                "missing client ID; pass --client-id or set GCHATCTL_CLIENT_ID "
                "(create one in Google Cloud Console: APIs & Services > Credentials)"
            )
        print_client_id_help(console)
        ask = prompt or (lambda label: Prompt.ask(label, console=console))
        cid = (ask("Google OAuth client ID") or "").strip()
        if not cid:
            raise ConfigurationError("missing client ID")

    return OAuthClient(client_id=cid, client_secret=secret)


async def login(
    console: Console,
    storage: TokenStorage,
    config_store: ConfigStore,
    profile: str = "",
    mode: str = "auto",
    no_open: bool = False,
    timeout: str = "3m",
    all_scopes: bool = False,
    client_id: str = "",
    client_secret: str = "",
    scopes: str = "",
    interactive: Optional[bool] = None,
    browser_login: BrowserLogin = login_browser_flow,
    device_login: DeviceLogin = login_device_flow,
) -> StoredToken:
    """
    Handle `auth login`: run the selected flow and persist the result

    Args:
        console: Rich console for output
        storage: Token storage
        config_store: AppConfig storage
        profile: --profile value
        mode: --mode value (auto, browser or device)
        no_open: --no-open
        timeout: --timeout value for the browser callback
        all_scopes: --all-scopes, request the default Chat scopes
        client_id: --client-id
        client_secret: --client-secret
        scopes: --scopes, comma-separated
        interactive: Override terminal detection
        browser_login: Browser flow implementation
        device_login: Device flow implementation

    Returns:
        The saved token record
    """
    if interactive is None:
        interactive = is_interactive()

    cfg = config_store.load()
    selected_profile = choose_profile(profile, cfg.default_profile)
    if all_scopes:
        requested = list(settings.DEFAULT_CHAT_SCOPES)
    else:
        requested = choose_scopes(scopes, os.getenv("GCHATCTL_SCOPES", ""), cfg.scopes)

    oauth_client = resolve_oauth_client(
        cfg, console, client_id=client_id, client_secret=client_secret, interactive=interactive
    )
    timeout_seconds = parse_duration(timeout)
    resolved_mode = resolve_mode(mode, no_open, interactive)
    logger.info(f"Logging in profile {selected_profile!r} using {resolved_mode} flow")

    if resolved_mode == MODE_BROWSER:
        token = await browser_login(
            oauth_client, requested, no_open=no_open, timeout=timeout_seconds, console=console
        )
    else:
        token = await device_login(oauth_client, requested, console=console)

    cfg.default_profile = selected_profile
    cfg.oauth_client = oauth_client
    cfg.scopes = requested
    config_store.save(cfg)

    record = StoredToken(token=token, scopes=requested, mode=resolved_mode, saved_at=utcnow())
    storage.save(selected_profile, record)

    console.print(f"[green]Logged in profile {selected_profile!r} using {resolved_mode} flow.[/green]")
    if not oauth_client.client_secret.strip():
        console.print("Client secret: not set (PKCE/public client mode)")
    if token.expiry is None:
        console.print("Token expiry: none")
    else:
        console.print(f"Token expiry: {token.expiry.isoformat()}")
    return record


def status(
    console: Console,
    storage: TokenStorage,
    config_store: ConfigStore,
    profile: str = "",
    json_output: bool = False,
) -> dict:
    """
    Handle `auth status`; an unauthenticated profile is reported, not raised

    Returns:
        The status dict that was displayed
    """
    cfg = config_store.load()
    selected_profile = choose_profile(profile, cfg.default_profile)

    try:
        stored = storage.load(selected_profile)
    except TokenNotFoundError:
        result = {"profile": selected_profile, "authenticated": False}
        if json_output:
            console.print_json(json.dumps(result))
        else:
            console.print(f"Profile {selected_profile!r}: [yellow]not authenticated[/yellow]")
        return result

    result = build_token_status(selected_profile, stored, storage.token_path(selected_profile))
    if json_output:
        console.print_json(json.dumps(result))
    else:
        show_token_status(result, console)
    return result


def logout(console: Console, storage: TokenStorage, config_store: ConfigStore, profile: str = "") -> str:
    """Handle `auth logout`; removing a missing token is not an error"""
    cfg = config_store.load()
    selected_profile = choose_profile(profile, cfg.default_profile)
    storage.delete(selected_profile)
    console.print(f"Removed token for profile {selected_profile!r}")
    return selected_profile


def setup(console: Console, open_links: bool = False, opener: Callable[[str], bool] = open_browser):
    """Handle `auth setup`: print the Google Cloud checklist"""
    console.print("[bold]Google OAuth setup for gchatctl:[/bold]")
    console.print("1) Enable Google Chat API:")
    console.print(f"   {settings.GCP_CHAT_API_URL}", highlight=False)
    console.print("2) Configure OAuth consent screen (External or Internal):")
    console.print(f"   {settings.GCP_CONSENT_URL}", highlight=False)
    console.print("3) Create OAuth Client ID:")
    console.print("   - Application type: Desktop app (recommended for CLI)")
    console.print(f"   - Page: {settings.GCP_CREDS_URL}", highlight=False)
    console.print("4) Copy the Client ID and run:")
    console.print("   gchatctl auth login --client-id <YOUR_CLIENT_ID>", markup=False)
    console.print()
    console.print("Optional scopes override:")
    console.print(
        "   gchatctl auth login --client-id <YOUR_CLIENT_ID> --scopes " + ",".join(settings.DEFAULT_CHAT_SCOPES[:2]),
        markup=False,
        highlight=False,
    )

    if not open_links:
        return
    for link in (settings.GCP_CHAT_API_URL, settings.GCP_CONSENT_URL, settings.GCP_CREDS_URL):
        if not opener(link):
            console.print(f"[yellow]warning:[/yellow] could not open {link}")


def load_auth_context(storage: TokenStorage, config_store: ConfigStore, profile: str = "") -> AuthContext:
    """
    Load config and the stored token for an authenticated command

    Raises:
        AuthError: Profile never logged in
        ConfigurationError: No client id saved
    """
    cfg = config_store.load()
    selected_profile = choose_profile(profile, cfg.default_profile)
    try:
        stored = storage.load(selected_profile)
    except TokenNotFoundError as e:
        raise AuthError(
            f'profile "{selected_profile}" is not authenticated; '
            f"run: gchatctl auth login --profile {selected_profile}"
        ) from e

    if not cfg.oauth_client.client_id.strip():
        raise ConfigurationError("missing OAuth client ID in config; run `gchatctl auth login` again")
    return AuthContext(selected_profile, cfg, stored)


def _first_non_empty(*values: Optional[str]) -> str:
    for value in values:
        if value and value.strip():
            return value.strip()
    return ""
