"""OAuth authentication package for Google Chat

Browser (loopback + PKCE) and device login flows, mode selection,
and the refreshing token source used by API clients.
"""

from .browser_flow import login_browser_flow
from .device_flow import login_device_flow
from .errors import (
    AuthError,
    CallbackTimeoutError,
    ConfigurationError,
    DeviceAuthorizationDeniedError,
    DeviceCodeExpiredError,
    DeviceCodeRequestError,
    DeviceLoginTimeoutError,
    DeviceTokenError,
    InvalidModeError,
    MissingCodeError,
    ProviderError,
    StateMismatchError,
    TokenExchangeError,
    TokenNotFoundError,
    TokenRefreshError,
    TokenStoreError,
)
from .mode import MODE_AUTO, MODE_BROWSER, MODE_DEVICE, is_interactive, resolve_mode
from .models import OAuthClient, OAuthToken, StoredToken
from .token_manager import TokenLifecycleManager
from .token_source import RefreshingTokenSource, TokenSourceAuth

__all__ = [
    "login_browser_flow",
    "login_device_flow",
    "resolve_mode",
    "is_interactive",
    "MODE_AUTO",
    "MODE_BROWSER",
    "MODE_DEVICE",
    "OAuthClient",
    "OAuthToken",
    "StoredToken",
    "TokenLifecycleManager",
    "RefreshingTokenSource",
    "TokenSourceAuth",
    "AuthError",
    "CallbackTimeoutError",
    "ConfigurationError",
    "DeviceAuthorizationDeniedError",
    "DeviceCodeExpiredError",
    "DeviceCodeRequestError",
    "DeviceLoginTimeoutError",
    "DeviceTokenError",
    "InvalidModeError",
    "MissingCodeError",
    "ProviderError",
    "StateMismatchError",
    "TokenExchangeError",
    "TokenNotFoundError",
    "TokenRefreshError",
    "TokenStoreError",
]
