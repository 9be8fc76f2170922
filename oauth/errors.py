"""Exception hierarchy for the authentication engine"""

from typing import Optional


class AuthError(Exception):
    """Base class for every failure raised by the authentication engine"""


class ConfigurationError(AuthError):
    """Missing or invalid input detected before any flow starts"""


class InvalidModeError(ConfigurationError):
    """Requested login mode is not one of auto, browser or device"""

    def __init__(self, mode: str):
        super().__init__(f"invalid --mode {mode!r}, expected auto|browser|device")
        self.mode = mode


class StateMismatchError(AuthError):
    """Callback state parameter did not match the one issued for this attempt"""

    def __init__(self):
        super().__init__("state mismatch")


class MissingCodeError(AuthError):
    """Callback carried a valid state but no authorization code"""

    def __init__(self):
        super().__init__("missing auth code")


class CallbackTimeoutError(AuthError):
    """No browser callback arrived within the configured timeout"""

    def __init__(self, timeout: float):
        super().__init__(f"timed out waiting for browser callback after {format_duration(timeout)}")
        self.timeout = timeout


class DeviceLoginTimeoutError(AuthError):
    """Local deadline for the device flow passed without approval"""

    def __init__(self):
        super().__init__("device login timed out")


class ProviderError(AuthError):
    """Error reported by the OAuth provider

    The provider's own text is kept verbatim in ``detail``.
    """

    def __init__(self, message: str, detail: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.detail = detail
        self.status_code = status_code


class TokenExchangeError(ProviderError):
    """Authorization code could not be exchanged for a token"""


class TokenRefreshError(ProviderError):
    """Access token expired and could not be refreshed"""


class DeviceCodeRequestError(ProviderError):
    """Device authorization endpoint rejected the request"""


class DeviceTokenError(ProviderError):
    """Device token endpoint returned an unrecognised error"""


class DeviceAuthorizationDeniedError(DeviceTokenError):
    def __init__(self):
        super().__init__("authorization denied", detail="access_denied")


class DeviceCodeExpiredError(DeviceTokenError):
    def __init__(self):
        super().__init__("device code expired", detail="expired_token")


class TokenStoreError(AuthError):
    """Token record could not be read or written"""


class TokenNotFoundError(TokenStoreError):
    """No token record exists for the profile (never logged in)"""

    def __init__(self, profile: str):
        super().__init__(f"no token stored for profile {profile!r}")
        self.profile = profile


def format_duration(seconds: float) -> str:
    """Render seconds the way the --timeout flag accepts them (e.g. 3m0s, 90ms)"""
    if seconds < 1:
        return f"{seconds * 1000:g}ms"
    total = float(seconds)
    hours, rem = divmod(total, 3600)
    minutes, secs = divmod(rem, 60)
    out = ""
    if hours:
        out += f"{int(hours)}h"
    if hours or minutes:
        out += f"{int(minutes)}m"
    out += f"{secs:g}s"
    return out
