"""Data models for Google OAuth authentication"""

from datetime import datetime, timedelta, timezone
from typing import List, NamedTuple, Optional

from pydantic import AliasChoices, BaseModel, Field

from settings import TOKEN_EXPIRY_DELTA


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PKCEPair(NamedTuple):
    """PKCE code verifier and challenge pair"""
    verifier: str
    challenge: str
    method: str = "S256"


class OAuthClient(BaseModel):
    """OAuth client credentials

    An empty client_secret means a public client relying on PKCE alone.
    """
    client_id: str = ""
    client_secret: str = ""


class OAuthToken(BaseModel):
    """Token material returned by the token endpoint

    expiry is None when the provider did not report a lifetime.
    """
    access_token: str = ""
    token_type: str = "Bearer"
    refresh_token: str = ""
    expiry: Optional[datetime] = None

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        """True if the access token is present and not about to expire"""
        if not self.access_token:
            return False
        if self.expiry is None:
            return True
        now = now or utcnow()
        return self.expiry - timedelta(seconds=TOKEN_EXPIRY_DELTA) > now

    def same_material(self, other: "OAuthToken") -> bool:
        """Compare the fields that matter for re-persisting a refreshed token"""
        return (
            self.access_token == other.access_token
            and self.refresh_token == other.refresh_token
            and self.token_type == other.token_type
            and self.expiry == other.expiry
        )

    @classmethod
    def from_response(cls, payload: dict, issued_at: Optional[datetime] = None) -> "OAuthToken":
        """Build a token from a token endpoint JSON payload"""
        issued_at = issued_at or utcnow()
        expires_in = int(payload.get("expires_in") or 0)
        return cls(
            access_token=payload.get("access_token") or "",
            token_type=payload.get("token_type") or "Bearer",
            refresh_token=payload.get("refresh_token") or "",
            expiry=issued_at + timedelta(seconds=expires_in) if expires_in > 0 else None,
        )


class StoredToken(BaseModel):
    """Persisted token record, one per profile"""
    token: OAuthToken
    scopes: List[str] = Field(default_factory=list)
    mode: str = ""
    saved_at: Optional[datetime] = None


class DeviceCode(BaseModel):
    """Device authorization response"""
    device_code: str
    user_code: str
    verification_url: str = Field(
        default="", validation_alias=AliasChoices("verification_url", "verification_uri")
    )
    verification_url_complete: str = Field(
        default="", validation_alias=AliasChoices("verification_url_complete", "verification_uri_complete")
    )
    expires_in: int = 0
    interval: int = 0

    @property
    def display_url(self) -> str:
        return self.verification_url_complete or self.verification_url


class DeviceTokenResponse(BaseModel):
    """Device token endpoint response; error is empty on success"""
    access_token: str = ""
    refresh_token: str = ""
    expires_in: int = 0
    token_type: str = ""
    scope: str = ""
    error: str = ""
    error_description: str = ""
