"""PKCE (Proof Key for Code Exchange) generation"""

import base64
import hashlib
import secrets

from .models import PKCEPair

VERIFIER_BYTES = 64
STATE_BYTES = 24


def _b64url(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode('utf-8').rstrip('=')


def new_verifier(size: int = VERIFIER_BYTES) -> str:
    """Generate a URL-safe random string from a cryptographically secure source

    Args:
        size: Number of random bytes before encoding (64 bytes -> 86 chars)

    Returns:
        base64url encoded string without padding
    """
    return _b64url(secrets.token_bytes(size))


def challenge_for(verifier: str) -> str:
    """Derive the S256 code challenge for a verifier

    Args:
        verifier: PKCE code verifier

    Returns:
        base64url(SHA-256(verifier)) without padding
    """
    return _b64url(hashlib.sha256(verifier.encode('utf-8')).digest())


def generate_pkce() -> PKCEPair:
    """Generate a fresh PKCE verifier and its challenge"""
    verifier = new_verifier()
    return PKCEPair(verifier=verifier, challenge=challenge_for(verifier))


def create_state() -> str:
    """Generate the random state parameter for CSRF protection"""
    return new_verifier(STATE_BYTES)
