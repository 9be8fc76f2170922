"""OAuth authorization URL construction"""

import logging
import webbrowser
from typing import Iterable
from urllib.parse import urlencode

from settings import GOOGLE_AUTH_URL
from .models import PKCEPair

logger = logging.getLogger(__name__)


def build_authorization_url(
    client_id: str,
    redirect_uri: str,
    scopes: Iterable[str],
    state: str,
    pkce: PKCEPair,
) -> str:
    """Construct the Google authorization URL with PKCE

    Requests offline access and forces the consent screen so that a
    refresh token is issued again on re-login.

    Returns:
        Full authorization URL
    """
    params = {
        "client_id": client_id,
        "redirect_uri": redirect_uri,
        "response_type": "code",
        "scope": " ".join(scopes),
        "access_type": "offline",
        "prompt": "consent",
        "code_challenge": pkce.challenge,
        "code_challenge_method": pkce.method,
        "state": state,
    }
    return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"


def open_browser(url: str) -> bool:
    """Open a URL in the default browser

    Returns:
        True if a browser was launched, False otherwise
    """
    try:
        return webbrowser.open(url)
    except webbrowser.Error as e:
        logger.debug(f"webbrowser.open failed: {e}")
        return False
