"""Google Chat API HTTP client"""

import json
import logging
from typing import Any, Dict, List

import httpx
from pydantic import BaseModel, ConfigDict, Field

from settings import CHAT_API_BASE

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


class ChatAPIError(Exception):
    """Google Chat API returned a non-success response"""

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message)
        self.status_code = status_code


class ChatSpace(BaseModel):
    """A Chat space as returned by spaces.list"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = ""
    display_name: str = Field(default="", alias="displayName")
    space_type: str = Field(default="", alias="spaceType")


class ListSpacesResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    spaces: List[ChatSpace] = Field(default_factory=list)
    next_page_token: str = Field(default="", alias="nextPageToken")


def decode_api_response(response: httpx.Response) -> Dict[str, Any]:
    """Return the JSON body of a successful response

    Google error envelopes ({"error": {"code", "message", ...}}) are turned
    into readable messages, with hints for the common setup mistakes.

    Raises:
        ChatAPIError: For any status >= 300, or a success body that is not JSON
    """
    status = f"{response.status_code} {response.reason_phrase}".strip()
    body = response.text.strip() or status
    if response.status_code < 300:
        try:
            return response.json()
        except (json.JSONDecodeError, ValueError):
            raise ChatAPIError(
                f"google chat api returned invalid JSON ({status}): {body}", response.status_code
            ) from None

    try:
        envelope = response.json()
    except (json.JSONDecodeError, ValueError):
        envelope = None

    error = envelope.get("error") if isinstance(envelope, dict) else None
    message = error.get("message", "").strip() if isinstance(error, dict) else ""
    if not message:
        raise ChatAPIError(f"google chat api request failed ({status}): {body}", response.status_code)

    lowered = message.lower()
    if "google chat app not found" in lowered:
        raise ChatAPIError(
            "google chat app not found in this project; enable Chat API and configure "
            "a Chat app in Google Cloud Console (gchatctl auth setup shows links)",
            response.status_code,
        )
    if error.get("code") == 403 and "insufficient authentication scopes" in lowered:
        raise ChatAPIError(
            "insufficient auth scopes; run `gchatctl auth login --profile <profile> --all-scopes`",
            response.status_code,
        )
    raise ChatAPIError(f"google chat api request failed ({status}): {message}", response.status_code)


async def list_spaces(client: httpx.AsyncClient, limit: int = MAX_PAGE_SIZE) -> List[ChatSpace]:
    """List spaces the caller is a member of, following pagination

    Args:
        client: Authenticated httpx client
        limit: Maximum number of spaces to return

    Returns:
        At most `limit` spaces
    """
    if limit <= 0:
        raise ValueError("--limit must be greater than 0")

    items: List[ChatSpace] = []
    page_token = ""

    while len(items) < limit:
        params = {"pageSize": str(min(limit - len(items), MAX_PAGE_SIZE))}
        if page_token:
            params["pageToken"] = page_token

        response = await client.get(f"{CHAT_API_BASE}/spaces", params=params)
        page = ListSpacesResponse.model_validate(decode_api_response(response))
        logger.debug(f"spaces.list returned {len(page.spaces)} spaces")

        items.extend(page.spaces)
        if not page.next_page_token or not page.spaces:
            break
        page_token = page.next_page_token

    return items[:limit]
