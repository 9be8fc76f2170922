"""Google Chat API consumers"""

from .api_client import ChatAPIError, ChatSpace, decode_api_response, list_spaces

__all__ = [
    "ChatAPIError",
    "ChatSpace",
    "decode_api_response",
    "list_spaces",
]
