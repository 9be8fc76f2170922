"""Scope set helpers"""

from typing import Iterable, List, Optional

from settings import DEFAULT_CHAT_SCOPES


def unique_scopes(scopes: Iterable[str]) -> List[str]:
    """Trim, drop empties and deduplicate, keeping first occurrence order"""
    seen = set()
    out = []
    for scope in scopes:
        s = scope.strip()
        if not s or s in seen:
            continue
        seen.add(s)
        out.append(s)
    return out


def parse_scopes(raw: str) -> List[str]:
    """Parse a comma-separated scope list"""
    return unique_scopes(raw.split(","))


def effective_scopes(scopes: Optional[Iterable[str]]) -> List[str]:
    """Deduplicated scopes, or the default Chat scopes when none remain"""
    out = unique_scopes(scopes or [])
    return out or list(DEFAULT_CHAT_SCOPES)


def choose_scopes(flag_raw: str, env_raw: str, configured: Iterable[str]) -> List[str]:
    """Resolve scopes with priority flag > environment > saved config > defaults"""
    raw = (flag_raw or "").strip() or (env_raw or "").strip()
    if raw:
        return effective_scopes(parse_scopes(raw))
    return effective_scopes(configured)
