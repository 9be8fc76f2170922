"""Tests for login mode selection and scope resolution."""

from __future__ import annotations

import pytest

from oauth.errors import InvalidModeError
from oauth.mode import resolve_mode
from oauth.scopes import choose_scopes, effective_scopes, parse_scopes, unique_scopes
from settings import DEFAULT_CHAT_SCOPES


@pytest.mark.parametrize(
    "mode,no_open,interactive,expected",
    [
        ("auto", False, True, "browser"),
        ("auto", True, True, "device"),
        ("auto", False, False, "device"),
        ("auto", True, False, "device"),
        ("browser", True, False, "browser"),
        ("browser", False, True, "browser"),
        ("device", False, True, "device"),
        ("device", True, False, "device"),
        ("  AUTO ", False, True, "browser"),
        ("Browser", False, False, "browser"),
    ],
)
def test_resolve_mode_truth_table(mode, no_open, interactive, expected):
    assert resolve_mode(mode, no_open, interactive) == expected


@pytest.mark.parametrize("mode", ["", "web", "browserx"])
def test_resolve_mode_rejects_unknown(mode):
    with pytest.raises(InvalidModeError, match="expected auto\\|browser\\|device"):
        resolve_mode(mode, False, True)


def test_unique_scopes_trims_and_keeps_first_occurrence():
    assert unique_scopes([" b ", "a", "", "b", "a ", "c"]) == ["b", "a", "c"]


def test_parse_scopes_splits_on_commas():
    assert parse_scopes("a, b,,a") == ["a", "b"]


def test_effective_scopes_falls_back_to_defaults():
    assert effective_scopes([]) == list(DEFAULT_CHAT_SCOPES)
    assert effective_scopes(["  "]) == list(DEFAULT_CHAT_SCOPES)
    assert effective_scopes(["x"]) == ["x"]


def test_choose_scopes_priority():
    assert choose_scopes("flag", "env", ["cfg"]) == ["flag"]
    assert choose_scopes("", "env1,env2", ["cfg"]) == ["env1", "env2"]
    assert choose_scopes("", "", ["cfg"]) == ["cfg"]
    assert choose_scopes("", "", []) == list(DEFAULT_CHAT_SCOPES)
