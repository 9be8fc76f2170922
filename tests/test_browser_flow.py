"""Tests for the loopback callback server and the browser login flow."""

from __future__ import annotations

import asyncio
import logging
import socket
from urllib.parse import parse_qs, urlparse

import aiohttp
import pytest
import respx

from oauth.browser_flow import NO_REFRESH_TOKEN_WARNING, login_browser_flow
from oauth.callback_server import SUCCESS_TEXT, OAuthCallbackServer
from oauth.errors import (
    CallbackTimeoutError,
    ConfigurationError,
    MissingCodeError,
    StateMismatchError,
    TokenExchangeError,
)
from oauth.models import OAuthClient
from oauth.pkce import challenge_for
from settings import GOOGLE_TOKEN_URL

from conftest import output_of


async def _get(url: str, params: dict):
    async with aiohttp.ClientSession() as session:
        async with session.get(url, params=params) as response:
            return response.status, await response.text()


def _port_is_free(port: int) -> bool:
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.bind(("127.0.0.1", port))
        return True
    except OSError:
        return False
    finally:
        sock.close()


@pytest.mark.asyncio
async def test_redirect_uri_uses_loopback_port():
    async with OAuthCallbackServer("state-1") as server:
        assert server.port > 0
        assert server.redirect_uri == f"http://127.0.0.1:{server.port}/callback"


@pytest.mark.asyncio
async def test_callback_delivers_code():
    async with OAuthCallbackServer("state-1") as server:
        status, body = await _get(server.redirect_uri, {"state": "state-1", "code": "abc"})
        assert status == 200
        assert body == SUCCESS_TEXT
        assert await server.wait_for_callback(1) == "abc"


@pytest.mark.asyncio
async def test_state_mismatch_returns_400_and_fails_flow():
    async with OAuthCallbackServer("expected") as server:
        status, body = await _get(server.redirect_uri, {"state": "other", "code": "abc"})
        assert status == 400
        assert body == "state mismatch"
        with pytest.raises(StateMismatchError, match="state mismatch"):
            await server.wait_for_callback(1)


@pytest.mark.asyncio
async def test_missing_code_returns_400_and_fails_flow():
    async with OAuthCallbackServer("state-1") as server:
        status, body = await _get(server.redirect_uri, {"state": "state-1"})
        assert status == 400
        assert body == "missing code"
        with pytest.raises(MissingCodeError, match="missing auth code"):
            await server.wait_for_callback(1)


@pytest.mark.asyncio
async def test_only_first_callback_counts():
    async with OAuthCallbackServer("state-1") as server:
        await _get(server.redirect_uri, {"state": "state-1", "code": "first"})
        status, _ = await _get(server.redirect_uri, {"state": "bad", "code": "second"})
        assert status == 400
        assert await server.wait_for_callback(1) == "first"


@pytest.mark.asyncio
async def test_timeout_names_duration_and_releases_port():
    server = OAuthCallbackServer("state-1")
    await server.start()
    port = server.port
    try:
        with pytest.raises(CallbackTimeoutError, match="100ms"):
            await server.wait_for_callback(0.1)
    finally:
        await server.stop()

    assert _port_is_free(port)


@pytest.mark.asyncio
@respx.mock
async def test_browser_flow_end_to_end(console, oauth_client, caplog):
    route = respx.post(GOOGLE_TOKEN_URL).respond(
        200, json={"access_token": "tok-xyz", "token_type": "Bearer", "expires_in": 3600}
    )
    callbacks = []
    opened = []

    def opener(url: str) -> bool:
        opened.append(url)
        query = parse_qs(urlparse(url).query)
        redirect_uri = query["redirect_uri"][0]
        params = {"state": query["state"][0], "code": "auth-code-1"}
        callbacks.append(asyncio.get_running_loop().create_task(_get(redirect_uri, params)))
        return True

    with caplog.at_level(logging.WARNING):
        token = await login_browser_flow(oauth_client, [], timeout=5, console=console, opener=opener)

    assert token.access_token == "tok-xyz"
    assert token.refresh_token == ""
    assert token.expiry is not None
    assert NO_REFRESH_TOKEN_WARNING in caplog.text
    assert NO_REFRESH_TOKEN_WARNING in output_of(console)
    assert opened[0] in output_of(console)
    assert (await callbacks[0])[0] == 200

    form = parse_qs(route.calls.last.request.content.decode())
    auth_query = parse_qs(urlparse(opened[0]).query)
    assert form["grant_type"] == ["authorization_code"]
    assert form["code"] == ["auth-code-1"]
    assert form["client_id"] == ["client-123"]
    assert "client_secret" not in form
    assert form["redirect_uri"] == auth_query["redirect_uri"]
    assert challenge_for(form["code_verifier"][0]) == auth_query["code_challenge"][0]


@pytest.mark.asyncio
@respx.mock
async def test_browser_flow_exchange_failure_keeps_provider_body(console, oauth_client):
    respx.post(GOOGLE_TOKEN_URL).respond(400, text='{"error": "invalid_grant"}')
    callbacks = []

    def opener(url: str) -> bool:
        query = parse_qs(urlparse(url).query)
        params = {"state": query["state"][0], "code": "c"}
        callbacks.append(asyncio.get_running_loop().create_task(_get(query["redirect_uri"][0], params)))
        return True

    with pytest.raises(TokenExchangeError) as excinfo:
        await login_browser_flow(oauth_client, ["s"], timeout=5, console=console, opener=opener)
    assert excinfo.value.detail == '{"error": "invalid_grant"}'
    assert excinfo.value.status_code == 400
    await asyncio.gather(*callbacks)


@pytest.mark.asyncio
async def test_browser_flow_no_open_prints_url_and_times_out(console, oauth_client):
    def opener(url: str) -> bool:
        raise AssertionError("browser must not be opened")

    with pytest.raises(CallbackTimeoutError):
        await login_browser_flow(oauth_client, [], no_open=True, timeout=0.1, console=console, opener=opener)
    assert "https://accounts.google.com/o/oauth2/v2/auth?" in output_of(console)


@pytest.mark.asyncio
async def test_browser_flow_open_failure_is_only_a_warning(console, oauth_client):
    with pytest.raises(CallbackTimeoutError):
        await login_browser_flow(oauth_client, [], timeout=0.1, console=console, opener=lambda url: False)
    assert "could not open browser" in output_of(console)


@pytest.mark.asyncio
async def test_browser_flow_validates_inputs(console):
    with pytest.raises(ConfigurationError, match="missing client ID"):
        await login_browser_flow(OAuthClient(), [], console=console)
    with pytest.raises(ConfigurationError, match="timeout"):
        await login_browser_flow(OAuthClient(client_id="x"), [], timeout=0, console=console)

