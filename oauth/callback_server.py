"""
Local OAuth callback server bound to an ephemeral loopback port
"""
import asyncio
import logging
import socket
from typing import Optional

from aiohttp import web

from settings import CALLBACK_HOST, CALLBACK_PATH
from .errors import CallbackTimeoutError, MissingCodeError, StateMismatchError

logger = logging.getLogger(__name__)

SUCCESS_TEXT = "gchatctl login complete. You can close this tab."
SHUTDOWN_TIMEOUT = 2.0


class OAuthCallbackServer:
    """Transient HTTP listener that captures one authorization redirect

    The first callback settles a single-use future with either the
    authorization code or the validation error. Later callbacks are
    answered but ignored.
    """

    def __init__(self, expected_state: str, host: str = CALLBACK_HOST):
        self.expected_state = expected_state
        self.host = host
        self.app = web.Application()
        self.runner: Optional[web.AppRunner] = None
        self._sock: Optional[socket.socket] = None
        self._port: Optional[int] = None
        self._result: Optional[asyncio.Future] = None

        # Register callback route
        self.app.router.add_get(CALLBACK_PATH, self._handle_callback)

    @property
    def port(self) -> int:
        if self._port is None:
            raise RuntimeError("callback server is not started")
        return self._port

    @property
    def redirect_uri(self) -> str:
        return f"http://{self.host}:{self.port}{CALLBACK_PATH}"

    def _deliver(self, code: Optional[str] = None, error: Optional[Exception] = None) -> None:
        if self._result is None or self._result.done():
            logger.debug("Ignoring callback, result already delivered")
            return
        if error is not None:
            self._result.set_exception(error)
        else:
            self._result.set_result(code)

    async def _handle_callback(self, request: web.Request) -> web.Response:
        """Handle OAuth callback request"""
        state = request.query.get("state", "")
        if state != self.expected_state:
            logger.warning("OAuth callback state mismatch")
            self._deliver(error=StateMismatchError())
            return web.Response(text="state mismatch", status=400)

        code = request.query.get("code", "")
        if not code:
            logger.warning("OAuth callback without authorization code")
            self._deliver(error=MissingCodeError())
            return web.Response(text="missing code", status=400)

        logger.debug("OAuth callback received authorization code")
        self._deliver(code=code)
        return web.Response(text=SUCCESS_TEXT)

    async def start(self) -> None:
        """Bind the listener and start serving

        Raises:
            OSError: If the loopback port cannot be bound
        """
        self._result = asyncio.get_running_loop().create_future()
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.bind((self.host, 0))
            sock.listen(16)
            sock.setblocking(False)
        except OSError:
            sock.close()
            raise
        self._sock = sock
        self._port = sock.getsockname()[1]

        try:
            self.runner = web.AppRunner(self.app, access_log=None, shutdown_timeout=SHUTDOWN_TIMEOUT)
            await self.runner.setup()
            site = web.SockSite(self.runner, sock)
            await site.start()
        except Exception:
            await self.stop()
            raise
        logger.debug(f"OAuth callback server listening on {self.redirect_uri}")

    async def wait_for_callback(self, timeout: float) -> str:
        """
        Wait for OAuth callback.

        Args:
            timeout: Maximum time to wait in seconds

        Returns:
            The authorization code

        Raises:
            StateMismatchError, MissingCodeError: On an invalid callback
            CallbackTimeoutError: If nothing arrives in time
        """
        if self._result is None:
            raise RuntimeError("callback server is not started")
        try:
            return await asyncio.wait_for(self._result, timeout=timeout)
        except asyncio.TimeoutError:
            raise CallbackTimeoutError(timeout) from None

    async def stop(self) -> None:
        """Stop the callback server and release the port"""
        if self.runner:
            await self.runner.cleanup()
            self.runner = None
        if self._sock is not None:
            self._sock.close()
            self._sock = None
            logger.debug("OAuth callback server stopped")
        if self._result is not None and not self._result.done():
            self._result.cancel()

    async def __aenter__(self) -> "OAuthCallbackServer":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()
