"""Short-lived local HTTP listener capturing the OAuth redirect."""

from __future__ import annotations

import asyncio
import logging
import secrets

from aiohttp import web

from ..constants import OAUTH_CALLBACK_TIMEOUT_SECONDS
from ..errors.internal import (
    AuthorizationDeniedError,
    CallbackTimeoutError,
    OAuthError,
    StateMismatchError,
)
from ..utils import format_duration

_SUCCESS_PAGE = """<html>
<body>
    <h2>Authorization Successful!</h2>
    <p>You can close this window and return to the terminal.</p>
</body>
</html>
"""


class OAuthCallbackListener:
    """Accepts a single redirect carrying ``code`` and ``state``.

    ``start()`` returns only once the socket is bound (``ready`` is set), so
    the user can safely be sent to the authorization page afterwards. The
    first callback with a usable outcome resolves the listener; later
    requests get HTTP 410. The server is torn down by ``wait_for_code``
    whichever way it ends.
    """

    def __init__(
        self,
        expected_state: str,
        host: str = "localhost",
        port: int = 3000,
        path: str = "/",
        timeout: float = OAUTH_CALLBACK_TIMEOUT_SECONDS,
    ) -> None:
        self.expected_state = expected_state
        self.host = host
        self.port = port
        self.path = path
        self.timeout = timeout
        self.ready = asyncio.Event()
        self._runner: web.AppRunner | None = None
        self._result: asyncio.Future[str] | None = None

    @property
    def redirect_uri(self) -> str:
        return f"http://{self.host}:{self.port}{self.path}"

    @property
    def running(self) -> bool:
        return self._runner is not None

    async def start(self) -> None:
        """Bind the listener.

        Raises:
            OAuthError: If the port cannot be bound.
        """
        app = web.Application()
        app.router.add_get(self.path, self._handle_callback)
        runner = web.AppRunner(app, access_log=None)
        await runner.setup()
        site = web.TCPSite(runner, self.host, self.port)
        try:
            await site.start()
        except OSError as e:
            await runner.cleanup()
            raise OAuthError(
                f"Cannot bind OAuth callback listener on {self.host}:{self.port}: {e}"
            ) from e
        self._runner = runner
        if self.port == 0:
            # Ephemeral port requested; report the one actually bound
            self.port = runner.addresses[0][1]
        self._result = asyncio.get_running_loop().create_future()
        self.ready.set()
        logging.info(f"👂 OAuth callback listener ready url={self.redirect_uri}")

    async def stop(self) -> None:
        """Stop accepting connections. Safe to call more than once."""
        runner = self._runner
        self._runner = None
        if runner is not None:
            await runner.cleanup()
            logging.debug(f"🔻 OAuth callback listener stopped port={self.port}")

    async def wait_for_code(
        self, timeout: float | None = None, stop_event: asyncio.Event | None = None
    ) -> str:
        """Block until the callback resolves, the timeout elapses, or a stop is requested.

        Returns:
            The authorization code.

        Raises:
            StateMismatchError: Callback state did not match.
            AuthorizationDeniedError: Provider reported an error.
            CallbackTimeoutError: Nothing arrived in time.
            OAuthError: Stop requested, or listener not started.
        """
        if self._result is None:
            raise OAuthError("OAuth callback listener was not started")
        limit = self.timeout if timeout is None else timeout
        stop_task = asyncio.create_task(stop_event.wait()) if stop_event else None
        waiters: set[asyncio.Future] = {self._result}
        if stop_task is not None:
            waiters.add(stop_task)
        try:
            done, _ = await asyncio.wait(
                waiters, timeout=limit, return_when=asyncio.FIRST_COMPLETED
            )
            if self._result in done:
                return self._result.result()
            if stop_task is not None and stop_task in done:
                raise OAuthError("Authorization cancelled by stop request")
            raise CallbackTimeoutError(
                f"No OAuth callback received within {format_duration(limit)}",
                data={"timeout": limit},
            )
        finally:
            if stop_task is not None:
                stop_task.cancel()
            if not self._result.done():
                self._result.cancel()
            await self.stop()

    async def _handle_callback(self, request: web.Request) -> web.StreamResponse:
        result = self._result
        if result is None or result.done():
            return web.Response(
                status=410, text="This authorization request has already been completed."
            )

        params = request.query
        state = params.get("state", "")
        if not secrets.compare_digest(state.encode(), self.expected_state.encode()):
            logging.error("🚨 OAuth callback state mismatch - rejecting authorization")
            response = await self._respond(
                request, 400, "State mismatch. Authorization rejected."
            )
            self._resolve(
                error=StateMismatchError("OAuth callback state does not match the issued state")
            )
            return response

        error = params.get("error")
        if error:
            description = params.get("error_description", "")
            logging.warning(f"🚫 Authorization denied error={error} description={description}")
            response = await self._respond(request, 403, f"Authorization denied: {error}")
            self._resolve(
                error=AuthorizationDeniedError(
                    f"Authorization denied: {error}",
                    data={"error": error, "description": description},
                )
            )
            return response

        code = params.get("code")
        if not code:
            logging.warning("⚠️ OAuth callback without code - still waiting")
            return web.Response(status=400, text="Missing authorization code.")

        response = await self._respond(request, 200, _SUCCESS_PAGE, content_type="text/html")
        self._resolve(code=code)
        logging.info("✅ Authorization code received")
        return response

    @staticmethod
    async def _respond(
        request: web.Request, status: int, text: str, content_type: str = "text/plain"
    ) -> web.Response:
        # Response is fully written before the waiter is resolved
        response = web.Response(status=status, text=text, content_type=content_type)
        await response.prepare(request)
        await response.write_eof()
        return response

    def _resolve(self, *, code: str | None = None, error: Exception | None = None) -> None:
        result = self._result
        if result is None or result.done():
            return
        if error is not None:
            result.set_exception(error)
        else:
            result.set_result(code)
