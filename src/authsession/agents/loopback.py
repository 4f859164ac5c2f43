"""System-browser user-agent with a loopback redirect listener."""

from __future__ import annotations

import asyncio
import logging
import socket
import webbrowser
from collections.abc import Callable
from urllib.parse import urlparse

import uvicorn
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import HTMLResponse, Response
from starlette.routing import Route

from authsession.agents.base import parse_redirect_url
from authsession.models.errors import ConfigurationError, UserAgentError
from authsession.models.flow import (
    AuthorizationDismissed,
    AuthorizationResult,
    PromptOptions,
)

logger = logging.getLogger(__name__)

LOOPBACK_HOSTS = ("127.0.0.1", "localhost", "::1")

COMPLETION_PAGE = (
    "<html><body><p>Authorization complete. You can close this window.</p>"
    "</body></html>"
)


class LoopbackBrowserAgent:
    """Opens the system browser and listens on the loopback redirect URI.

    Serves a single route at the redirect URI's path for the duration of one
    prompt. Fragment-mode responses never reach the server, so this agent
    is meant for code flows.
    """

    def __init__(
        self,
        redirect_uri: str,
        timeout: float = 300.0,
        open_browser: Callable[[str], bool] = webbrowser.open,
        startup_timeout: float = 5.0,
    ) -> None:
        parsed = urlparse(redirect_uri)
        if parsed.scheme != "http" or parsed.hostname not in LOOPBACK_HOSTS:
            raise ConfigurationError(
                f"Loopback agent needs an http loopback redirect URI: {redirect_uri}"
            )

        self.redirect_uri = redirect_uri
        self.host = parsed.hostname
        self.port = parsed.port or 80
        self.path = parsed.path or "/"
        self.timeout = timeout
        self.startup_timeout = startup_timeout
        self._open_browser = open_browser

        self._pending: asyncio.Future[AuthorizationResult] | None = None
        self._app = Starlette(
            routes=[Route(self.path, self._handle_redirect, methods=["GET"])]
        )

    @property
    def app(self) -> Starlette:
        return self._app

    async def open(
        self, url: str, options: PromptOptions | None = None
    ) -> AuthorizationResult:
        """Run one prompt: start listening, open the browser, await redirect.

        Returns AuthorizationDismissed if no redirect arrives in time.
        Cancelling the call stops the listener.

        Raises:
            UserAgentError: If the redirect port cannot be bound or the
                listener does not start
        """
        sock = self._bind()
        self._pending = asyncio.get_running_loop().create_future()

        config = uvicorn.Config(
            app=self._app, host=self.host, port=self.port, log_level="warning"
        )
        server = uvicorn.Server(config)
        serve_task = asyncio.create_task(server.serve(sockets=[sock]))

        try:
            await self._wait_for_startup(server, serve_task)
            logger.info(f"Listening for redirect on {self.redirect_uri}")

            opened = await asyncio.to_thread(self._open_browser, url)
            if not opened:
                logger.warning(f"Could not open a browser. Visit this URL: {url}")

            try:
                return await asyncio.wait_for(self._pending, timeout=self.timeout)
            except asyncio.TimeoutError:
                logger.info(f"No redirect received within {self.timeout}s")
                return AuthorizationDismissed()

        finally:
            self._pending = None
            server.should_exit = True
            if not serve_task.done():
                await serve_task
            sock.close()

    def _bind(self) -> socket.socket:
        """Bind the redirect port up front so a busy port fails this prompt only."""
        if self.host == "::1":
            family, address = socket.AF_INET6, ("::1", self.port)
        else:
            family, address = socket.AF_INET, ("127.0.0.1", self.port)

        sock = socket.socket(family, socket.SOCK_STREAM)
        try:
            sock.bind(address)
        except OSError as e:
            sock.close()
            logger.error(f"Cannot listen on {self.host}:{self.port}: {e}")
            raise UserAgentError(
                f"Redirect port {self.host}:{self.port} is unavailable: {e}"
            ) from e
        return sock

    async def _wait_for_startup(
        self, server: uvicorn.Server, serve_task: asyncio.Task[None]
    ) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.startup_timeout
        while not server.started:
            if serve_task.done():
                raise UserAgentError(
                    f"Redirect listener on {self.host}:{self.port} failed to start"
                )
            if loop.time() >= deadline:
                raise UserAgentError(
                    f"Redirect listener on {self.host}:{self.port} did not start "
                    f"within {self.startup_timeout}s"
                )
            await asyncio.sleep(0.01)

    async def _handle_redirect(self, request: Request) -> Response:
        """Resolve the pending prompt with the redirect parameters."""
        if self._pending is None or self._pending.done():
            return Response("No authorization in progress", status_code=409)

        self._pending.set_result(parse_redirect_url(str(request.url)))
        return HTMLResponse(COMPLETION_PAGE)
