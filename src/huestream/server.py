"""HTTP trigger listener.

A local alternative to the chat notifications: an external tool (e.g. a
stream alerts service) calls one of the trigger paths to play an effect.
Each trigger first aborts whatever is running or queued.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from aiohttp import web

if TYPE_CHECKING:
    from huestream.engine import EffectEngine

_LOGGER = logging.getLogger(__name__)

DEFAULT_HOST = "localhost"


class TriggerServer:
    """aiohttp server exposing the effect triggers.

    Paths: /raid, /subscribe, /subgift and /bits, any method. They answer
    "ok" once the queue has been cancelled, then enqueue the effect. Any
    other path answers 404.
    """

    def __init__(
        self,
        engine: EffectEngine,
        port: int,
        host: str = DEFAULT_HOST,
    ) -> None:
        """Initialize the server.

        Args:
            engine: Engine playing the triggered effects
            port: Port to bind to
            host: Host to bind to (default: localhost only)
        """
        self.engine = engine
        self.host = host
        self.port = port

        self._runner: web.AppRunner | None = None
        self._site: web.TCPSite | None = None

    @property
    def triggers(self) -> dict[str, Callable[[], Any]]:
        return {
            "/raid": self.engine.do_raid_effect,
            "/subscribe": self.engine.do_subscribe_effect,
            "/subgift": self.engine.do_sub_gift_effect,
            "/bits": self.engine.do_bits_effect,
        }

    @property
    def is_running(self) -> bool:
        return self._site is not None

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}/"

    def create_app(self) -> web.Application:
        """Create the aiohttp application with the trigger routes."""
        app = web.Application()
        for path in self.triggers:
            app.router.add_route("*", path, self._handle_trigger)
        app.router.add_route("*", "/{tail:.*}", self._handle_not_found)
        return app

    async def start(self) -> None:
        """Start listening (non-blocking)."""
        if self.is_running:
            _LOGGER.warning(
                {"class": self.__class__.__name__, "method": "start", "action": "already_running"}
            )
            return

        self._runner = web.AppRunner(self.create_app())
        await self._runner.setup()
        self._site = web.TCPSite(self._runner, self.host, self.port)
        await self._site.start()
        _LOGGER.info(
            {
                "class": self.__class__.__name__,
                "method": "start",
                "action": "listening",
                "values": {"url": self.url},
            }
        )

    async def stop(self) -> None:
        """Stop listening."""
        if self._site is not None:
            await self._site.stop()
            self._site = None
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None

    async def _handle_trigger(self, request: web.Request) -> web.Response:
        trigger = self.triggers[request.path]
        await self.engine.cancel_all()
        _LOGGER.info(
            {
                "class": self.__class__.__name__,
                "method": "_handle_trigger",
                "action": "trigger",
                "values": {"path": request.path},
            }
        )
        trigger()
        return web.Response(text="ok\n")

    async def _handle_not_found(self, request: web.Request) -> web.Response:
        _LOGGER.debug(
            {
                "class": self.__class__.__name__,
                "method": "_handle_not_found",
                "values": {"path": request.path},
            }
        )
        return web.Response(status=404, text="Resource not found\n")
