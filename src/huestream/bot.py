"""The stream light bot: wires the bridge, the engine and the triggers."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import aiohttp

from huestream.bridge import HueBridge, discover_bridge
from huestream.chat import CommandDispatcher, TwitchChatClient
from huestream.const import STARTUP_RETRY_DELAY
from huestream.engine import EffectEngine
from huestream.exceptions import HueStreamError
from huestream.pacing import RatePacer
from huestream.scheduler import SchedulerContext
from huestream.server import TriggerServer

if TYPE_CHECKING:
    from huestream.config import BotConfig

_LOGGER = logging.getLogger(__name__)


class HueBot:
    """Twitch-driven Hue light bot.

    Start sequence: connect to the bridge, reset the lights, join the chat,
    then start the HTTP trigger listener when a port is configured. With the
    listener on, the chat notifications are ignored and only the HTTP
    triggers play the stream event effects.

    Example:
        ```python
        bot = HueBot(load_config("config.toml"))
        await bot.run()
        ```
    """

    def __init__(
        self, config: BotConfig, retry_delay: float = STARTUP_RETRY_DELAY
    ) -> None:
        """Initialize the bot.

        Args:
            config: Bot configuration
            retry_delay: Seconds to wait before retrying a failed start
        """
        self.config = config
        self.retry_delay = retry_delay

        self.bridge: HueBridge | None = None
        self.engine: EffectEngine | None = None
        self.chat: TwitchChatClient | None = None
        self._chat_task: asyncio.Task[None] | None = None
        self.server: TriggerServer | None = None

    async def start(self) -> None:
        """Run the start sequence once.

        Raises:
            HueConnectionError: If the bridge cannot be discovered or reached
            OSError: If the HTTP trigger port cannot be bound
        """
        config = self.config

        _LOGGER.info({"class": self.__class__.__name__, "method": "start", "action": "bridge"})
        host = config.bridge_host or await discover_bridge()
        self.bridge = HueBridge(host, config.bridge_username, timeout=config.request_timeout)
        await self.bridge.connect()

        ctx = SchedulerContext(
            self.bridge,
            config.fixtures,
            pacer=RatePacer(config.max_requests_per_second),
        )
        self.engine = EffectEngine(
            ctx,
            initial_settings=config.initial_settings,
            color_schemes=config.color_schemes,
            color_transition=config.color_transition,
        )
        await self.engine.reset_lights()
        ctx.queue.start()

        if config.http_port:
            self.server = TriggerServer(self.engine, config.http_port)

        dispatcher = CommandDispatcher(
            self.engine, config.twitch_channel, config.color_reward_id
        )
        self.chat = TwitchChatClient(
            config.twitch_channel,
            dispatcher,
            notifications=None if self.server else self.engine,
        )
        self._chat_task = self.chat.start()

        if self.server is not None:
            await self.server.start()

        _LOGGER.info(
            {
                "class": self.__class__.__name__,
                "method": "start",
                "action": "started",
                "values": {
                    "bridge": host,
                    "channel": config.twitch_channel,
                    "events": "http" if self.server else "chat",
                },
            }
        )

    async def run(self) -> None:
        """Start the bot, retrying until it succeeds, then run until closed."""
        while True:
            try:
                await self.start()
                break
            except (HueStreamError, aiohttp.ClientError, OSError) as e:
                _LOGGER.error(
                    {
                        "class": self.__class__.__name__,
                        "method": "run",
                        "action": "start_failed",
                        "error": str(e),
                        "values": {"retry_in": self.retry_delay},
                    }
                )
                await self.close()
                await asyncio.sleep(self.retry_delay)

        assert self._chat_task is not None
        try:
            await self._chat_task
        finally:
            await self.close()

    async def close(self) -> None:
        """Stop every component that was started."""
        if self.server is not None:
            await self.server.stop()
            self.server = None
        if self.chat is not None:
            await self.chat.close()
            self.chat = None
            self._chat_task = None
        if self.engine is not None:
            await self.engine.ctx.queue.close()
            self.engine = None
        if self.bridge is not None:
            await self.bridge.close()
            self.bridge = None

    def __repr__(self) -> str:
        return f"HueBot(channel={self.config.twitch_channel!r}, bridge={self.bridge!r})"
