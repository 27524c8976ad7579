"""Read-only Twitch chat client.

Connects anonymously to the Twitch IRC gateway over plain asyncio streams,
joins one channel and feeds its messages and notifications to the bot.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import TYPE_CHECKING

from huestream.chat.parser import IrcMessage, parse_line
from huestream.const import TWITCH_IRC_HOST, TWITCH_IRC_PORT

if TYPE_CHECKING:
    from huestream.chat.commands import CommandDispatcher
    from huestream.engine import EffectEngine

_LOGGER = logging.getLogger(__name__)

ANONYMOUS_NICK = "justinfan12345"
CAPABILITIES = "twitch.tv/tags twitch.tv/commands"

_RECONNECT_SLEEP_BASE = 1.0
_RECONNECT_SLEEP_MAX = 60.0


class TwitchChatClient:
    """Twitch chat connection for one channel.

    Chat messages go to the command dispatcher. Notifications (raids,
    subscriptions, gifts, cheers) go to the engine when one is given; they
    are ignored otherwise, e.g. when the HTTP triggers replace them.

    Example:
        ```python
        client = TwitchChatClient("mychannel", dispatcher, notifications=engine)
        task = client.start()
        ...
        await client.close()
        ```
    """

    def __init__(
        self,
        channel: str,
        dispatcher: CommandDispatcher,
        notifications: EffectEngine | None = None,
        host: str = TWITCH_IRC_HOST,
        port: int = TWITCH_IRC_PORT,
        nick: str = ANONYMOUS_NICK,
    ) -> None:
        """Initialize the client.

        Args:
            channel: Channel to join, with or without its '#'
            dispatcher: Receives every chat message
            notifications: Receives stream notifications, None to ignore them
            host: Chat gateway host
            port: Chat gateway port
            nick: Login nick, anonymous by default
        """
        self.channel = channel.lstrip("#").lower()
        self.dispatcher = dispatcher
        self.notifications = notifications
        self.host = host
        self.port = port
        self.nick = nick

        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._task: asyncio.Task[None] | None = None
        self._closing = False

    @property
    def connected(self) -> bool:
        return self._writer is not None and not self._writer.is_closing()

    def start(self) -> asyncio.Task[None]:
        """Run the client in a background task."""
        if self._task is None or self._task.done():
            self._closing = False
            self._task = asyncio.create_task(self.run(), name="huestream-chat")
        return self._task

    async def close(self) -> None:
        """Stop the client and close the connection."""
        self._closing = True
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        await self._disconnect()

    async def connect(self) -> None:
        """Open the connection, log in and join the channel."""
        self._reader, self._writer = await asyncio.open_connection(self.host, self.port)
        await self.send(f"CAP REQ :{CAPABILITIES}")
        await self.send(f"NICK {self.nick}")
        await self.send(f"JOIN #{self.channel}")
        _LOGGER.info(
            {
                "class": self.__class__.__name__,
                "method": "connect",
                "action": "joined",
                "values": {"host": self.host, "channel": self.channel},
            }
        )

    async def run(self) -> None:
        """Stay connected, reconnecting with backoff when the link drops."""
        attempt = 0
        while not self._closing:
            try:
                await self.connect()
                attempt = 0
                await self._read_loop()
            except (OSError, asyncio.IncompleteReadError) as e:
                _LOGGER.warning(
                    {
                        "class": self.__class__.__name__,
                        "method": "run",
                        "action": "disconnected",
                        "error": str(e),
                        "values": {"attempt": attempt},
                    }
                )
            finally:
                await self._disconnect()

            if self._closing:
                break
            await asyncio.sleep(self._reconnect_sleep_with_jitter(attempt))
            attempt += 1

    async def send(self, line: str) -> None:
        if self._writer is None:
            raise ConnectionError("Chat connection not open")
        self._writer.write(f"{line}\r\n".encode())
        await self._writer.drain()

    async def handle_line(self, line: str) -> None:
        """Handle one raw line received from the gateway."""
        try:
            message = parse_line(line)
        except ValueError:
            _LOGGER.debug(
                {
                    "class": self.__class__.__name__,
                    "method": "handle_line",
                    "action": "ignored",
                    "values": {"line": line},
                }
            )
            return

        if message.command == "PING":
            await self.send(f"PONG :{message.params[-1] if message.params else ''}")
        elif message.command == "RECONNECT":
            raise ConnectionResetError("Server requested a reconnection")
        elif message.command == "PRIVMSG":
            self._handle_privmsg(message)
        elif message.command == "USERNOTICE":
            self._handle_usernotice(message)

    def _handle_privmsg(self, message: IrcMessage) -> None:
        self.dispatcher.handle_message(message, is_self=message.nick == self.nick)

        bits = message.int_tag("bits")
        if bits and self.notifications is not None:
            self.notifications.on_cheer(message.display_name, bits)

    def _handle_usernotice(self, message: IrcMessage) -> None:
        events = self.notifications
        if events is None:
            return

        kind = message.tags.get("msg-id", "")
        username = message.display_name
        if kind == "sub":
            events.on_subscription(username)
        elif kind == "resub":
            events.on_resub(username, message.int_tag("msg-param-cumulative-months", 1))
        elif kind in ("subgift", "anonsubgift"):
            events.on_subgift(
                username,
                message.tags.get("msg-param-recipient-display-name", ""),
                message.int_tag("msg-param-months"),
            )
        elif kind in ("submysterygift", "anonsubmysterygift"):
            events.on_submysterygift(username, message.int_tag("msg-param-mass-gift-count", 1))
        elif kind == "raid":
            events.on_raided(
                message.tags.get("msg-param-displayName") or username,
                message.int_tag("msg-param-viewerCount"),
            )

    async def _read_loop(self) -> None:
        assert self._reader is not None
        while not self._closing:
            raw = await self._reader.readline()
            if not raw:
                raise ConnectionResetError("Connection closed by the server")
            await self.handle_line(raw.decode("utf-8", errors="replace"))

    async def _disconnect(self) -> None:
        writer, self._writer, self._reader = self._writer, None, None
        if writer is None:
            return
        writer.close()
        try:
            await writer.wait_closed()
        except OSError:
            pass

    @staticmethod
    def _reconnect_sleep_with_jitter(attempt: int) -> float:
        """Exponential backoff with full jitter, capped."""
        exponential_delay = min(_RECONNECT_SLEEP_BASE * (2**attempt), _RECONNECT_SLEEP_MAX)
        return random.uniform(0, exponential_delay)  # nosec

    def __repr__(self) -> str:
        return (
            f"TwitchChatClient(channel={self.channel!r}, "
            f"notifications={self.notifications is not None})"
        )
