"""Broadcaster chat commands and channel-points color changes.

Only the broadcaster can run commands. Each command has several aliases
and takes space-separated parameters with defaults, e.g.:

    !testresub Username 12 3
    !testsubgifts Username 10
    !color cyberpunk
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from huestream.chat.parser import IrcMessage
    from huestream.engine import EffectEngine

_LOGGER = logging.getLogger(__name__)

_COMMAND = re.compile(r"!([a-z0-9]+)")

DEFAULT_USERNAME = "Username"
DEFAULT_RECIPIENT = "Recipient"
DEFAULT_BITS = 1
DEFAULT_MONTHS = 1
DEFAULT_STREAK = 0
DEFAULT_GIFT_COUNT = 1
DEFAULT_VIEWERS = 666

COMMAND_ALIASES: dict[str, tuple[str, ...]] = {
    "reset": ("resetlight", "resetlights", "lightreset", "lightsreset"),
    "light_test": ("testlight", "lighttest", "testlights", "lightstest"),
    "bits_test": ("bittest", "bitstest", "testbit", "testbits", "testcheer"),
    "sub_test": ("subtest", "testsub", "subscribetest", "testsubscribe"),
    "resub_test": ("resubtest", "testresub"),
    "gift_test": ("subgifttest", "testsubgift"),
    "gift_batch_test": (
        "mysterysubgifttest",
        "testmysterysubgift",
        "subgiftstest",
        "testsubgifts",
    ),
    "raid_test": ("raidtest", "testraid"),
    "rotating_test": ("testrotating", "rotatingtest", "gyrotest", "testgyro"),
    "light_state": ("lightstate", "lightsstate"),
    "color": ("color", "colors", "setcolor", "setcolors", "testcolor", "testcolors"),
}


def get_command_name(message: str) -> str | None:
    """Return the first "!command" name found in message, lowercased."""
    match = _COMMAND.search(message.lower())
    return match.group(1) if match else None


def _param(params: Sequence[str], index: int, default: str) -> str:
    return params[index] if len(params) > index and params[index] else default


def _int_param(params: Sequence[str], index: int, default: int) -> int:
    try:
        return int(_param(params, index, str(default)))
    except ValueError:
        return default


class CommandDispatcher:
    """Route chat messages to the effect engine.

    Attributes:
        engine: Engine receiving the commands
        channel: Broadcaster name, compared case-insensitively with the
            display name of the sender
        color_reward_id: Custom channel-points reward that changes colors,
            None to disable
    """

    def __init__(
        self,
        engine: EffectEngine,
        channel: str,
        color_reward_id: str | None = None,
    ) -> None:
        self.engine = engine
        self.channel = channel.lstrip("#").lower()
        self.color_reward_id = color_reward_id
        self._handlers: dict[str, Callable[[Sequence[str], str], None]] = {}
        for command, aliases in COMMAND_ALIASES.items():
            handler = getattr(self, f"_cmd_{command}")
            self._handlers.update(dict.fromkeys(aliases, handler))

    def is_broadcaster(self, display_name: str) -> bool:
        return display_name.lower() == self.channel

    def handle_message(self, message: IrcMessage, is_self: bool = False) -> bool:
        """Handle one chat message.

        Args:
            message: Parsed PRIVMSG line
            is_self: True if the message was sent by this client

        Returns:
            True if the message triggered a command or a color change
        """
        if is_self:
            return False

        text = message.text
        sender = message.display_name
        command = get_command_name(text)
        if command is not None and self.is_broadcaster(sender):
            params = [word for word in text.split() if word.lower() != f"!{command}"]
            return self.dispatch(command, params, text, sender)

        reward_id = message.tags.get("custom-reward-id")
        if self.color_reward_id and reward_id == self.color_reward_id:
            _LOGGER.info(
                {
                    "class": self.__class__.__name__,
                    "method": "handle_message",
                    "action": "color_reward",
                    "values": {"username": sender},
                }
            )
            self.engine.change_scene_color(text)
            return True
        return False

    def dispatch(
        self,
        command: str,
        params: Sequence[str],
        text: str = "",
        sender: str = "",
    ) -> bool:
        """Run a broadcaster command.

        Args:
            command: Command name without its '!'
            params: Parameters following the command
            text: Full message text
            sender: Display name of the broadcaster

        Returns:
            False if the command is unknown
        """
        handler = self._handlers.get(command)
        _LOGGER.info(
            {
                "class": self.__class__.__name__,
                "method": "dispatch",
                "action": "command" if handler else "unknown_command",
                "values": {"command": command, "params": list(params), "username": sender},
            }
        )
        if handler is None:
            return False
        handler(params, text)
        return True

    def _cmd_reset(self, params: Sequence[str], text: str) -> None:
        self.engine.do_reset_lights()

    def _cmd_light_test(self, params: Sequence[str], text: str) -> None:
        self.engine.do_light_test()

    def _cmd_bits_test(self, params: Sequence[str], text: str) -> None:
        # Params: username, bits
        self.engine.on_cheer(
            _param(params, 0, DEFAULT_USERNAME), _int_param(params, 1, DEFAULT_BITS)
        )

    def _cmd_sub_test(self, params: Sequence[str], text: str) -> None:
        # Params: username
        self.engine.on_subscription(_param(params, 0, DEFAULT_USERNAME))

    def _cmd_resub_test(self, params: Sequence[str], text: str) -> None:
        # Params: username, cumulative months
        self.engine.on_resub(
            _param(params, 0, DEFAULT_USERNAME), _int_param(params, 1, DEFAULT_MONTHS)
        )

    def _cmd_gift_test(self, params: Sequence[str], text: str) -> None:
        # Params: username, recipient, streak months
        self.engine.on_subgift(
            _param(params, 0, DEFAULT_USERNAME),
            _param(params, 1, DEFAULT_RECIPIENT),
            _int_param(params, 2, DEFAULT_STREAK),
        )

    def _cmd_gift_batch_test(self, params: Sequence[str], text: str) -> None:
        # Params: username, gift count. Replays the individual gifts too.
        giver = _param(params, 0, DEFAULT_USERNAME)
        count = _int_param(params, 1, DEFAULT_GIFT_COUNT)
        self.engine.on_submysterygift(giver, count)
        for index in range(1, count + 1):
            self.engine.on_subgift(giver, f"{DEFAULT_RECIPIENT}_{index}", DEFAULT_MONTHS)

    def _cmd_raid_test(self, params: Sequence[str], text: str) -> None:
        # Params: username, viewers
        self.engine.on_raided(
            _param(params, 0, DEFAULT_USERNAME), _int_param(params, 1, DEFAULT_VIEWERS)
        )

    def _cmd_rotating_test(self, params: Sequence[str], text: str) -> None:
        self.engine.do_raid_effect()

    def _cmd_light_state(self, params: Sequence[str], text: str) -> None:
        self.engine.do_log_light_state()

    def _cmd_color(self, params: Sequence[str], text: str) -> None:
        self.engine.change_scene_color(text)

    def __repr__(self) -> str:
        return (
            f"CommandDispatcher(channel={self.channel!r}, "
            f"color_reward_id={self.color_reward_id!r})"
        )
