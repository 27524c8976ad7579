"""Twitch chat: connection, line parsing and broadcaster commands."""

from __future__ import annotations

from huestream.chat.client import TwitchChatClient
from huestream.chat.commands import CommandDispatcher, get_command_name
from huestream.chat.parser import IrcMessage, parse_line

__all__ = [
    "CommandDispatcher",
    "IrcMessage",
    "TwitchChatClient",
    "get_command_name",
    "parse_line",
]
