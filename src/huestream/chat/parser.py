"""Parse Twitch chat lines (IRC with IRCv3 message tags)."""

from __future__ import annotations

from dataclasses import dataclass, field

_TAG_ESCAPES = {":": ";", "s": " ", "\\": "\\", "r": "\r", "n": "\n"}


def unescape_tag_value(value: str) -> str:
    """Decode an IRCv3 tag value.

    Args:
        value: Escaped value as sent on the wire

    Returns:
        Decoded value; an unknown escape keeps the escaped character
    """
    if "\\" not in value:
        return value

    result: list[str] = []
    chars = iter(value)
    for char in chars:
        if char != "\\":
            result.append(char)
            continue
        escaped = next(chars, "")
        result.append(_TAG_ESCAPES.get(escaped, escaped))
    return "".join(result)


def parse_tags(raw: str) -> dict[str, str]:
    """Parse the tag section of a line, without its leading '@'."""
    tags: dict[str, str] = {}
    for item in raw.split(";"):
        if not item:
            continue
        key, _, value = item.partition("=")
        tags[key] = unescape_tag_value(value)
    return tags


@dataclass(frozen=True)
class IrcMessage:
    """One chat protocol line.

    Attributes:
        command: IRC command or numeric reply (e.g. "PRIVMSG", "001")
        params: Command parameters, the trailing one included
        tags: IRCv3 message tags
        prefix: Message source without its leading ':'
    """

    command: str
    params: tuple[str, ...] = ()
    tags: dict[str, str] = field(default_factory=dict)
    prefix: str = ""

    @property
    def nick(self) -> str:
        """Nick of the sender, from the prefix."""
        return self.prefix.split("!", 1)[0]

    @property
    def channel(self) -> str:
        """Channel name without its '#', for channel messages."""
        if self.params and self.params[0].startswith("#"):
            return self.params[0][1:]
        return ""

    @property
    def text(self) -> str:
        """Trailing parameter (the message body), if any."""
        return self.params[-1] if len(self.params) > 1 else ""

    @property
    def display_name(self) -> str:
        """Display name of the sender, falling back to the login name."""
        return self.tags.get("display-name") or self.tags.get("login") or self.nick

    def int_tag(self, key: str, default: int = 0) -> int:
        """Return a numeric tag, or default if absent or malformed."""
        try:
            return int(self.tags.get(key, default))
        except ValueError:
            return default


def parse_line(line: str) -> IrcMessage:
    """Parse a raw chat line.

    Args:
        line: One line, with or without its trailing CRLF

    Returns:
        The parsed message

    Raises:
        ValueError: If the line holds no command
    """
    rest = line.rstrip("\r\n")

    tags: dict[str, str] = {}
    if rest.startswith("@"):
        raw_tags, _, rest = rest[1:].partition(" ")
        tags = parse_tags(raw_tags)
        rest = rest.lstrip(" ")

    prefix = ""
    if rest.startswith(":"):
        prefix, _, rest = rest[1:].partition(" ")
        rest = rest.lstrip(" ")

    trailing: str | None = None
    if " :" in rest:
        rest, trailing = rest.split(" :", 1)
    elif rest.startswith(":"):
        rest, trailing = "", rest[1:]

    words = rest.split()
    if not words:
        raise ValueError(f"No command in chat line: {line!r}")

    params = words[1:]
    if trailing is not None:
        params.append(trailing)
    return IrcMessage(
        command=words[0].upper(), params=tuple(params), tags=tags, prefix=prefix
    )
