"""Configuration loading.

The bot is configured from a TOML file. Every section is optional except
the Twitch channel and the bridge username; the defaults mirror the
example configuration shipped with the project.

Example:
    ```toml
    color_transition = 1000

    [twitch]
    channel = "MyTwitchChannel"
    color_reward_id = "xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx"

    [bridge]
    username = "XXXXXXXXXXXX-XXXXXXXXXXXXXXXXXXXXXXXXXXX"
    host = "192.168.0.100"

    [fixtures]
    left_key = 1
    right_key = 2
    back = 3
    left_strip = 4
    right_strip = 5

    [initial.left_key]
    on = true
    bri = 254
    k = 6500

    [[color_schemes]]
    keywords = ["red"]
    settings = [{ on = true, bri = 254, xy = [0.6833, 0.3092] }]
    ```
"""

from __future__ import annotations

import tomllib
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from huestream.color import LightState
from huestream.const import DEFAULT_COLOR_TRANSITION, MAX_REQUESTS_PER_SECOND
from huestream.exceptions import ConfigError

FixtureID = int | None

ROLES: tuple[str, ...] = ("left_key", "right_key", "back", "left_strip", "right_strip")

ROLE_NAMES: dict[str, str] = {
    "left_key": "Left key light",
    "right_key": "Right key light",
    "back": "Back light",
    "left_strip": "Left Lightstrip",
    "right_strip": "Right Lightstrip",
}


@dataclass(frozen=True)
class FixtureLayout:
    """The fixtures driven by the effects, by role.

    A role set to None is an absent fixture: commands addressed to it are
    skipped while the phase timing is preserved.

    Attributes:
        left_key: Left key light (color temperature only)
        right_key: Right key light (color temperature only)
        back: Back light, switched off by the rotating and flashing effects
        left_strip: Left color strip
        right_strip: Right color strip
    """

    left_key: FixtureID = None
    right_key: FixtureID = None
    back: FixtureID = None
    left_strip: FixtureID = None
    right_strip: FixtureID = None

    def role_of(self, fixture_id: FixtureID) -> str | None:
        """Return the role a fixture ID is assigned to, if any."""
        if fixture_id is None:
            return None
        for role in ROLES:
            if getattr(self, role) == fixture_id:
                return role
        return None

    def has_color(self, fixture_id: FixtureID) -> bool:
        """Indicate if the fixture supports colors and named effect modes."""
        return fixture_id is not None and fixture_id in (self.left_strip, self.right_strip)

    def name(self, fixture_id: FixtureID) -> str:
        """Return a human-readable fixture name for logs."""
        role = self.role_of(fixture_id)
        return ROLE_NAMES[role] if role else f"Light {fixture_id}"

    @property
    def ordered(self) -> tuple[FixtureID, ...]:
        """All fixture slots in the fixed test order, absent ones included."""
        return tuple(getattr(self, role) for role in ROLES)

    @property
    def present(self) -> list[int]:
        """IDs of the fixtures that are configured."""
        return [fixture_id for fixture_id in self.ordered if fixture_id is not None]

    def __iter__(self) -> Iterator[tuple[str, FixtureID]]:
        return iter((role, getattr(self, role)) for role in ROLES)


@dataclass(frozen=True)
class ColorScheme:
    """A named palette selectable from chat.

    Attributes:
        keywords: Aliases matched as whole words, duplicates removed
        settings: One or two light states, left strip first
    """

    keywords: tuple[str, ...]
    settings: tuple[LightState, ...]

    def __post_init__(self) -> None:
        if not self.keywords:
            raise ValueError("A color scheme needs at least one keyword")
        if not (1 <= len(self.settings) <= 2):
            raise ValueError(
                f"A color scheme needs 1 or 2 settings, got {len(self.settings)}"
            )
        unique = tuple(dict.fromkeys(keyword.lower() for keyword in self.keywords))
        object.__setattr__(self, "keywords", unique)

    @classmethod
    def create(cls, keywords: list[str], settings: list[Mapping[str, Any]]) -> ColorScheme:
        return cls(
            keywords=tuple(keywords),
            settings=tuple(LightState.from_settings(s) for s in settings),
        )


def _xy(x: float, y: float) -> dict[str, Any]:
    return {"on": True, "bri": 254, "xy": [x, y]}


DEFAULT_COLOR_SCHEMES: tuple[ColorScheme, ...] = (
    ColorScheme.create(["red"], [_xy(0.6833, 0.3092)]),
    ColorScheme.create(["green"], [_xy(0.17, 0.7)]),
    ColorScheme.create(["blue"], [_xy(0.1532, 0.0475)]),
    ColorScheme.create(["yellow"], [_xy(0.3615, 0.5561)]),
    ColorScheme.create(["pink"], [_xy(0.3448, 0.2793)]),
    ColorScheme.create(["purple", "violet"], [_xy(0.246, 0.0934)]),
    ColorScheme.create(["orange"], [_xy(0.4868, 0.462)]),
    ColorScheme.create(["white"], [{"on": True, "bri": 254, "ct": 153}]),
    ColorScheme.create(["gold"], [_xy(0.4544, 0.4611)]),
    ColorScheme.create(
        ["rgb", "rainbow", "pride", "gay", "lgbt"],
        [
            {"on": True, "bri": 254, "sat": 254, "hue": 0, "effect": "colorloop"},
            {"on": True, "bri": 254, "sat": 254, "hue": 32767, "effect": "colorloop"},
        ],
    ),
    ColorScheme.create(
        ["cyberpunk"], [_xy(0.3659, 0.1506), _xy(0.1559, 0.1521)]
    ),
)


@dataclass(frozen=True)
class BotConfig:
    """Complete bot configuration.

    Attributes:
        twitch_channel: Channel whose chat and events drive the effects
        bridge_username: Application key registered on the Hue bridge
        bridge_host: Bridge address, or None to discover it
        request_timeout: Timeout of one bridge request in seconds, or None
        http_port: Port of the local trigger listener, or None to disable it
        color_reward_id: Channel points reward that changes the colors
        fixtures: Fixture IDs by role
        initial_settings: Light states applied by the reset effect, by role
        color_schemes: Palettes selectable from chat
        color_transition: Color change transition in milliseconds
        max_requests_per_second: Maximum request rate of the bridge
    """

    twitch_channel: str
    bridge_username: str
    bridge_host: str | None = None
    request_timeout: float | None = None
    http_port: int | None = None
    color_reward_id: str | None = None
    fixtures: FixtureLayout = field(default_factory=FixtureLayout)
    initial_settings: dict[str, LightState] = field(default_factory=dict)
    color_schemes: tuple[ColorScheme, ...] = DEFAULT_COLOR_SCHEMES
    color_transition: int = DEFAULT_COLOR_TRANSITION
    max_requests_per_second: float = MAX_REQUESTS_PER_SECOND


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, Mapping):
        raise ConfigError(f"[{name}] must be a table")
    return section


def _required(section: Mapping[str, Any], key: str, name: str) -> Any:
    value = section.get(key)
    if not value:
        raise ConfigError(f"Missing required setting {name}.{key}")
    return value


def parse_config(data: Mapping[str, Any]) -> BotConfig:
    """Build a BotConfig from parsed TOML data.

    Raises:
        ConfigError: If a required setting is missing or a value is invalid
    """
    twitch = _section(data, "twitch")
    bridge = _section(data, "bridge")
    http = _section(data, "http")
    fixtures = _section(data, "fixtures")
    initial = _section(data, "initial")

    unknown_roles = (set(fixtures) | set(initial)) - set(ROLES)
    if unknown_roles:
        raise ConfigError(f"Unknown fixture role(s): {', '.join(sorted(unknown_roles))}")

    try:
        layout = FixtureLayout(
            **{role: (fixtures.get(role) or None) for role in ROLES}
        )
        initial_settings = {
            role: LightState.from_settings(settings) for role, settings in initial.items()
        }
        schemes = data.get("color_schemes")
        color_schemes = (
            tuple(
                ColorScheme.create(s.get("keywords", []), s.get("settings", []))
                for s in schemes
            )
            if schemes is not None
            else DEFAULT_COLOR_SCHEMES
        )
        config = BotConfig(
            twitch_channel=_required(twitch, "channel", "twitch"),
            bridge_username=_required(bridge, "username", "bridge"),
            bridge_host=bridge.get("host") or None,
            request_timeout=bridge.get("request_timeout"),
            http_port=http.get("port") or None,
            color_reward_id=twitch.get("color_reward_id") or None,
            fixtures=layout,
            initial_settings=initial_settings,
            color_schemes=color_schemes,
            color_transition=int(data.get("color_transition", DEFAULT_COLOR_TRANSITION)),
            max_requests_per_second=float(
                data.get("max_requests_per_second", MAX_REQUESTS_PER_SECOND)
            ),
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    if config.max_requests_per_second <= 0:
        raise ConfigError("max_requests_per_second must be positive")
    return config


def load_config(path: str | Path) -> BotConfig:
    """Load and validate the TOML configuration file at path.

    Raises:
        ConfigError: If the file cannot be read, parsed or validated
    """
    try:
        with Path(path).open("rb") as fh:
            data = tomllib.load(fh)
    except OSError as e:
        raise ConfigError(f"Cannot read configuration file {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Cannot parse configuration file {path}: {e}") from e
    return parse_config(data)
