"""Tests for configuration loading."""

from pathlib import Path

import pytest

from huestream.color import LightState
from huestream.config import (
    DEFAULT_COLOR_SCHEMES,
    FixtureLayout,
    load_config,
    parse_config,
)
from huestream.const import MIRED_MIN
from huestream.exceptions import ConfigError

EXAMPLE_CONFIG = Path(__file__).parents[2] / "config.example.toml"

MINIMAL = {
    "twitch": {"channel": "MyChannel"},
    "bridge": {"username": "secret"},
}


def test_minimal_config_defaults() -> None:
    """Test the defaults of an otherwise empty configuration."""
    config = parse_config(MINIMAL)

    assert config.twitch_channel == "MyChannel"
    assert config.bridge_username == "secret"
    assert config.bridge_host is None
    assert config.request_timeout is None
    assert config.http_port is None
    assert config.color_reward_id is None
    assert config.fixtures == FixtureLayout()
    assert config.color_schemes == DEFAULT_COLOR_SCHEMES
    assert config.color_transition == 1000
    assert config.max_requests_per_second == 10


@pytest.mark.parametrize("section", ["twitch", "bridge"])
def test_missing_required_setting(section: str) -> None:
    data = {key: value for key, value in MINIMAL.items() if key != section}

    with pytest.raises(ConfigError, match=f"Missing required setting {section}"):
        parse_config(data)


def test_fixtures_and_initial_settings() -> None:
    """Test fixture IDs, absent slots and Kelvin initial settings."""
    config = parse_config(
        {
            **MINIMAL,
            "fixtures": {"left_key": 1, "back": 0, "left_strip": 4},
            "initial": {"left_key": {"on": True, "bri": 254, "k": 6500}},
        }
    )

    assert config.fixtures == FixtureLayout(left_key=1, left_strip=4)
    assert config.fixtures.present == [1, 4]
    assert config.fixtures.has_color(4)
    assert not config.fixtures.has_color(1)
    assert config.initial_settings == {
        "left_key": LightState(on=True, bri=254, ct=MIRED_MIN)
    }


def test_unknown_role() -> None:
    with pytest.raises(ConfigError, match="Unknown fixture role"):
        parse_config({**MINIMAL, "fixtures": {"ceiling": 7}})


def test_invalid_setting_value() -> None:
    with pytest.raises(ConfigError, match="Invalid configuration"):
        parse_config({**MINIMAL, "initial": {"back": {"bri": 999}}})


def test_non_positive_request_rate() -> None:
    with pytest.raises(ConfigError, match="max_requests_per_second"):
        parse_config({**MINIMAL, "max_requests_per_second": 0})


def test_custom_color_schemes_replace_defaults() -> None:
    config = parse_config(
        {
            **MINIMAL,
            "color_schemes": [
                {"keywords": ["teal"], "settings": [{"on": True, "xy": [0.17, 0.35]}]}
            ],
        }
    )

    assert len(config.color_schemes) == 1
    assert config.color_schemes[0].keywords == ("teal",)


def test_load_example_config() -> None:
    """Test the shipped example configuration is valid."""
    config = load_config(EXAMPLE_CONFIG)

    assert config.twitch_channel == "MyTwitchChannel"
    assert config.fixtures.ordered == (1, 2, 3, 4, 5)
    assert set(config.initial_settings) == {
        "left_key",
        "right_key",
        "back",
        "left_strip",
        "right_strip",
    }
    assert config.http_port is None


def test_load_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Cannot read configuration file"):
        load_config(tmp_path / "missing.toml")


def test_load_invalid_toml(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text("[twitch\nchannel = ")

    with pytest.raises(ConfigError, match="Cannot parse configuration file"):
        load_config(path)


def test_load_toml(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text(
        "\n".join(
            [
                "[twitch]",
                'channel = "chan"',
                "[bridge]",
                'username = "user"',
                'host = "10.0.0.2"',
                "request_timeout = 2.5",
                "[http]",
                "port = 8666",
            ]
        )
    )

    config = load_config(path)

    assert config.bridge_host == "10.0.0.2"
    assert config.request_timeout == 2.5
    assert config.http_port == 8666
