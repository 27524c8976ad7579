"""Tests for the color command resolver and EffectColorScheme."""

import asyncio
from unittest.mock import MagicMock

import pytest

from huestream.color import EFFECT_OFF, LightState
from huestream.config import DEFAULT_COLOR_SCHEMES, ColorScheme
from huestream.effects import (
    ColorCommandResolver,
    EffectColorScheme,
    EffectOutcome,
    ResolvedColors,
)
from huestream.exceptions import ColorResolutionError


@pytest.fixture
def resolver() -> ColorCommandResolver:
    return ColorCommandResolver(DEFAULT_COLOR_SCHEMES)


def _scheme(keyword: str) -> ColorScheme:
    return next(s for s in DEFAULT_COLOR_SCHEMES if keyword in s.keywords)


def test_single_hex_code_is_duplicated(resolver: ColorCommandResolver) -> None:
    """Test one hex code colors both strips."""
    colors = resolver.resolve("#ff0000")

    assert colors.left == LightState(on=True, rgb=(255, 0, 0))
    assert colors.right == LightState(on=True, rgb=(255, 0, 0))
    assert colors.name == "#ff0000"


def test_two_hex_codes_in_order(resolver: ColorCommandResolver) -> None:
    """Test two hex codes go left then right."""
    colors = resolver.resolve("#ff0000 and #00ff00")

    assert colors.left.rgb == (255, 0, 0)
    assert colors.right.rgb == (0, 255, 0)
    assert colors.names == ("#ff0000", "#00ff00")


def test_hex_codes_win_over_keywords(resolver: ColorCommandResolver) -> None:
    """Test keywords are ignored once a hex code is found."""
    colors = resolver.resolve("red #0000FF please")

    assert colors.left.rgb == (0, 0, 255)
    assert colors.right.rgb == (0, 0, 255)


def test_two_setting_scheme_in_configured_order(resolver: ColorCommandResolver) -> None:
    """Test a two-setting scheme keeps its left/right order."""
    rainbow = _scheme("rainbow")
    colors = resolver.resolve("I love rainbow tonight")

    assert (colors.left, colors.right) == rainbow.settings
    assert colors.name == "rainbow"


def test_single_setting_schemes_by_position(resolver: ColorCommandResolver) -> None:
    """Test single-setting schemes are ordered by first occurrence."""
    red = _scheme("red").settings[0]
    blue = _scheme("blue").settings[0]

    colors = resolver.resolve("I want red then blue")
    assert (colors.left, colors.right) == (red, blue)
    assert colors.name == "red blue"

    colors = resolver.resolve("I want blue then red")
    assert (colors.left, colors.right) == (blue, red)


def test_two_setting_scheme_takes_priority(resolver: ColorCommandResolver) -> None:
    """Test a two-setting scheme wins even when mentioned last."""
    colors = resolver.resolve("red or cyberpunk")

    assert (colors.left, colors.right) == _scheme("cyberpunk").settings


def test_keywords_match_whole_words_only(resolver: ColorCommandResolver) -> None:
    """Test a keyword inside another word is not a match."""
    with pytest.raises(ColorResolutionError):
        resolver.resolve("reddish bluish")


def test_keywords_are_case_and_space_insensitive(resolver: ColorCommandResolver) -> None:
    colors = resolver.resolve("!color   RED\tGold")

    assert colors.names == ("red", "gold")


def test_unknown_scheme(resolver: ColorCommandResolver) -> None:
    """Test resolution fails on text without hex code or keyword."""
    with pytest.raises(ColorResolutionError, match="Unknown color scheme"):
        resolver.resolve("gibberish")


def _colors(left: LightState, right: LightState) -> ResolvedColors:
    return ResolvedColors(left=left, right=right, names=("left", "right"))


async def test_apply_colors(ctx, bridge: MagicMock, commands) -> None:
    """Test effect modes are cleared before the colors are applied."""
    left = LightState(on=True, bri=254, xy=(0.1, 0.2))
    right = LightState(on=True, bri=254, ct=153)
    effect = EffectColorScheme(_colors(left, right), transition=10)

    outcome = await effect.run(ctx)

    assert outcome is EffectOutcome.COMPLETED
    sent = commands()
    assert len(sent) == 4
    for fixture_id, state in ((4, left), (5, right)):
        per_strip = [s for fid, s in sent if fid == fixture_id]
        assert per_strip == [EFFECT_OFF, state.merge(effect="none", transition=10)]
    bridge.create_scene.assert_not_awaited()


async def test_apply_colors_starts_effect_after_transition(ctx, commands) -> None:
    """Test a colorloop is requested only once the color transition ended."""
    rainbow = _scheme("rainbow")
    effect = EffectColorScheme(
        ResolvedColors(
            left=rainbow.settings[0], right=rainbow.settings[1], names=("rgb", "rgb")
        ),
        transition=20,
    )

    loop = asyncio.get_running_loop()
    start = loop.time()
    await effect.run(ctx)
    elapsed = loop.time() - start

    sent = commands()
    assert sent[-2:] == [
        (4, LightState(effect="colorloop")),
        (5, LightState(effect="colorloop")),
    ]
    assert elapsed >= 0.019


def test_color_scheme_validation() -> None:
    """Test a scheme needs one or two settings."""
    with pytest.raises(ValueError, match="1 or 2 settings"):
        ColorScheme.create(["none"], [])
    with pytest.raises(ValueError, match="1 or 2 settings"):
        ColorScheme.create(["many"], [{"on": True}] * 3)


def test_color_scheme_deduplicates_keywords() -> None:
    scheme = ColorScheme.create(["Red", "red", "crimson"], [{"on": True}])

    assert scheme.keywords == ("red", "crimson")
