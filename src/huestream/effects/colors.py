"""Color commands: resolve free text into strip colors and apply them.

Viewers change the strip colors with a chat message such as
"!color cyberpunk", "!color red and blue" or "!color #ff0000 #00ff00".
ColorCommandResolver turns the text into a left and a right light state,
EffectColorScheme applies them.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from huestream.color import LightState, hex_to_rgb
from huestream.const import DEFAULT_COLOR_TRANSITION, EFFECT_NONE
from huestream.effects.base import EffectOutcome, LightEffect
from huestream.exceptions import ColorResolutionError

if TYPE_CHECKING:
    from huestream.config import ColorScheme
    from huestream.scheduler.context import SchedulerContext

_HEX_CODE = re.compile(r"#([0-9a-f]{6})")
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class ResolvedColors:
    """Colors resolved from a color command.

    Attributes:
        left: State of the left strip
        right: State of the right strip
        names: Keyword or hex code each state was resolved from
    """

    left: LightState
    right: LightState
    names: tuple[str, str]

    @property
    def name(self) -> str:
        """Display name of the color scheme."""
        left, right = self.names
        return left if left == right else f"{left} {right}"


class ColorCommandResolver:
    """Resolve free text into the two strip colors.

    Hex codes win over keywords: if the text holds one or two 6-digit hex
    codes they are used, a single code being used for both strips.
    Otherwise every scheme keyword found as a whole word contributes the
    settings of its scheme, ordered by where the keyword appears in the
    text. Schemes made of two settings take priority over single-setting
    ones, which are pushed after them. The first two settings win, one
    setting is duplicated for both strips.

    Example:
        ```python
        resolver = ColorCommandResolver(DEFAULT_COLOR_SCHEMES)
        colors = resolver.resolve("!color red then blue")
        colors.names  # ("red", "blue")
        ```
    """

    def __init__(self, schemes: Iterable[ColorScheme]) -> None:
        self.schemes = tuple(schemes)

    def resolve(self, message: str) -> ResolvedColors:
        """Resolve message into left and right strip states.

        Raises:
            ColorResolutionError: If no hex code and no keyword was found
        """
        text = message.lower()
        found = self._from_hex(text) or self._from_keywords(text)

        if not found:
            raise ColorResolutionError(f"Unknown color scheme: {message!r}")
        if len(found) == 1:
            found.append(found[0])

        # Stable sort: settings of one scheme keep their configured order
        found.sort(key=lambda item: item[0])
        (_, left, left_name), (_, right, right_name) = found[:2]
        return ResolvedColors(left=left, right=right, names=(left_name, right_name))

    @staticmethod
    def _from_hex(text: str) -> list[tuple[int, LightState, str]]:
        codes = _HEX_CODE.findall(text)[:2]
        return [
            (0, LightState(on=True, rgb=hex_to_rgb(code)), f"#{code}") for code in codes
        ]

    def _from_keywords(self, text: str) -> list[tuple[int, LightState, str]]:
        # Spaces on both ends make every keyword a space-delimited token
        text = f" {_WHITESPACE.sub(' ', text).strip()} "
        found: list[tuple[int, LightState, str]] = []
        for scheme in self.schemes:
            for keyword in scheme.keywords:
                position = text.find(f" {keyword} ")
                if position == -1:
                    continue
                order = position + (len(text) if len(scheme.settings) == 1 else 0)
                found.extend((order, setting, keyword) for setting in scheme.settings)
        return found


class EffectColorScheme(LightEffect):
    """Apply resolved colors to the two strips.

    Effect modes are cleared and the colors applied with the configured
    transition. A named effect mode (e.g. "colorloop") is only started once
    the transition is over, since the fixtures drop an effect request made
    during an active transition.

    Attributes:
        colors: Resolved strip colors
        transition: Color transition in milliseconds (default 1000)
    """

    uses_snapshot = False

    def __init__(
        self, colors: ResolvedColors, transition: int = DEFAULT_COLOR_TRANSITION
    ) -> None:
        if transition < 0:
            raise ValueError(f"Transition must be non-negative, got {transition}")
        self.colors = colors
        self.transition = transition

    @property
    def name(self) -> str:
        return f"color scheme {self.colors.name}"

    async def async_play(self, ctx: SchedulerContext) -> EffectOutcome:
        strips = (
            (ctx.fixtures.left_strip, self.colors.left),
            (ctx.fixtures.right_strip, self.colors.right),
        )

        await self.settle(
            (
                self.clear_then_apply(
                    ctx,
                    fixture_id,
                    state.merge(effect=EFFECT_NONE, transition=self.transition),
                )
                for fixture_id, state in strips
            ),
            hold=self.transition / 1000,
        )

        # Start effects after the transition ends
        await self.apply(
            ctx,
            [
                (fixture_id, LightState(effect=state.effect))
                for fixture_id, state in strips
                if state.has_effect
            ],
        )
        return EffectOutcome.COMPLETED

    def __repr__(self) -> str:
        return (
            f"EffectColorScheme(colors={self.colors.name!r}, "
            f"transition={self.transition})"
        )
