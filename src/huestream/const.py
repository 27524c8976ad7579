"""Constants shared across huestream."""

from __future__ import annotations

from typing import Final

# The maximum number of requests the Hue bridge can perform per second
MAX_REQUESTS_PER_SECOND: Final[int] = 10

# Supported key light temperature range, in Kelvin
KELVIN_MIN: Final[int] = 2000
KELVIN_MAX: Final[int] = 6500

# Color temperature range accepted by the bridge, in mireds
MIRED_MIN: Final[int] = 153
MIRED_MAX: Final[int] = 500

BRIGHTNESS_MIN: Final[int] = 1
BRIGHTNESS_MAX: Final[int] = 254

# Name given to the scene holding the pre-effect light states
SAVED_SCENE_NAME: Final[str] = "Twitch Hue Bot saved scene"

# Named effect mode meaning "no effect"
EFFECT_NONE: Final[str] = "none"

# Milliseconds
DEFAULT_COLOR_TRANSITION: Final[int] = 1000
RESET_TRANSITION: Final[int] = 100
SELF_TEST_BLINK_TRANSITION: Final[int] = 250

# Seconds
SELF_TEST_PAUSE: Final[float] = 1.5
STARTUP_RETRY_DELAY: Final[float] = 10.0

SELF_TEST_BLINKS: Final[int] = 6

# Thresholds for stream notification effects
SUB_GIFT_BATCH_THRESHOLD: Final[int] = 5
BITS_EFFECT_THRESHOLD: Final[int] = 1000

# Twitch chat (IRC) endpoint
TWITCH_IRC_HOST: Final[str] = "irc.chat.twitch.tv"
TWITCH_IRC_PORT: Final[int] = 6667

# Hue bridge discovery endpoint
HUE_DISCOVERY_URL: Final[str] = "https://discovery.meethue.com/"
