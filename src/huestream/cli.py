"""Command-line interface for huestream."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from huestream.bot import HueBot
from huestream.config import load_config
from huestream.exceptions import ConfigError

_LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config.toml")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="huestream",
        description="Play Philips Hue light effects on Twitch chat commands and stream events.",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to the TOML configuration file (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log every bridge request and effect phase",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the bot until interrupted.

    Args:
        argv: Command-line arguments, sys.argv if None

    Returns:
        Exit code (0 on interrupt, 2 on invalid configuration)
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )

    try:
        config = load_config(args.config)
    except ConfigError as e:
        _LOGGER.error({"method": "main", "action": "config", "error": str(e)})
        return 2

    try:
        asyncio.run(HueBot(config).run())
    except KeyboardInterrupt:
        _LOGGER.info({"method": "main", "action": "interrupted"})
    return 0
