"""Allow running the bot with `python -m huestream`."""

from huestream.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
