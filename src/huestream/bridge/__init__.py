"""Hue bridge client."""

from __future__ import annotations

from huestream.bridge.client import HueBridge, discover_bridge

__all__ = ["HueBridge", "discover_bridge"]
