"""Action scheduling: serialized queue, cancellation and shared state."""

from __future__ import annotations

from huestream.scheduler.cancellation import CancellationToken
from huestream.scheduler.context import SchedulerContext
from huestream.scheduler.gifts import SubGiftCounter
from huestream.scheduler.queue import Action, ActionQueue
from huestream.scheduler.snapshot import SceneSnapshot, SceneSnapshotStore

__all__ = [
    "Action",
    "ActionQueue",
    "CancellationToken",
    "SceneSnapshot",
    "SceneSnapshotStore",
    "SchedulerContext",
    "SubGiftCounter",
]
