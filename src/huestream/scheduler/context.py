"""Scheduler state shared by every effect."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from huestream.config import FixtureLayout
from huestream.const import SAVED_SCENE_NAME
from huestream.pacing import RatePacer
from huestream.scheduler.gifts import SubGiftCounter
from huestream.scheduler.queue import ActionQueue
from huestream.scheduler.snapshot import SceneSnapshotStore

if TYPE_CHECKING:
    from huestream.bridge.client import HueBridge


@dataclass
class SchedulerContext:
    """The single long-lived scheduler state, passed to every effect.

    Everything here is only mutated from code running inside the action
    queue, which is what makes it safe without locks.

    Attributes:
        bridge: Bridge client executing the fixture commands
        fixtures: Fixture IDs by role
        pacer: Request pacing of the bridge
        queue: Serialized action queue (owns the cancellation token)
        gifts: Pending gift subscription counter
        scene_name: Name of the scenes saved by the snapshot store
        snapshots: Scene snapshot store over every configured fixture
    """

    bridge: HueBridge
    fixtures: FixtureLayout
    pacer: RatePacer = field(default_factory=RatePacer)
    queue: ActionQueue = field(default_factory=ActionQueue)
    gifts: SubGiftCounter = field(default_factory=SubGiftCounter)
    scene_name: str = SAVED_SCENE_NAME
    snapshots: SceneSnapshotStore = field(init=False)

    def __post_init__(self) -> None:
        self.snapshots = SceneSnapshotStore(
            self.bridge, self.fixtures.ordered, name=self.scene_name
        )

    @property
    def aborted(self) -> bool:
        """True while a cancellation is draining through the queue."""
        return self.queue.token.aborted
