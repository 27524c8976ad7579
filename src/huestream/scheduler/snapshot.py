"""Scene snapshot store.

Effects borrow the fixtures: before they start, the current state of every
managed fixture is saved into a bridge scene, and the scene is activated
again once they are done.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from huestream.const import SAVED_SCENE_NAME

if TYPE_CHECKING:
    from huestream.bridge.client import HueBridge

_LOGGER = logging.getLogger(__name__)

DeferredAction = Callable[[], Awaitable[Any]]


@dataclass(frozen=True)
class SceneSnapshot:
    """Saved composite state of the managed fixtures.

    Attributes:
        scene_id: Handle assigned by the bridge
        name: Scene name
        fixture_ids: Fixtures captured by the scene
    """

    scene_id: str
    name: str
    fixture_ids: tuple[int, ...]


class SceneSnapshotStore:
    """Holds at most one live snapshot, process-wide.

    save() is idempotent while a snapshot is live, so chained effects all
    return to the state that existed before the first of them started.
    A color change requested while a snapshot is live is deferred with
    defer() and applied right after the snapshot is restored, otherwise the
    restore would overwrite it.

    Example:
        ```python
        store = SceneSnapshotStore(bridge, [1, 2, 3])
        await store.save()
        ...  # borrow the fixtures
        await store.restore()
        ```
    """

    def __init__(
        self,
        bridge: HueBridge,
        fixture_ids: Sequence[int | None],
        name: str = SAVED_SCENE_NAME,
    ) -> None:
        """Initialize the store.

        Args:
            bridge: Bridge client persisting and activating the scenes
            fixture_ids: Managed fixtures; absent (None) slots are skipped
            name: Name given to the saved scenes
        """
        self._bridge = bridge
        self._fixture_ids = tuple(fid for fid in fixture_ids if fid is not None)
        self._name = name
        self._live: SceneSnapshot | None = None
        self._deferred: DeferredAction | None = None

    @property
    def live(self) -> SceneSnapshot | None:
        """The snapshot waiting to be restored, if any."""
        return self._live

    @property
    def is_live(self) -> bool:
        return self._live is not None

    @property
    def deferred(self) -> DeferredAction | None:
        """The action to run after the next restore, if any."""
        return self._deferred

    async def save(self) -> SceneSnapshot | None:
        """Capture the current fixture states unless a snapshot is live.

        Returns:
            The live snapshot, or None when no fixture is managed
        """
        if self._live is not None:
            _LOGGER.debug(
                {
                    "class": self.__class__.__name__,
                    "method": "save",
                    "action": "reuse",
                    "values": {"scene_id": self._live.scene_id},
                }
            )
            return self._live

        if not self._fixture_ids:
            return None

        scene_id = await self._bridge.create_scene(self._name, self._fixture_ids)
        self._live = SceneSnapshot(
            scene_id=scene_id, name=self._name, fixture_ids=self._fixture_ids
        )
        _LOGGER.debug(
            {
                "class": self.__class__.__name__,
                "method": "save",
                "action": "capture",
                "values": {"scene_id": scene_id, "fixtures": list(self._fixture_ids)},
            }
        )
        return self._live

    async def restore(self) -> bool:
        """Apply the live snapshot, discard it and run the deferred action.

        Returns:
            True if a snapshot was restored, False if none was live
        """
        snapshot = self._live
        if snapshot is None:
            return False

        await self._bridge.activate_scene(snapshot.scene_id)
        self._live = None
        deferred, self._deferred = self._deferred, None
        _LOGGER.debug(
            {
                "class": self.__class__.__name__,
                "method": "restore",
                "action": "activate",
                "values": {
                    "scene_id": snapshot.scene_id,
                    "deferred": deferred is not None,
                },
            }
        )

        try:
            # Scenes are single use
            await self._bridge.delete_scene(snapshot.scene_id)
        finally:
            if deferred is not None:
                await deferred()
        return True

    def defer(self, action: DeferredAction) -> None:
        """Register an action to run right after the next restore.

        A later registration replaces an earlier one that has not run yet.
        """
        if self._deferred is not None:
            _LOGGER.debug(
                {
                    "class": self.__class__.__name__,
                    "method": "defer",
                    "action": "replace",
                }
            )
        self._deferred = action

    def __repr__(self) -> str:
        scene_id = self._live.scene_id if self._live else None
        return f"SceneSnapshotStore(live={scene_id}, deferred={self._deferred is not None})"
