import asyncio
import logging
from typing import Optional

from app.sync.coordinator import SyncCoordinator
from app.sync.store import RemoteStore, SqlRemoteStore

logger = logging.getLogger(__name__)


class CoordinatorRegistry:
    """One loaded, feed-subscribed coordinator per owner."""

    def __init__(self, store: Optional[RemoteStore] = None, debounce_ms: Optional[int] = None) -> None:
        self.store = store if store is not None else SqlRemoteStore()
        self.debounce_ms = debounce_ms
        self._coordinators: dict[str, SyncCoordinator] = {}
        self._lock = asyncio.Lock()

    async def get(self, user_id: str) -> SyncCoordinator:
        coordinator = self._coordinators.get(user_id)
        if coordinator is not None:
            return coordinator

        async with self._lock:
            coordinator = self._coordinators.get(user_id)
            if coordinator is None:
                coordinator = SyncCoordinator(self.store, user_id, debounce_ms=self.debounce_ms)
                await coordinator.load()
                await coordinator.start()
                self._coordinators[user_id] = coordinator
                logger.info("coordinator started for user %s", user_id)
        return coordinator

    async def close(self) -> None:
        coordinators, self._coordinators = self._coordinators, {}
        for coordinator in coordinators.values():
            await coordinator.stop()

    def __len__(self) -> int:
        return len(self._coordinators)
