from app.sync.coordinator import Snapshot, SyncCoordinator, SyncState
from app.sync.feed import ChangeEvent, ChangeFeed, ChangeSubscription, change_feed, install_orm_listeners
from app.sync.registry import CoordinatorRegistry
from app.sync.store import HABIT_LOGS, HABITS, RemoteStore, SqlRemoteStore

__all__ = [
    "SyncCoordinator",
    "SyncState",
    "Snapshot",
    "ChangeEvent",
    "ChangeFeed",
    "ChangeSubscription",
    "change_feed",
    "install_orm_listeners",
    "CoordinatorRegistry",
    "RemoteStore",
    "SqlRemoteStore",
    "HABITS",
    "HABIT_LOGS",
]
