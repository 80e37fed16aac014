from __future__ import annotations

from typing import Any

from menu_admin.core.errors import StoreError
from menu_admin.store.base import MenuStoreAdapter
from menu_admin.store.memory import InMemoryMenuStore


class FailingMenuStore(InMemoryMenuStore):
    """In-memory store whose writes fail like a rejected backend call."""

    def create(self, collection: str, record: dict[str, Any]) -> str:
        raise StoreError("realtime_db", "Permission denied", status_code=401)

    def update_by_id(self, collection: str, item_id: str, record: dict[str, Any]) -> None:
        raise StoreError("realtime_db", "Permission denied", status_code=401)

    def remove_by_id(self, collection: str, item_id: str) -> None:
        raise StoreError("realtime_db", "Permission denied", status_code=401)


class SnapshotRecorder:
    """Snapshot callback that keeps every delivery."""

    def __init__(self) -> None:
        self.snapshots: list[dict[str, Any] | None] = []
        self.versions: list[int] = []

    def __call__(self, records: dict[str, Any] | None, version: int) -> None:
        self.snapshots.append(records)
        self.versions.append(version)


def read_collection(store: MenuStoreAdapter, collection: str = "menu") -> dict[str, Any] | None:
    recorder = SnapshotRecorder()
    with store.subscribe(collection, recorder):
        pass
    return recorder.snapshots[0]
