from __future__ import annotations

import copy
import threading
import uuid
from typing import Any

import structlog

from menu_admin.store.base import MenuStoreAdapter, SnapshotCallback, Subscription

logger = structlog.get_logger(__name__)


class InMemoryMenuStore(MenuStoreAdapter):
    def __init__(self, collections: dict[str, dict[str, dict[str, Any]]] | None = None) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {
            name: copy.deepcopy(records) for name, records in (collections or {}).items()
        }
        self._listeners: dict[str, list[tuple[Subscription, SnapshotCallback]]] = {}
        self._lock = threading.Lock()
        self._version = 0

    def subscribe(self, collection: str, on_snapshot: SnapshotCallback) -> Subscription:
        subscription = Subscription(
            collection, on_close=lambda: self._detach(collection, subscription)
        )
        with self._lock:
            self._listeners.setdefault(collection, []).append((subscription, on_snapshot))
            snapshot = self._snapshot(collection)
            version = self._version
        logger.info("menu_subscription_attached", collection=collection)
        on_snapshot(snapshot, version)
        return subscription

    def create(self, collection: str, record: dict[str, Any]) -> str:
        item_id = uuid.uuid4().hex
        with self._lock:
            self._collections.setdefault(collection, {})[item_id] = copy.deepcopy(record)
        self._notify(collection)
        return item_id

    def update_by_id(self, collection: str, item_id: str, record: dict[str, Any]) -> None:
        with self._lock:
            existing = self._collections.setdefault(collection, {}).setdefault(item_id, {})
            for key, value in record.items():
                if value is None:
                    existing.pop(key, None)
                else:
                    existing[key] = copy.deepcopy(value)
        self._notify(collection)

    def remove_by_id(self, collection: str, item_id: str) -> None:
        with self._lock:
            self._collections.get(collection, {}).pop(item_id, None)
        self._notify(collection)

    def check_health(self) -> None:
        return None

    def listener_count(self, collection: str) -> int:
        with self._lock:
            return len(self._listeners.get(collection, []))

    def _detach(self, collection: str, subscription: Subscription) -> None:
        with self._lock:
            listeners = self._listeners.get(collection, [])
            self._listeners[collection] = [
                entry for entry in listeners if entry[0] is not subscription
            ]
        logger.info("menu_subscription_released", collection=collection)

    def _snapshot(self, collection: str) -> dict[str, Any] | None:
        records = self._collections.get(collection)
        if not records:
            return None
        return copy.deepcopy(records)

    def _notify(self, collection: str) -> None:
        with self._lock:
            self._version += 1
            version = self._version
            snapshot = self._snapshot(collection)
            callbacks = [callback for _, callback in self._listeners.get(collection, [])]
        for callback in callbacks:
            callback(copy.deepcopy(snapshot), version)
