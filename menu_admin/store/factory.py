from __future__ import annotations

from menu_admin.core.config import settings
from menu_admin.store.base import MenuStoreAdapter
from menu_admin.store.memory import InMemoryMenuStore
from menu_admin.store.realtime_db import RealtimeDatabaseStore


def build_store(backend: str | None = None) -> MenuStoreAdapter:
    backend = backend or settings.store_backend
    if backend == "realtime_db":
        return RealtimeDatabaseStore()
    if backend == "memory":
        return InMemoryMenuStore()
    raise ValueError(f"Unknown store backend: {backend}")
