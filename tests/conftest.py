from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from menu_admin import main
from menu_admin.board import MenuBoard
from menu_admin.store.base import MenuStoreAdapter
from menu_admin.store.memory import InMemoryMenuStore
from tests.helpers import FailingMenuStore, read_collection


@pytest.fixture()
def memory_store() -> InMemoryMenuStore:
    return InMemoryMenuStore()


@pytest.fixture()
def seeded_store() -> InMemoryMenuStore:
    return InMemoryMenuStore(
        {
            "menu": {
                "item-1": {
                    "name": "Pancit Canton",
                    "category": "Noodles",
                    "options": "Regular, Large",
                    "price": 6,
                    "cost": 2,
                    "stock": 30,
                },
                "item-2": {"name": "adobo", "category": "Rice Meals", "price": 8.5, "stock": 5},
                "item-3": {"name": "Halo-Halo", "category": "Desserts", "cost": 1.5, "stock": 12},
            }
        }
    )


def _client_for(monkeypatch: pytest.MonkeyPatch, store: MenuStoreAdapter):
    monkeypatch.setattr(main, "store", store)
    monkeypatch.setattr(main, "board", MenuBoard("menu"))
    monkeypatch.setattr(main.limiter, "enabled", False)
    return TestClient(main.app)


@pytest.fixture()
def client(monkeypatch: pytest.MonkeyPatch, memory_store: InMemoryMenuStore):
    with _client_for(monkeypatch, memory_store) as test_client:
        yield test_client


@pytest.fixture()
def seeded_client(monkeypatch: pytest.MonkeyPatch, seeded_store: InMemoryMenuStore):
    with _client_for(monkeypatch, seeded_store) as test_client:
        yield test_client


@pytest.fixture()
def failing_client(monkeypatch: pytest.MonkeyPatch, seeded_store: InMemoryMenuStore):
    store = FailingMenuStore({"menu": read_collection(seeded_store)})
    with _client_for(monkeypatch, store) as test_client:
        yield test_client
