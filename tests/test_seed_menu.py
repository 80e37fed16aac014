from __future__ import annotations

import json
from pathlib import Path

from menu_admin.core.config import settings
from menu_admin.store.memory import InMemoryMenuStore
from scripts import seed_menu as seed_script
from scripts.seed_menu import DEFAULT_MENU_PATH, seed_menu
from tests.helpers import FailingMenuStore, read_collection


def _write_menu(tmp_path: Path, entries: list) -> Path:
    path = tmp_path / "menu.json"
    path.write_text(json.dumps(entries), encoding="utf-8")
    return path


def test_seed_skips_invalid_and_rejected_entries(tmp_path: Path) -> None:
    path = _write_menu(
        tmp_path,
        [
            {"name": "Adobo", "category": "Rice Meals", "price": 8.5, "cost": 3, "stock": 10},
            {"name": "Lugaw", "category": "Soups", "price": 2, "cost": 4},
            {"category": "Drinks", "price": 2},
            {"name": "Turon", "category": "Desserts", "price": 3},
        ],
    )
    store = InMemoryMenuStore()

    created = seed_menu(store, "menu", path)

    assert len(created) == 2
    records = read_collection(store)
    assert sorted(record["name"] for record in records.values()) == ["Adobo", "Turon"]
    assert records[created[1]]["cost"] == 0


def test_seed_logs_store_failures(tmp_path: Path) -> None:
    path = _write_menu(tmp_path, [{"name": "Adobo", "category": "Rice Meals", "price": 8}])

    assert seed_menu(FailingMenuStore(), "menu", path) == []


def test_bundled_menu_is_valid() -> None:
    root = Path(__file__).resolve().parents[1]
    store = InMemoryMenuStore()

    created = seed_menu(store, "menu", root / DEFAULT_MENU_PATH)

    assert len(created) == 5


def test_main_refuses_memory_backend(monkeypatch) -> None:
    built: list[str] = []
    monkeypatch.setattr(settings, "store_backend", "memory")
    monkeypatch.setattr(seed_script, "build_store", lambda: built.append("store"))

    assert seed_script.main([]) == 1
    assert built == []


def test_main_seeds_configured_store(tmp_path: Path, monkeypatch) -> None:
    path = _write_menu(tmp_path, [{"name": "Adobo", "category": "Rice Meals", "price": 8}])
    store = InMemoryMenuStore()
    monkeypatch.setattr(settings, "store_backend", "realtime_db")
    monkeypatch.setattr(seed_script, "build_store", lambda: store)

    assert seed_script.main([str(path)]) == 0
    assert [record["name"] for record in read_collection(store).values()] == ["Adobo"]
