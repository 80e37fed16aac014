from __future__ import annotations

import threading

from menu_admin.board import MenuBoard, records_to_items
from menu_admin.store.memory import InMemoryMenuStore


def test_records_to_items_injects_ids_and_skips_bad_records() -> None:
    items = records_to_items(
        {
            "a": {"name": "Soup", "price": "4.5"},
            "b": "not a record",
            "c": {"name": "Tea", "stock": "3"},
        }
    )

    assert [(item.id, item.name) for item in items] == [("a", "Soup"), ("c", "Tea")]
    assert items[0].price == 4.5
    assert items[1].stock == 3


def test_records_to_items_treats_missing_collection_as_empty() -> None:
    assert records_to_items(None) == []
    assert records_to_items(["Soup"]) == []


def test_attach_follows_the_store_until_released(seeded_store: InMemoryMenuStore) -> None:
    board = MenuBoard("menu")

    with board.attach(seeded_store) as subscription:
        assert board.subscription is subscription
        assert [item.id for item in board.projection.items] == ["item-1", "item-2", "item-3"]

        seeded_store.remove_by_id("menu", "item-2")
        assert [item.id for item in board.projection.items] == ["item-1", "item-3"]

    assert subscription.closed is True
    assert board.subscription is None
    assert seeded_store.listener_count("menu") == 0

    seeded_store.remove_by_id("menu", "item-1")
    assert [item.id for item in board.projection.items] == ["item-1", "item-3"]


def test_attach_hands_snapshots_to_dispatch(memory_store: InMemoryMenuStore) -> None:
    board = MenuBoard("menu")
    queued: list = []

    with board.attach(memory_store, dispatch=queued.append):
        memory_store.create("menu", {"name": "Soup"})
        assert board.projection.items == []

        for apply in queued:
            apply()

    assert [item.name for item in board.projection.items] == ["Soup"]


def test_late_snapshot_does_not_overwrite_newer_one(memory_store: InMemoryMenuStore) -> None:
    board = MenuBoard("menu")
    queued: list = []

    with board.attach(memory_store, dispatch=queued.append):
        memory_store.create("menu", {"name": "Soup"})
        memory_store.create("menu", {"name": "Tea"})

    results = [apply() for apply in reversed(queued)]

    assert results == [True, False, False]
    assert board.projection.generation == 2
    assert sorted(item.name for item in board.projection.items) == ["Soup", "Tea"]


def test_snapshot_keeps_sort_state_but_not_order(seeded_store: InMemoryMenuStore) -> None:
    board = MenuBoard("menu")

    with board.attach(seeded_store):
        board.projection.sort_by("name")
        assert [item.name for item in board.projection.items] == [
            "adobo",
            "Halo-Halo",
            "Pancit Canton",
        ]

        seeded_store.update_by_id("menu", "item-3", {"stock": 11})

        assert board.projection.indicator_for("name") == "↑"
        assert [item.name for item in board.projection.items] == [
            "Pancit Canton",
            "adobo",
            "Halo-Halo",
        ]


def test_concurrent_writes_keep_the_newest_snapshot(memory_store: InMemoryMenuStore) -> None:
    board = MenuBoard("menu")
    soup_delivered = threading.Event()
    tea_applied = threading.Event()

    def dispatch(apply) -> None:
        name = threading.current_thread().name
        if name == "create-soup":
            soup_delivered.set()
            tea_applied.wait(timeout=5)
        apply()
        if name == "create-tea":
            tea_applied.set()

    soup = threading.Thread(
        target=memory_store.create, args=("menu", {"name": "Soup"}), name="create-soup"
    )
    tea = threading.Thread(
        target=memory_store.create, args=("menu", {"name": "Tea"}), name="create-tea"
    )

    with board.attach(memory_store, dispatch=dispatch):
        soup.start()
        assert soup_delivered.wait(timeout=5)
        tea.start()
        tea.join(timeout=5)
        soup.join(timeout=5)

    assert sorted(item.name for item in board.projection.items) == ["Soup", "Tea"]
    assert board.projection.generation == 2
