from __future__ import annotations

import functools
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any

import structlog
from pydantic import ValidationError

from menu_admin.core.config import settings
from menu_admin.forms.delete_confirmation import DeleteConfirmation
from menu_admin.forms.item_form import ItemForm
from menu_admin.store.base import MenuItem, MenuStoreAdapter, Subscription
from menu_admin.view.projection import MenuProjection

logger = structlog.get_logger(__name__)

Dispatch = Callable[[Callable[[], Any]], Any]


def records_to_items(records: Any) -> list[MenuItem]:
    """Convert a delivered ``{id: record}`` collection into menu items.

    Anything other than a mapping counts as an empty menu.
    """
    if not isinstance(records, Mapping):
        return []
    items: list[MenuItem] = []
    for item_id, record in records.items():
        if not isinstance(record, Mapping):
            logger.warning("menu_record_skipped", item_id=item_id, reason="not_a_mapping")
            continue
        try:
            items.append(MenuItem.model_validate({**record, "id": str(item_id)}))
        except ValidationError as exc:
            logger.warning("menu_record_skipped", item_id=item_id, reason=str(exc))
    return items


class MenuBoard:
    """Menu table state owned by the presentation layer."""

    def __init__(self, collection: str | None = None) -> None:
        self.collection = collection or settings.menu_collection
        self.projection = MenuProjection()
        self.form = ItemForm()
        self.deletion = DeleteConfirmation()
        self.subscription: Subscription | None = None

    def apply_records(self, records: Any, generation: int | None = None) -> bool:
        applied = self.projection.replace_snapshot(records_to_items(records), generation)
        if not applied:
            logger.info("menu_snapshot_discarded", generation=generation)
        return applied

    @contextmanager
    def attach(
        self,
        store: MenuStoreAdapter,
        dispatch: Dispatch | None = None,
    ) -> Iterator[Subscription]:
        """Subscribe to the collection for the duration of the block.

        ``dispatch`` hands each snapshot over to the thread that owns the
        board (for example ``loop.call_soon_threadsafe``); without it the
        snapshot is applied in the delivering thread. The store's version
        number travels with each snapshot so a late delivery cannot replace a
        newer one.
        """

        def on_snapshot(records: dict[str, Any] | None, version: int) -> None:
            if dispatch is None:
                self.apply_records(records, version)
            else:
                dispatch(functools.partial(self.apply_records, records, version))

        self.projection.generation = None
        subscription = store.subscribe(self.collection, on_snapshot)
        self.subscription = subscription
        try:
            yield subscription
        finally:
            store.unsubscribe(subscription)
            self.subscription = None
