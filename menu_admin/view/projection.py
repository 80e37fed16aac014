from __future__ import annotations

import unicodedata
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any, Literal, get_args

from pydantic import BaseModel

from menu_admin.store.base import MenuItem, coerce_number

SortKey = Literal["name", "category", "options", "price", "cost", "stock"]

SORT_KEYS: tuple[str, ...] = get_args(SortKey)
TEXT_KEYS = frozenset({"name", "category", "options"})
NUMERIC_KEYS = frozenset({"price", "cost", "stock"})


class SortDirection(str, Enum):
    ascending = "ascending"
    descending = "descending"
    none = "none"


class ActiveSort(BaseModel):
    key: SortKey = "name"
    direction: SortDirection = SortDirection.none


def collation_key(value: str | None) -> tuple[str, str, str]:
    """Approximate locale collation: base letters, then accents, then case.

    Lowercase sorts before uppercase when texts differ only by case.
    """
    text = unicodedata.normalize("NFKD", value or "")
    base = "".join(ch for ch in text if not unicodedata.combining(ch))
    accents = "".join(ch for ch in text if unicodedata.combining(ch))
    return base.casefold(), accents, base.swapcase()


def sort_value(item: MenuItem, key: str) -> Any:
    value = getattr(item, key, None)
    if key in TEXT_KEYS:
        return collation_key(value)
    return coerce_number(value)


class MenuProjection:
    """Current display order of the whole menu collection."""

    def __init__(self) -> None:
        self.items: list[MenuItem] = []
        self.active_sort = ActiveSort()
        self.generation: int | None = None

    def replace_snapshot(
        self,
        new_items: Iterable[MenuItem | Mapping[str, Any]],
        generation: int | None = None,
    ) -> bool:
        """Replace ``items`` wholesale in delivery order.

        The active sort is not re-applied. Price and cost are coerced to 0
        when missing. A snapshot carrying a generation older than the last
        applied one is discarded and ``False`` is returned.
        """
        if generation is not None:
            if self.generation is not None and generation < self.generation:
                return False
            self.generation = generation
        items: list[MenuItem] = []
        for item in new_items:
            if not isinstance(item, MenuItem):
                item = MenuItem.model_validate(item)
            items.append(
                item.model_copy(update={"price": item.price or 0, "cost": item.cost or 0})
            )
        self.items = items
        return True

    def sort_by(self, key: SortKey) -> ActiveSort:
        if key not in SORT_KEYS:
            raise ValueError(f"Unknown sort key: {key}")
        direction = SortDirection.ascending
        if (
            self.active_sort.key == key
            and self.active_sort.direction == SortDirection.ascending
        ):
            direction = SortDirection.descending
        self.active_sort = ActiveSort(key=key, direction=direction)
        # sorted() keeps ties in input order for reverse=True as well
        self.items = sorted(
            self.items,
            key=lambda item: sort_value(item, key),
            reverse=direction == SortDirection.descending,
        )
        return self.active_sort

    def indicator_for(self, key: str) -> str:
        if self.active_sort.key != key:
            return ""
        if self.active_sort.direction == SortDirection.ascending:
            return "↑"
        if self.active_sort.direction == SortDirection.descending:
            return "↓"
        return ""

    def indicators(self) -> dict[str, str]:
        return {key: self.indicator_for(key) for key in SORT_KEYS}

    def find(self, item_id: str) -> MenuItem | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None
