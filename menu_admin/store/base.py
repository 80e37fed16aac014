from __future__ import annotations

import math
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

# Receives the whole collection (None when empty) and a version number that
# grows with every change the store captures.
SnapshotCallback = Callable[[dict[str, Any] | None, int], None]


def coerce_number(value: Any) -> float:
    """Coerce a stored value to a number; anything non-numeric counts as 0."""
    if isinstance(value, bool):
        return float(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number):
        return 0.0
    return number


class MenuItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    name: str = ""
    category: str = ""
    options: str | None = None
    price: float = 0
    cost: float = 0
    stock: int = 0

    @field_validator("name", "category", mode="before")
    @classmethod
    def validate_text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("options", mode="before")
    @classmethod
    def validate_options(cls, value: Any) -> str | None:
        return None if value is None else str(value)

    @field_validator("price", "cost", mode="before")
    @classmethod
    def validate_amount(cls, value: Any) -> float:
        return coerce_number(value) or 0

    @field_validator("stock", mode="before")
    @classmethod
    def validate_stock(cls, value: Any) -> int:
        number = coerce_number(value)
        if math.isinf(number):
            return 0
        return int(number)


class Subscription:
    """Handle for one snapshot listener; closing it stops delivery."""

    def __init__(self, collection: str, on_close: Callable[[], None]) -> None:
        self.collection = collection
        self._on_close = on_close
        self.closed = False

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._on_close()

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class MenuStoreAdapter(ABC):
    @abstractmethod
    def subscribe(self, collection: str, on_snapshot: SnapshotCallback) -> Subscription:
        raise NotImplementedError

    def unsubscribe(self, subscription: Subscription) -> None:
        subscription.close()

    @abstractmethod
    def create(self, collection: str, record: dict[str, Any]) -> str:
        raise NotImplementedError

    @abstractmethod
    def update_by_id(self, collection: str, item_id: str, record: dict[str, Any]) -> None:
        raise NotImplementedError

    @abstractmethod
    def remove_by_id(self, collection: str, item_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def check_health(self) -> None:
        raise NotImplementedError
