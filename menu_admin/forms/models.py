from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, Field, field_validator

CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")


def _sanitize_text(value: str, max_length: int) -> str:
    cleaned = CONTROL_CHARS_RE.sub("", value.strip())
    if not cleaned:
        raise ValueError("Value must not be empty")
    if len(cleaned) > max_length:
        raise ValueError("Value is too long")
    return cleaned


def _sanitize_optional_text(value: str | None, max_length: int) -> str | None:
    if value is None or not value.strip():
        return None
    return _sanitize_text(value, max_length)


class MenuItemDraft(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    category: str = Field(..., min_length=1, max_length=80)
    options: str | None = None
    price: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    cost: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    stock: int = Field(default=0, ge=0)

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, value: Any) -> Any:
        return _sanitize_text(value, 120) if isinstance(value, str) else value

    @field_validator("category", mode="before")
    @classmethod
    def validate_category(cls, value: Any) -> Any:
        return _sanitize_text(value, 80) if isinstance(value, str) else value

    @field_validator("options", mode="before")
    @classmethod
    def validate_options(cls, value: Any) -> Any:
        return _sanitize_optional_text(value, 500) if isinstance(value, str) else value

    @field_validator("price", "cost", mode="before")
    @classmethod
    def blank_amount_is_missing(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def to_record(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "category": self.category,
            "options": self.options or "",
            "price": self.price or 0,
            "cost": self.cost or 0,
            "stock": self.stock,
        }
