from __future__ import annotations

from enum import Enum

import anyio
import structlog
from pydantic import BaseModel

from menu_admin.core.config import settings
from menu_admin.core.errors import StoreError
from menu_admin.forms.models import MenuItemDraft
from menu_admin.store.base import MenuItem, MenuStoreAdapter

logger = structlog.get_logger(__name__)

PRICE_COST_MESSAGE = "Price must be greater than Cost."


class FormOutcome(str, Enum):
    saved = "saved"
    updated = "updated"
    rejected = "rejected"
    failed = "failed"


class FormResult(BaseModel):
    status: FormOutcome
    item_id: str | None = None
    detail: str | None = None


def validate_price_cost(draft: MenuItemDraft) -> bool:
    """Creation rule: price must exceed cost when both are given.

    Missing (or zero) values pass and are stored as 0.
    """
    if draft.price and draft.cost and draft.price <= draft.cost:
        return False
    return True


class ItemForm:
    """Add/edit dialog state and submission.

    Edits are written without the price/cost check; only creation runs it.
    """

    def __init__(self) -> None:
        self.open = False
        self.selected_item: MenuItem | None = None
        self.validation_error = ""

    @property
    def title(self) -> str:
        return "Edit Item" if self.selected_item else "Add New Item"

    def open_for_create(self) -> None:
        self.selected_item = None
        self.validation_error = ""
        self.open = True

    def open_for_edit(self, item: MenuItem) -> None:
        self.selected_item = item
        self.validation_error = ""
        self.open = True

    def close(self) -> None:
        self.open = False
        self.selected_item = None

    async def submit(
        self,
        draft: MenuItemDraft,
        store: MenuStoreAdapter,
        collection: str | None = None,
    ) -> FormResult:
        collection = collection or settings.menu_collection
        record = draft.to_record()

        if self.selected_item is not None and self.selected_item.id:
            item_id = self.selected_item.id
            try:
                await anyio.to_thread.run_sync(store.update_by_id, collection, item_id, record)
            except StoreError as exc:
                logger.error(
                    "menu_item_update_failed",
                    item_id=item_id,
                    service=exc.service,
                    status_code=exc.status_code,
                    error=str(exc),
                )
                return FormResult(status=FormOutcome.failed, item_id=item_id)
            logger.info("menu_item_updated", item_id=item_id)
            self.close()
            return FormResult(status=FormOutcome.updated, item_id=item_id)

        if not validate_price_cost(draft):
            self.validation_error = PRICE_COST_MESSAGE
            logger.info("menu_item_rejected", price=draft.price, cost=draft.cost)
            return FormResult(status=FormOutcome.rejected, detail=PRICE_COST_MESSAGE)

        try:
            item_id = await anyio.to_thread.run_sync(store.create, collection, record)
        except StoreError as exc:
            logger.error(
                "menu_item_create_failed",
                service=exc.service,
                status_code=exc.status_code,
                error=str(exc),
            )
            return FormResult(status=FormOutcome.failed)
        logger.info("menu_item_saved", item_id=item_id)
        self.close()
        self.validation_error = ""
        return FormResult(status=FormOutcome.saved, item_id=item_id)
