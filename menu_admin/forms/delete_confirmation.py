from __future__ import annotations

import anyio
import structlog

from menu_admin.core.config import settings
from menu_admin.core.errors import StoreError
from menu_admin.store.base import MenuStoreAdapter

logger = structlog.get_logger(__name__)


class DeleteConfirmation:
    def __init__(self) -> None:
        self.open = False
        self.item_id = ""

    def request(self, item_id: str) -> None:
        self.item_id = item_id
        self.open = True

    def cancel(self) -> None:
        self.open = False
        self.item_id = ""

    async def confirm(self, store: MenuStoreAdapter, collection: str | None = None) -> bool:
        if not self.open or not self.item_id:
            return False
        collection = collection or settings.menu_collection
        item_id = self.item_id
        self.cancel()
        try:
            await anyio.to_thread.run_sync(store.remove_by_id, collection, item_id)
        except StoreError as exc:
            logger.error(
                "menu_item_delete_failed",
                item_id=item_id,
                service=exc.service,
                status_code=exc.status_code,
                error=str(exc),
            )
            return False
        logger.info("menu_item_deleted", item_id=item_id)
        return True
