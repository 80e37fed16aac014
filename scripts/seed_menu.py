from __future__ import annotations

import json
import sys
from pathlib import Path

import structlog
from pydantic import ValidationError

from menu_admin.core.config import settings
from menu_admin.core.errors import StoreError
from menu_admin.core.logging import configure_logging
from menu_admin.forms.item_form import validate_price_cost
from menu_admin.forms.models import MenuItemDraft
from menu_admin.store.base import MenuStoreAdapter
from menu_admin.store.factory import build_store

DEFAULT_MENU_PATH = Path("data/menu.json")

logger = structlog.get_logger(__name__)


def _load_menu(path: Path) -> list[MenuItemDraft]:
    data = json.loads(path.read_text(encoding="utf-8"))
    drafts: list[MenuItemDraft] = []
    for index, entry in enumerate(data, start=1):
        try:
            drafts.append(MenuItemDraft.model_validate(entry))
        except ValidationError as exc:
            logger.warning("seed_entry_invalid", index=index, error=str(exc))
    return drafts


def seed_menu(
    store: MenuStoreAdapter,
    collection: str = settings.menu_collection,
    menu_path: Path = DEFAULT_MENU_PATH,
) -> list[str]:
    created: list[str] = []
    for draft in _load_menu(menu_path):
        if not validate_price_cost(draft):
            logger.warning("seed_entry_rejected", name=draft.name, price=draft.price, cost=draft.cost)
            continue
        try:
            created.append(store.create(collection, draft.to_record()))
        except StoreError as exc:
            logger.error("seed_entry_failed", name=draft.name, error=str(exc))
    logger.info("seed_finished", collection=collection, created=len(created))
    return created


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if settings.store_backend == "memory":
        logger.warning(
            "seed_skipped",
            reason="memory backend is not persisted",
            hint="set STORE_BACKEND=realtime_db",
        )
        return 1
    path = Path(args[0]) if args else DEFAULT_MENU_PATH
    seed_menu(build_store(), menu_path=path)
    return 0


if __name__ == "__main__":
    configure_logging(
        settings.log_level,
        service=settings.app_name,
        environment=settings.environment,
        store_backend=settings.store_backend,
    )
    sys.exit(main())
