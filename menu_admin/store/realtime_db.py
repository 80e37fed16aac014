from __future__ import annotations

import itertools
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import firebase_admin
import structlog
from firebase_admin import credentials, db
from firebase_admin.exceptions import FirebaseError

from menu_admin.core.config import settings
from menu_admin.core.errors import StoreError
from menu_admin.store.base import MenuStoreAdapter, SnapshotCallback, Subscription

logger = structlog.get_logger(__name__)

SERVICE_NAME = "realtime_db"
FIREBASE_APP_NAME = "menu-admin"

_app_lock = threading.Lock()


def get_firebase_app() -> firebase_admin.App:
    """Return the service's Firebase app, initializing it on first use.

    A service account file is used when ``FIREBASE_CREDENTIALS_PATH`` is set,
    otherwise Application Default Credentials.
    """
    with _app_lock:
        try:
            return firebase_admin.get_app(FIREBASE_APP_NAME)
        except ValueError:
            pass
        if settings.firebase_credentials_path:
            credential = credentials.Certificate(settings.firebase_credentials_path)
        else:
            credential = credentials.ApplicationDefault()
        app = firebase_admin.initialize_app(
            credential,
            {"databaseURL": settings.database_url, "httpTimeout": settings.store_timeout},
            name=FIREBASE_APP_NAME,
        )
    logger.info("firebase_app_initialized", database_url=settings.database_url)
    return app


@contextmanager
def _store_errors(action: str, path: str) -> Iterator[None]:
    try:
        yield
    except FirebaseError as exc:
        response = exc.http_response
        raise StoreError(
            SERVICE_NAME,
            f"{action} {path} failed: {exc}",
            status_code=response.status_code if response is not None else None,
        ) from exc


class RealtimeDatabaseStore(MenuStoreAdapter):
    """Firebase Realtime Database through the Admin SDK."""

    def __init__(
        self,
        app: firebase_admin.App | None = None,
        collection: str | None = None,
    ) -> None:
        self._app = app
        self.collection = collection or settings.menu_collection

    @property
    def app(self) -> firebase_admin.App:
        if self._app is None:
            self._app = get_firebase_app()
        return self._app

    def reference(self, path: str) -> db.Reference:
        return db.reference(path, app=self.app)

    def subscribe(self, collection: str, on_snapshot: SnapshotCallback) -> Subscription:
        reference = self.reference(collection)
        versions = itertools.count(1)
        closed = threading.Event()

        # Events carry only the changed path, so every event re-reads the
        # whole collection. The SDK calls this from a single listener thread.
        def on_event(event: db.Event) -> None:
            if closed.is_set():
                return
            try:
                records = reference.get()
            except FirebaseError as exc:
                logger.error(
                    "menu_snapshot_read_failed",
                    collection=collection,
                    event_type=event.event_type,
                    error=str(exc),
                )
                return
            if closed.is_set():
                return
            on_snapshot(records if isinstance(records, dict) else None, next(versions))

        with _store_errors("LISTEN", collection):
            registration = reference.listen(on_event)

        def close() -> None:
            closed.set()
            registration.close()
            logger.info("menu_subscription_released", collection=collection)

        logger.info("menu_subscription_attached", collection=collection)
        return Subscription(collection, on_close=close)

    def create(self, collection: str, record: dict[str, Any]) -> str:
        with _store_errors("PUSH", collection):
            return self.reference(collection).push(record).key

    def update_by_id(self, collection: str, item_id: str, record: dict[str, Any]) -> None:
        with _store_errors("UPDATE", f"{collection}/{item_id}"):
            self.reference(collection).child(item_id).update(record)

    def remove_by_id(self, collection: str, item_id: str) -> None:
        with _store_errors("DELETE", f"{collection}/{item_id}"):
            self.reference(collection).child(item_id).delete()

    def check_health(self) -> None:
        with _store_errors("GET", self.collection):
            self.reference(self.collection).get(shallow=True)
