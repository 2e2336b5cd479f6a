"""
Document stores with change notification.

A document store keeps JSON documents under a (collection, id) key and pushes
every new version to the watchers of that key. The shared store persists to a
SQL database through SQLAlchemy; the local store keeps the document inside
one client's local slot.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-10-19
"""

import json
import logging
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from database import MapDocument, create_session_factory
from logic.config import LOCAL_DATA_KEY
from logic.local_slot import LocalSlot

logger = logging.getLogger(__name__)

DocumentKey = Tuple[str, str]


class DocumentStoreError(Exception):
    """Raised when the document store cannot serve a request."""


class Snapshot(NamedTuple):
    """One version of a document; content is None if it does not exist."""

    content: Optional[Dict[str, Any]]
    revision: int

    @property
    def exists(self) -> bool:
        return self.content is not None


SnapshotCallback = Callable[[Snapshot], None]
ErrorCallback = Callable[[Exception], None]


class Watch:
    """Handle for one live subscription to a document."""

    def __init__(self, store: "DocumentStore", key: DocumentKey,
                 on_snapshot: SnapshotCallback, on_error: ErrorCallback):
        self.store = store
        self.key = key
        self.on_snapshot = on_snapshot
        self.on_error = on_error
        self.active = True

    def close(self):
        if self.active:
            self.active = False
            self.store._remove_watch(self)


class DocumentStore:
    """Base class holding the watcher bookkeeping.

    Subclasses implement _read and _write.
    """

    name = "abstract"

    def __init__(self):
        self._watches: Dict[DocumentKey, List[Watch]] = {}
        self.closed = False

    def _read(self, key: DocumentKey) -> Snapshot:
        raise NotImplementedError

    def _write(self, key: DocumentKey, content: Dict[str, Any]) -> int:
        raise NotImplementedError

    def _check_open(self):
        if self.closed:
            raise DocumentStoreError(f"{self.name} document store is closed")

    def get(self, key: DocumentKey) -> Snapshot:
        self._check_open()
        return self._read(key)

    def set(self, key: DocumentKey, content: Dict[str, Any]) -> int:
        """Overwrite a document and notify its watchers.

        Args:
            key: (collection, document id).
            content: New document body.

        Returns:
            Revision of the written document.
        """
        self._check_open()
        revision = self._write(key, content)
        snapshot = Snapshot(json.loads(json.dumps(content)), revision)
        for watch in list(self._watches.get(key, [])):
            self._deliver(watch, snapshot)
        return revision

    def watch(self, key: DocumentKey, on_snapshot: SnapshotCallback,
              on_error: ErrorCallback) -> Watch:
        """Subscribe to a document.

        The current version is delivered before this returns, then every
        later write.

        Returns:
            Watch handle; close it to stop deliveries.

        Raises:
            DocumentStoreError: If the store is closed or unreadable.
        """
        snapshot = self.get(key)
        watch = Watch(self, key, on_snapshot, on_error)
        self._watches.setdefault(key, []).append(watch)
        self._deliver(watch, snapshot)
        return watch

    def _deliver(self, watch: Watch, snapshot: Snapshot):
        if not watch.active:
            return
        try:
            watch.on_snapshot(snapshot)
        except Exception:
            logger.exception("Watcher of %s/%s failed", *watch.key)

    def _remove_watch(self, watch: Watch):
        watches = self._watches.get(watch.key, [])
        if watch in watches:
            watches.remove(watch)
        if not watches:
            self._watches.pop(watch.key, None)

    def close(self):
        """Close the store, interrupting any remaining watches."""
        if self.closed:
            return
        self.closed = True
        error = DocumentStoreError(f"{self.name} document store closed")
        for watches in list(self._watches.values()):
            for watch in list(watches):
                watch.active = False
                watch.on_error(error)
        self._watches.clear()


class SqlDocumentStore(DocumentStore):
    """Shared document store persisted with SQLAlchemy."""

    name = "remote"

    def __init__(self, database_url: str):
        super().__init__()
        self.engine, self.SessionLocal = create_session_factory(database_url)

    def _read(self, key: DocumentKey) -> Snapshot:
        collection, document_id = key
        db = self.SessionLocal()
        try:
            row = (
                db.query(MapDocument)
                .filter_by(collection=collection, document_id=document_id)
                .first()
            )
            if row is None:
                return Snapshot(None, 0)
            return Snapshot(json.loads(row.content), row.revision)
        except (SQLAlchemyError, json.JSONDecodeError) as e:
            raise DocumentStoreError(f"Error reading {collection}/{document_id}: {e}") from e
        finally:
            db.close()

    def _write(self, key: DocumentKey, content: Dict[str, Any]) -> int:
        collection, document_id = key
        db = self.SessionLocal()
        try:
            row = (
                db.query(MapDocument)
                .filter_by(collection=collection, document_id=document_id)
                .first()
            )
            if row is None:
                row = MapDocument(collection=collection, document_id=document_id, revision=0)
                db.add(row)
            row.content = json.dumps(content, ensure_ascii=False)
            row.revision = (row.revision or 0) + 1
            db.commit()
            return row.revision
        except SQLAlchemyError as e:
            db.rollback()
            raise DocumentStoreError(f"Error writing {collection}/{document_id}: {e}") from e
        finally:
            db.close()

    def close(self):
        super().close()
        self.engine.dispose()


class LocalDocumentStore(DocumentStore):
    """Document store kept inside one client's local slot.

    Every key maps to the same slot entry; the local variant holds a single
    document.
    """

    name = "local"

    def __init__(self, slot: LocalSlot):
        super().__init__()
        self.slot = slot

    def _read(self, key: DocumentKey) -> Snapshot:
        entry = self.slot.get(LOCAL_DATA_KEY)
        if not isinstance(entry, dict) or not isinstance(entry.get("content"), dict):
            return Snapshot(None, 0)
        return Snapshot(entry["content"], int(entry.get("revision", 0)))

    def _write(self, key: DocumentKey, content: Dict[str, Any]) -> int:
        revision = self._read(key).revision + 1
        try:
            self.slot.set(LOCAL_DATA_KEY, {"revision": revision, "content": content})
        except OSError as e:
            raise DocumentStoreError(f"Error writing local slot {self.slot.path}: {e}") from e
        return revision
