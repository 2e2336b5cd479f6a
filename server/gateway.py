"""
Sync gateway.

Bridges a client's overlay dataset to one document in a document store:
pushes local changes, delivers remote changes, and tracks the connection
status shown to the user.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-10-19
"""

import logging
from typing import Callable, Optional

from logic.config import get_empty_document
from logic.models import Dataset, SyncStatus
from server.documents import DocumentKey, DocumentStore, DocumentStoreError, Snapshot, Watch

logger = logging.getLogger(__name__)


class SyncGateway:
    """Push/subscribe access to the overlay document.

    Snapshots older than the newest revision already applied are dropped, so
    a late delivery cannot roll the overlay back. Between different writers
    the document is last-writer-wins.

    Attributes:
        store: Document store holding the overlay.
        key: (collection, document id) of the overlay document.
        status: Current SyncStatus.
    """

    def __init__(self, store: DocumentStore, key: DocumentKey):
        self.store = store
        self.key = key
        self.status = SyncStatus.CONNECTING
        self.last_revision = 0
        self._initializing = False
        self._watch: Optional[Watch] = None
        self._on_change: Optional[Callable[[Dataset], None]] = None
        self._on_error: Optional[Callable[[Exception], None]] = None
        self.on_status_change: Optional[Callable[[SyncStatus], None]] = None

    @property
    def subscribed(self) -> bool:
        return self._watch is not None and self._watch.active

    def _set_status(self, status: SyncStatus):
        if status is self.status:
            return
        self.status = status
        logger.info("Sync status for %s/%s: %s", *self.key, status.value)
        if self.on_status_change:
            self.on_status_change(status)

    async def push(self, dataset: Dataset) -> int:
        """Overwrite the overlay document with the full dataset.

        Args:
            dataset: Overlay dataset to store.

        Returns:
            Revision written.

        Raises:
            DocumentStoreError: If the write fails.
        """
        revision = self.store.set(self.key, dataset.to_document())
        logger.debug("Pushed %s/%s revision %s", *self.key, revision)
        return revision

    def subscribe(self, on_change: Callable[[Dataset], None],
                  on_error: Callable[[Exception], None]):
        """Start delivering the overlay document.

        Creates the document with empty categories if it does not exist.

        Args:
            on_change: Called with the dataset on the initial read and on
                every later change.
            on_error: Called when the subscription cannot be opened or is
                interrupted.

        Raises:
            RuntimeError: If already subscribed.
        """
        if self._watch is not None:
            raise RuntimeError("Gateway is already subscribed")

        self._on_change = on_change
        self._on_error = on_error
        self._set_status(SyncStatus.CONNECTING)
        try:
            self._watch = self.store.watch(self.key, self._handle_snapshot, self._handle_error)
        except DocumentStoreError as e:
            self._handle_error(e)

    def unsubscribe(self):
        """Release the live subscription. Safe to call more than once."""
        if self._watch is not None:
            self._watch.close()
            self._watch = None
            logger.info("Unsubscribed from %s/%s", *self.key)

    def _handle_snapshot(self, snapshot: Snapshot):
        if not snapshot.exists:
            self._initialize()
            return

        if snapshot.revision < self.last_revision:
            logger.debug(
                "Dropping stale snapshot %s (have %s)", snapshot.revision, self.last_revision
            )
            return

        try:
            if not isinstance(snapshot.content, dict):
                raise TypeError(f"expected an object, got {type(snapshot.content).__name__}")
            dataset = Dataset.from_document(snapshot.content)
        except (KeyError, TypeError, ValueError) as e:
            logger.error("Malformed overlay document %s/%s: %s", *self.key, e)
            self._handle_error(e)
            return

        self.last_revision = snapshot.revision
        if self._initializing:
            self._initializing = False
        else:
            self._set_status(SyncStatus.SYNCED)
        self._on_change(dataset)

    def _initialize(self):
        # The write delivers the new document back through the watch.
        self._initializing = True
        self._set_status(SyncStatus.INITIALIZED)
        try:
            self.store.set(self.key, get_empty_document())
        except DocumentStoreError as e:
            self._initializing = False
            self._handle_error(e)

    def _handle_error(self, error: Exception):
        logger.error("Subscription to %s/%s failed: %s", *self.key, error)
        self._set_status(SyncStatus.OFFLINE)
        if self._on_error:
            self._on_error(error)
