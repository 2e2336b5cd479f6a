"""
Client sessions.

A session bundles everything one browser needs: its local slot, marker
store, interaction controller, sync gateway subscription and SSE
subscribers. Sessions are created on first use and closed at shutdown.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-10-19
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Set

from fastapi import Depends, Request

from logic.config import BACKEND_LOCAL, LOCAL_HIDDEN_KEY, Settings, get_base_dataset
from logic.controller import InteractionController
from logic.local_slot import LocalSlot
from logic.models import CATEGORY_STYLE, Category, Dataset
from logic.store import IdSource, MarkerStore
from server.broadcast import broadcast_view
from server.documents import DocumentStore, LocalDocumentStore
from server.gateway import SyncGateway
from user_context import get_client_id

logger = logging.getLogger(__name__)


class ClientSession:
    """State and subscriptions of one client.

    Args:
        client_id: Client identifier.
        settings: Application settings.
        shared_store: Shared document store (remote variant); ignored in the
            local variant, where the session owns a store on its local slot.
        id_source: Id generator shared with the other sessions writing the
            same overlay.
    """

    def __init__(self, client_id: str, settings: Settings,
                 shared_store: Optional[DocumentStore] = None,
                 id_source: Optional[IdSource] = None):
        self.client_id = client_id
        self.backend = settings.backend
        self.slot = LocalSlot(settings.data_dir, client_id)

        if self.backend == BACKEND_LOCAL:
            self.documents = LocalDocumentStore(self.slot)
            self._owns_documents = True
        else:
            if shared_store is None:
                raise ValueError("Remote backend requires a shared document store")
            self.documents = shared_store
            self._owns_documents = False

        self.store = MarkerStore(
            get_base_dataset(), suppressed=self._load_suppressed(), id_source=id_source
        )
        self.controller = InteractionController(self.store)
        self.gateway = SyncGateway(self.documents, (settings.collection, settings.document_id))
        self.subscribers: Set[asyncio.Queue] = set()
        self._pending: Set[asyncio.Task] = set()
        self._held: Optional[Dataset] = None

        self.store.on_overlay_change = self._schedule_push
        self.store.on_suppression_change = self._save_suppressed
        self.gateway.on_status_change = lambda status: self.notify()

    def open(self):
        """Subscribe to the overlay document."""
        self.gateway.subscribe(self._on_remote_change, self._on_remote_error)

    async def close(self):
        """Wait for pending pushes, then release the subscription."""
        await self.flush()
        self.gateway.unsubscribe()
        if self._owns_documents:
            self.documents.close()

    # ==========================
    # Persistence
    # ==========================
    def _load_suppressed(self) -> Set[int]:
        hidden = self.slot.get(LOCAL_HIDDEN_KEY, [])
        if not isinstance(hidden, list):
            logger.warning("Ignoring malformed suppression set for %s", self.client_id)
            return set()
        return {int(i) for i in hidden if isinstance(i, int) and not isinstance(i, bool)}

    def _save_suppressed(self, suppressed: Set[int]):
        self.slot.set(LOCAL_HIDDEN_KEY, sorted(suppressed))

    def _schedule_push(self, dataset: Dataset):
        task = asyncio.get_running_loop().create_task(self.gateway.push(dataset))
        self._pending.add(task)
        task.add_done_callback(self._push_done)

    def _push_done(self, task: asyncio.Task):
        self._pending.discard(task)
        if task.cancelled():
            logger.warning("Push for %s was cancelled", self.client_id)
        elif task.exception() is not None:
            logger.error("Push for %s failed: %s", self.client_id, task.exception())

        if not self._pending and self._held is not None:
            held, self._held = self._held, None
            self._apply_remote(held)

    async def flush(self):
        """Wait for every in-flight push to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # ==========================
    # Remote updates
    # ==========================
    def _on_remote_change(self, dataset: Dataset):
        if self._pending:
            # Applied once the local pushes finish; the newest one wins.
            self._held = dataset
            return
        self._apply_remote(dataset)

    def _apply_remote(self, dataset: Dataset):
        self.store.replace_overlay(dataset)
        self.controller.refresh_active()
        self.notify()

    def _on_remote_error(self, error: Exception):
        self.notify()

    # ==========================
    # View
    # ==========================
    def view(self) -> Dict[str, Any]:
        """Build the payload the browser renders.

        Returns:
            Dictionary with the composed markers, layer flags, add mode,
            active marker, sync status and category styling.
        """
        composed = self.store.view()
        active = self.controller.active
        add_mode = self.controller.add_mode
        return {
            "client_id": self.client_id,
            "backend": self.backend,
            "status": self.gateway.status.value,
            "add_mode": add_mode.value if add_mode else None,
            "active": active.to_view() if active else None,
            "layers": {c.value: self.store.visibility[c] for c in Category},
            "categories": {
                c.value: {
                    "label": CATEGORY_STYLE[c]["label"],
                    "color": CATEGORY_STYLE[c]["color"],
                    "pulse": CATEGORY_STYLE[c]["pulse"],
                }
                for c in Category
            },
            "markers": {c.value: [m.to_view() for m in composed[c]] for c in Category},
        }

    def notify(self):
        """Send the current view to every connected browser of this client."""
        if self.subscribers:
            broadcast_view(self.subscribers, self.view())


class SessionRegistry:
    """Creates, caches and closes client sessions.

    Args:
        settings: Application settings.
        shared_store: Shared document store for the remote variant.
        id_source: Id generator for every session; defaults to a wall-clock one.
    """

    def __init__(self, settings: Settings, shared_store: Optional[DocumentStore] = None,
                 id_source: Optional[IdSource] = None):
        self.settings = settings
        self.shared_store = shared_store
        self.id_source = id_source or IdSource()
        self._sessions: Dict[str, ClientSession] = {}

    def get(self, client_id: str) -> ClientSession:
        session = self._sessions.get(client_id)
        if session is None:
            session = ClientSession(client_id, self.settings, self.shared_store, self.id_source)
            self._sessions[client_id] = session
            session.open()
            logger.info("Opened session for %s", client_id)
        return session

    async def reset(self, client_id: str) -> ClientSession:
        """Clear a client's local slot and start it from the defaults.

        Connected browsers are carried over to the new session.

        Returns:
            The fresh session.
        """
        old = self._sessions.pop(client_id, None)
        subscribers: Set[asyncio.Queue] = set()
        if old is not None:
            await old.close()
            subscribers = old.subscribers
        LocalSlot(self.settings.data_dir, client_id).clear()
        logger.info("Cleared local data for %s", client_id)

        session = self.get(client_id)
        session.subscribers |= subscribers
        session.notify()
        return session

    async def close_all(self):
        for client_id, session in list(self._sessions.items()):
            await session.close()
            logger.info("Closed session for %s", client_id)
        self._sessions.clear()

    def __len__(self):
        return len(self._sessions)


async def get_session(request: Request, client_id: str = Depends(get_client_id)) -> ClientSession:
    """Dependency returning the caller's session."""
    return request.app.state.registry.get(client_id)
