"""
Marker record store.

This module holds one client's view of the data: the read-only base layer,
the shared overlay layer, the client's suppression set and per-category
visibility flags. Overlay mutations are reported to a listener so they can
be persisted; suppression changes are reported to a separate one.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-10-19
"""

import logging
import time
from typing import Callable, Dict, Iterable, Optional, Set

from logic.composer import compose_view
from logic.models import (
    CATEGORY_STYLE,
    RESERVED_ID_THRESHOLD,
    USER_ADDED_KIND,
    Category,
    Dataset,
    InvalidOperation,
    Marker,
    Origin,
)

logger = logging.getLogger(__name__)

OverlayListener = Callable[[Dataset], None]
SuppressionListener = Callable[[Set[int]], None]


class IdSource:
    """Millisecond clock ids, strictly increasing for every store sharing the source."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._last = RESERVED_ID_THRESHOLD - 1

    def next_id(self) -> int:
        candidate = max(int(self._clock() * 1000), RESERVED_ID_THRESHOLD)
        self._last = max(candidate, self._last + 1)
        return self._last

    def next_free_id(self, taken: Set[int]) -> int:
        """Next id not already present in `taken`."""
        marker_id = self.next_id()
        while marker_id in taken:
            marker_id = self.next_id()
        return marker_id


class MarkerStore:
    """Categorized marker collections for one client.

    Args:
        base: Base layer; never mutated.
        overlay: Initial overlay layer.
        suppressed: Base marker ids hidden for this client.
        id_source: Id generator for new markers.
    """

    def __init__(
        self,
        base: Dataset,
        overlay: Optional[Dataset] = None,
        suppressed: Optional[Iterable[int]] = None,
        id_source: Optional[IdSource] = None,
    ):
        self.base = base
        self.overlay = overlay if overlay is not None else Dataset()
        self.suppressed: Set[int] = set(suppressed or ())
        self.visibility: Dict[Category, bool] = {c: True for c in Category}
        self._ids = id_source or IdSource()
        self.on_overlay_change: Optional[OverlayListener] = None
        self.on_suppression_change: Optional[SuppressionListener] = None

    # ==========================
    # Mutations
    # ==========================
    def add(self, category: Category, lat: float, lng: float) -> Marker:
        """Create a user marker at (lat, lng) and append it to the overlay.

        Args:
            category: Category for the new marker.
            lat: Latitude, not range checked.
            lng: Longitude, not range checked.

        Returns:
            The new marker.
        """
        style = CATEGORY_STYLE[category]
        marker = Marker(
            id=self._ids.next_free_id({m.id for m in self.overlay.all_markers()}),
            name=style["default_name"],
            lat=lat,
            lng=lng,
            kind=USER_ADDED_KIND,
            group=style["default_group"],
            category=category,
            origin=Origin.OVERLAY,
        )
        self.overlay.markers(category).append(marker)
        logger.info("Added %s marker %s at (%s, %s)", category.value, marker.id, lat, lng)
        self._overlay_changed()
        return marker

    def rename(self, category: Category, marker_id: int, new_name: Optional[str]) -> Optional[Marker]:
        """Rename an overlay marker.

        Args:
            category: Category of the marker.
            marker_id: Id of the marker.
            new_name: New name; None or blank means the dialog was cancelled.

        Returns:
            The renamed marker, or None if nothing changed.

        Raises:
            InvalidOperation: If the id names a base marker.
        """
        if self.base.find(category, marker_id) is not None:
            raise InvalidOperation(f"Base marker {marker_id} cannot be renamed")

        if not new_name or not new_name.strip():
            return None

        marker = self.overlay.find(category, marker_id)
        if marker is None:
            return None

        marker.name = new_name
        logger.info("Renamed %s marker %s to %r", category.value, marker_id, new_name)
        self._overlay_changed()
        return marker

    def delete(self, category: Category, marker_id: int) -> bool:
        """Delete a marker.

        Base markers are only hidden for this client. Overlay markers are
        removed from the shared layer.

        Args:
            category: Category of the marker.
            marker_id: Id of the marker.

        Returns:
            True if something changed.
        """
        if self.base.find(category, marker_id) is not None:
            if marker_id in self.suppressed:
                return False
            self.suppressed.add(marker_id)
            logger.info("Suppressed base marker %s", marker_id)
            if self.on_suppression_change:
                self.on_suppression_change(set(self.suppressed))
            return True

        markers = self.overlay.markers(category)
        remaining = [m for m in markers if m.id != marker_id]
        if len(remaining) == len(markers):
            return False

        self.overlay.set_markers(category, remaining)
        logger.info("Deleted %s marker %s", category.value, marker_id)
        self._overlay_changed()
        return True

    def toggle_visibility(self, category: Category) -> bool:
        """Flip the visibility flag of a category.

        Returns:
            The new flag value.
        """
        self.visibility[category] = not self.visibility[category]
        return self.visibility[category]

    def replace_overlay(self, dataset: Dataset):
        """Install an overlay received from the document store."""
        self.overlay = dataset

    def clear_suppression(self):
        self.suppressed.clear()
        if self.on_suppression_change:
            self.on_suppression_change(set())

    # ==========================
    # Queries
    # ==========================
    def find(self, category: Category, marker_id: int) -> Optional[Marker]:
        """Find a marker in either layer, ignoring suppression."""
        return self.base.find(category, marker_id) or self.overlay.find(category, marker_id)

    def view(self) -> Dict[Category, list]:
        """Get the composed view for every category."""
        return compose_view(self.base, self.overlay, self.suppressed, self.visibility)

    def _overlay_changed(self):
        if self.on_overlay_change:
            self.on_overlay_change(self.overlay.copy_deep())
