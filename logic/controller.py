"""
Interaction controller.

Turns map clicks and detail-panel actions into marker store operations and
keeps the transient UI state: which category is armed for adding and which
marker is open in the detail panel.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-10-19
"""

from typing import Optional

from logic.models import Category, Marker
from logic.store import MarkerStore


class InteractionController:
    """UI state and event handling for one client.

    Attributes:
        store: Marker store the events are applied to.
        add_mode: Category armed for the next map click, or None.
        active: Marker shown in the detail panel, or None.
    """

    def __init__(self, store: MarkerStore):
        self.store = store
        self.add_mode: Optional[Category] = None
        self.active: Optional[Marker] = None

    def toggle_add_mode(self, category: Category) -> Optional[Category]:
        """Arm a category for adding, or disarm it if already armed.

        Returns:
            The armed category after the toggle.
        """
        self.add_mode = None if self.add_mode is category else category
        return self.add_mode

    def map_click(self, lat: float, lng: float) -> Optional[Marker]:
        """Handle a click on the map.

        Adds a marker when a category is armed and disarms it afterwards.

        Returns:
            The new marker, or None when nothing was armed.
        """
        if self.add_mode is None:
            return None
        marker = self.store.add(self.add_mode, lat, lng)
        self.add_mode = None
        return marker

    def select(self, category: Category, marker_id: int) -> Optional[Marker]:
        """Open the detail panel for a visible marker.

        Returns:
            The selected marker, or None if it is not in the composed view.
        """
        marker = next(
            (m for m in self.store.view()[category] if m.id == marker_id), None
        )
        self.active = marker
        return marker

    def rename(self, category: Category, marker_id: int,
               prompt_result: Optional[str]) -> Optional[Marker]:
        """Apply the result of the rename dialog.

        Args:
            category: Category of the marker.
            marker_id: Id of the marker.
            prompt_result: Name entered in the dialog, None if cancelled.

        Returns:
            The renamed marker, or None if nothing changed.

        Raises:
            InvalidOperation: If the marker belongs to the base layer.
        """
        marker = self.store.rename(category, marker_id, prompt_result)
        if marker is not None and self.active is not None and self.active.id == marker_id:
            self.active = marker
        return marker

    def delete(self, category: Category, marker_id: int) -> bool:
        changed = self.store.delete(category, marker_id)
        self.active = None
        return changed

    def close(self):
        self.active = None

    def toggle_layer(self, category: Category) -> bool:
        return self.store.toggle_visibility(category)

    def refresh_active(self):
        """Re-read the active marker after the overlay was replaced."""
        if self.active is None:
            return
        self.active = self.store.find(self.active.category, self.active.id)
