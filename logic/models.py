"""
Marker data model.

This module defines the marker categories, the marker record itself, the
categorized dataset container, and the sync status reported to clients.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-10-19
"""

from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

from pydantic import BaseModel, Field

# Ids below this value belong to the hardcoded base layer.
RESERVED_ID_THRESHOLD = 9999

USER_ADDED_KIND = "User Added"


class InvalidOperation(Exception):
    """Raised when a mutation targets a marker that cannot be changed."""


class Category(str, Enum):
    """Closed set of marker categories."""

    THREATS = "THREATS"
    ASSETS = "ASSETS"
    LOGISTICS = "LOGISTICS"


class Origin(str, Enum):
    """Which layer a marker belongs to."""

    BASE = "base"
    OVERLAY = "overlay"


class SyncStatus(str, Enum):
    """Persistence health shown to the user."""

    CONNECTING = "CONNECTING"
    SYNCED = "SYNCED"
    INITIALIZED = "INITIALIZED"
    OFFLINE = "OFFLINE"


# name, group, add-button label, color, pulsing
CATEGORY_STYLE = {
    Category.THREATS: {
        "default_name": "New Hostile",
        "default_group": "Unknown Force",
        "label": "HOSTILE",
        "color": "#ff0055",
        "pulse": True,
    },
    Category.ASSETS: {
        "default_name": "New FOB",
        "default_group": "My Squad",
        "label": "ASSET",
        "color": "#00ff99",
        "pulse": False,
    },
    Category.LOGISTICS: {
        "default_name": "New Refuel",
        "default_group": "Public",
        "label": "REFUEL",
        "color": "#00ccff",
        "pulse": False,
    },
}


class Marker(BaseModel):
    """One mappable entity.

    Attributes:
        id: Unique id within the owning dataset.
        name: Display label, the only mutable field.
        lat: Latitude, fixed at creation.
        lng: Longitude, fixed at creation.
        kind: Free-text descriptor ("Missile Strike", "User Added").
        group: Owning faction or organisation.
        category: Collection the marker lives in.
        origin: Base layer or user overlay.
    """

    id: int
    name: str
    lat: float = Field(allow_inf_nan=False)
    lng: float = Field(allow_inf_nan=False)
    kind: str
    group: str
    category: Category
    origin: Origin = Origin.OVERLAY

    def to_wire(self) -> Dict[str, Any]:
        """Serialize to the stored document format.

        Returns:
            Dictionary with id, name, lat, lng, type and faction.
        """
        return {
            "id": self.id,
            "name": self.name,
            "lat": self.lat,
            "lng": self.lng,
            "type": self.kind,
            "faction": self.group,
        }

    @classmethod
    def from_wire(cls, data: Dict[str, Any], category: Category,
                  origin: Origin = Origin.OVERLAY) -> "Marker":
        """Build a marker from its stored document form.

        Args:
            data: Dictionary in the stored document format.
            category: Category of the list the entry was read from.
            origin: Layer the marker belongs to.

        Returns:
            Marker instance.

        Raises:
            ValueError: If an overlay entry carries a reserved base id.
        """
        marker = cls(
            id=data["id"],
            name=data.get("name", ""),
            lat=data["lat"],
            lng=data["lng"],
            kind=data.get("type", ""),
            group=data.get("faction", ""),
            category=category,
            origin=origin,
        )
        if origin is Origin.OVERLAY and marker.id < RESERVED_ID_THRESHOLD:
            raise ValueError(f"Overlay marker id {marker.id} is in the reserved base range")
        return marker

    def to_view(self) -> Dict[str, Any]:
        """Serialize for API responses."""
        data = self.to_wire()
        data["category"] = self.category.value
        data["origin"] = self.origin.value
        return data


class Dataset(BaseModel):
    """Ordered markers per category."""

    THREATS: List[Marker] = []
    ASSETS: List[Marker] = []
    LOGISTICS: List[Marker] = []

    def markers(self, category: Category) -> List[Marker]:
        return getattr(self, category.value)

    def set_markers(self, category: Category, markers: List[Marker]):
        setattr(self, category.value, markers)

    def find(self, category: Category, marker_id: int) -> Optional[Marker]:
        return next((m for m in self.markers(category) if m.id == marker_id), None)

    def all_markers(self) -> Iterator[Marker]:
        for category in Category:
            yield from self.markers(category)

    def to_document(self) -> Dict[str, List[Dict[str, Any]]]:
        """Serialize to the stored document format, one field per category."""
        return {c.value: [m.to_wire() for m in self.markers(c)] for c in Category}

    @classmethod
    def from_document(cls, document: Dict[str, Any],
                      origin: Origin = Origin.OVERLAY) -> "Dataset":
        """Build a dataset from a stored document.

        Missing category fields are read as empty lists.

        Args:
            document: Dictionary keyed by category name.
            origin: Layer the markers belong to.

        Returns:
            Dataset instance.
        """
        dataset = cls()
        for category in Category:
            entries = document.get(category.value) or []
            dataset.set_markers(
                category, [Marker.from_wire(e, category, origin) for e in entries]
            )
        return dataset

    def copy_deep(self) -> "Dataset":
        return self.model_copy(deep=True)
