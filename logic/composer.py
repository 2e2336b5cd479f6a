"""
Layer composition.

Merges the base layer, the overlay layer, a client's suppression set and its
visibility flags into the list of markers shown per category.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-10-19
"""

from typing import AbstractSet, Dict, List, Mapping

from logic.models import Category, Dataset, Marker


def compose_category(
        base: Dataset,
        overlay: Dataset,
        suppressed: AbstractSet[int],
        category: Category,
) -> List[Marker]:
    """Compose one category, ignoring visibility.

    Args:
        base: Base layer.
        overlay: Overlay layer.
        suppressed: Hidden base marker ids.
        category: Category to compose.

    Returns:
        Unsuppressed base markers followed by overlay markers.
    """
    visible_base = [m for m in base.markers(category) if m.id not in suppressed]
    return visible_base + list(overlay.markers(category))


def compose_view(
        base: Dataset,
        overlay: Dataset,
        suppressed: AbstractSet[int],
        visibility: Mapping[Category, bool],
) -> Dict[Category, List[Marker]]:
    """Compose every category.

    Categories whose visibility flag is off (or missing) come out empty.

    Returns:
        Mapping of category to markers, in enum order.
    """
    return {
        category: compose_category(base, overlay, suppressed, category)
        if visibility.get(category, False) else []
        for category in Category
    }
