"""
Validation and sanitization utilities.

This module contains functions for parsing categories and sanitizing marker
coordinates and names supplied by clients.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-10-19
"""

import math
from typing import Any, Optional

from fastapi import HTTPException

from logic.models import Category

MAX_MARKER_NAME_LEN = 64


def parse_category(value: Any) -> Category:
    """Parse a category name.

    Accepts the enum value in any letter case.

    Args:
        value: Category name, e.g. "THREATS".

    Returns:
        Matching Category.

    Raises:
        HTTPException: If the name is not a known category.
    """
    if isinstance(value, Category):
        return value
    try:
        return Category(str(value).strip().upper())
    except ValueError:
        raise HTTPException(400, f"Unknown category: {value}")


def sanitise_coordinate(value: Any, field: str) -> float:
    """Sanitize a latitude or longitude.

    No range check is applied; any finite number is accepted.

    Args:
        value: Value to convert.
        field: Field name used in the error message.

    Returns:
        Coordinate as float.

    Raises:
        HTTPException: If value is missing, boolean, not numeric or not finite.
    """
    if value is None or isinstance(value, bool):
        raise HTTPException(400, f"Invalid {field}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise HTTPException(400, f"Invalid {field}")
    if not math.isfinite(number):
        raise HTTPException(400, f"Invalid {field}")
    return number


def sanitise_marker_name(value: Any) -> Optional[str]:
    """Sanitize a name returned by the rename dialog.

    Args:
        value: Dialog result; None means the dialog was cancelled.

    Returns:
        Stripped name, or None when cancelled or blank.

    Raises:
        HTTPException: If value is not a string or exceeds the maximum length.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        raise HTTPException(400, "Invalid marker name")
    value = value.strip()
    if not value:
        return None
    if len(value) > MAX_MARKER_NAME_LEN:
        raise HTTPException(400, "Marker name too long")
    return value
