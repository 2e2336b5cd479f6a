"""
Marker interaction API routes.

This module contains endpoints for arming add mode, placing markers with map
clicks, and the detail-panel actions (select, rename, delete, close), plus
layer visibility toggles.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-10-19
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException

from logic.models import InvalidOperation
from logic.validation import parse_category, sanitise_coordinate, sanitise_marker_name
from server.session import ClientSession, get_session

router = APIRouter()


@router.post("/api/layers/{category}/toggle")
async def toggle_layer(category: str, session: ClientSession = Depends(get_session)):
    """Show or hide a category on the map.

    Args:
        category: Category name.

    Returns:
        Dictionary with the category and its new visibility.
    """
    cat = parse_category(category)
    visible = session.controller.toggle_layer(cat)
    session.notify()
    return {"category": cat.value, "visible": visible}


@router.post("/api/mode/{category}")
async def toggle_add_mode(category: str, session: ClientSession = Depends(get_session)):
    """Arm a category for the next map click, or disarm it.

    Selecting a second category replaces the first; selecting the armed one
    cancels it.

    Returns:
        Dictionary with the armed category or None.
    """
    cat = parse_category(category)
    mode = session.controller.toggle_add_mode(cat)
    session.notify()
    return {"add_mode": mode.value if mode else None}


@router.post("/api/map/click")
async def map_click(data: Dict[str, Any] = Body(...), session: ClientSession = Depends(get_session)):
    """Handle a click on the map.

    Places a marker at the clicked coordinates when a category is armed,
    then disarms it.

    Args:
        data: Dictionary with 'lat' and 'lng'.

    Returns:
        Dictionary with success status and the new marker, if any.

    Raises:
        HTTPException: If coordinates are missing or not numeric.
    """
    lat = sanitise_coordinate(data.get("lat"), "lat")
    lng = sanitise_coordinate(data.get("lng"), "lng")

    marker = session.controller.map_click(lat, lng)
    if marker is None:
        return {"success": False, "marker": None}

    session.notify()
    return {"success": True, "marker": marker.to_view()}


@router.post("/api/markers/{category}/{marker_id}/select")
async def select_marker(category: str, marker_id: int, session: ClientSession = Depends(get_session)):
    """Open the detail panel for a marker.

    Raises:
        HTTPException: If the marker is not on the map.
    """
    cat = parse_category(category)
    marker = session.controller.select(cat, marker_id)
    if marker is None:
        raise HTTPException(404, f"Marker '{marker_id}' not found")
    session.notify()
    return {"active": marker.to_view()}


@router.post("/api/markers/{category}/{marker_id}/rename")
async def rename_marker(
        category: str,
        marker_id: int,
        data: Dict[str, Any] = Body(...),
        session: ClientSession = Depends(get_session),
):
    """Rename a user-added marker.

    A null or blank name means the rename dialog was cancelled and nothing
    changes.

    Args:
        category: Category name.
        marker_id: Marker id.
        data: Dictionary with 'name' (string or null).

    Returns:
        Dictionary with success status and the renamed marker.

    Raises:
        HTTPException: 403 if the marker belongs to the base layer.
    """
    cat = parse_category(category)
    name = sanitise_marker_name(data.get("name"))

    try:
        marker = session.controller.rename(cat, marker_id, name)
    except InvalidOperation as e:
        raise HTTPException(403, str(e))

    if marker is None:
        return {"success": False, "marker": None}

    session.notify()
    return {"success": True, "marker": marker.to_view()}


@router.post("/api/markers/{category}/{marker_id}/delete")
async def delete_marker(category: str, marker_id: int, session: ClientSession = Depends(get_session)):
    """Delete a marker.

    Base markers are only hidden for the calling client; user-added markers
    are removed for everyone.

    Returns:
        Dictionary with success status.
    """
    cat = parse_category(category)
    changed = session.controller.delete(cat, marker_id)
    session.notify()
    return {"success": changed}


@router.post("/api/panel/close")
async def close_panel(session: ClientSession = Depends(get_session)):
    """Close the detail panel."""
    session.controller.close()
    session.notify()
    return {"success": True}
