"""
Basic API routes.

This module contains the endpoints for reading the composed map view, the
sync status and the application version, and the local-variant reset.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-10-19
"""

from importlib.metadata import PackageNotFoundError, version

from fastapi import APIRouter, Depends, HTTPException, Request

from logic.config import BACKEND_LOCAL
from server.session import ClientSession, get_session
from user_context import get_client_id

router = APIRouter()

DISTRIBUTION_NAME = "sentinels-map"
DEFAULT_VERSION = "1.0.0"


@router.get("/api/view")
async def get_view(session: ClientSession = Depends(get_session)):
    """Get the current map view for the calling client.

    Returns:
        Dictionary containing the composed markers per category, layer
        visibility, add mode, active marker and sync status.
    """
    return session.view()


@router.get("/api/status")
async def get_status(session: ClientSession = Depends(get_session)):
    """Get the persistence status for the calling client.

    Returns:
        Dictionary with the sync status and backend name.
    """
    return {
        "status": session.gateway.status.value,
        "backend": session.backend,
    }


@router.get("/api/version")
def get_version():
    """Get the application version.

    Read from the installed package metadata; falls back to the default when
    running from a source checkout that was never installed.

    Returns:
        Dictionary with version string.
    """
    try:
        return {"version": version(DISTRIBUTION_NAME)}
    except PackageNotFoundError:
        return {"version": DEFAULT_VERSION}


@router.post("/api/reset")
async def reset_local_data(request: Request, client_id: str = Depends(get_client_id)):
    """Clear the calling client's local data and restore the defaults.

    Only available with the local backend.

    Returns:
        Dictionary with success status and the fresh view.

    Raises:
        HTTPException: If the server runs the remote backend.
    """
    registry = request.app.state.registry
    if registry.settings.backend != BACKEND_LOCAL:
        raise HTTPException(400, "Reset is only available with the local backend")

    session = await registry.reset(client_id)
    return {"success": True, "view": session.view()}
