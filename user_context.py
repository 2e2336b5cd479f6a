"""Client context for per-browser state.

This module identifies which client a request belongs to. Each client gets
its own suppression set, add mode and detail panel selection.
"""

from typing import Optional

from fastapi import Header, Request


def get_client_id(
    x_client_id: Optional[str] = Header(None, alias="X-Client-ID"),
    request: Request = None,
) -> str:
    """Get current client identifier from request.

    Args:
        x_client_id: Client ID from X-Client-ID header.
        request: FastAPI request object.

    Returns:
        Client identifier string. Defaults to 'anonymous' if not provided.
    """
    # Try header first
    if x_client_id and x_client_id.strip():
        return x_client_id.strip()

    if request:
        # Use client host as fallback identifier
        client_host = request.client.host if request.client else "unknown"
        return f"client-{client_host}"

    return "anonymous"
