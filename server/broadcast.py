"""
Server-sent events (SSE) broadcasting module.

This module turns subscriber queues into SSE streams and fans view updates
out to every browser connected for a client.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-10-19
"""

import asyncio
import json
from datetime import datetime
from typing import Any, Dict, Iterable


async def event_generator(queue: asyncio.Queue):
    """Generate SSE events from the queue.

    Args:
        queue: Async queue to read events from.

    Yields:
        SSE formatted event strings.
    """
    try:
        while True:
            data = await queue.get()
            yield f"data: {json.dumps(data)}\n\n"
    except asyncio.CancelledError:
        pass


def build_view_update(view: Dict[str, Any]) -> Dict[str, Any]:
    """Wrap a view payload as a view_update event."""
    return {
        "type": "view_update",
        "time": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        **view,
    }


def broadcast_view(subscribers: Iterable[asyncio.Queue], view: Dict[str, Any]):
    """Queue a view update for every subscriber.

    Args:
        subscribers: Queues of the connected browsers.
        view: View payload to send.
    """
    payload = build_view_update(view)
    for queue in list(subscribers):
        queue.put_nowait(payload)
