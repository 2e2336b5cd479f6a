"""
Per-client local key-value slot.

Each client gets one JSON file holding a flat mapping of keys to values,
the server-side counterpart of browser local storage.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-10-19
"""

import json
import logging
import os
import re
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


def slot_filename(client_id: str) -> str:
    """Map a client id to a safe file name."""
    safe = _UNSAFE_CHARS.sub("_", client_id).strip(".") or "anonymous"
    return f"{safe}.json"


class LocalSlot:
    """JSON-file backed key-value store for one client.

    Attributes:
        path: Path of the JSON file.
    """

    def __init__(self, data_dir: str, client_id: str):
        self.path = os.path.join(data_dir, "local", slot_filename(client_id))

    def _load(self) -> Dict[str, Any]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as e:
            logger.warning("Ignoring corrupt local slot %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring local slot %s: not a JSON object", self.path)
            return {}
        return data

    def _save(self, data: Dict[str, Any]):
        os.makedirs(os.path.dirname(self.path), exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any):
        data = self._load()
        data[key] = value
        self._save(data)

    def clear(self):
        """Remove every key by deleting the slot file."""
        try:
            os.remove(self.path)
        except FileNotFoundError:
            pass
