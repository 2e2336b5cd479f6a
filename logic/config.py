"""
Configuration management module.

This module reads the application settings from the environment (optionally
via a .env file) and holds the hardcoded base marker dataset shared by every
client.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-10-19
"""

import os
from typing import Any, Dict

from dotenv import load_dotenv
from pydantic import BaseModel

from logic.models import Dataset, Origin

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

BACKEND_REMOTE = "remote"
BACKEND_LOCAL = "local"
VALID_BACKENDS = {BACKEND_REMOTE, BACKEND_LOCAL}

# Keys inside a client's local slot
LOCAL_DATA_KEY = "sentinels_data"
LOCAL_HIDDEN_KEY = "sentinels_hidden"


class Settings(BaseModel):
    """Application settings.

    Attributes:
        backend: "remote" for the shared document store, "local" for the
            per-client slot.
        database_url: SQLAlchemy URL of the shared document store.
        collection: Collection holding the overlay document.
        document_id: Id of the overlay document.
        data_dir: Directory for per-client local slots.
        log_level: Root logging level name.
    """

    backend: str = BACKEND_REMOTE
    database_url: str = "sqlite:///./sentinels.db"
    collection: str = "sentinels"
    document_id: str = "global_map"
    data_dir: str = os.path.join(BASE_DIR, "data")
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Load settings from environment variables.

    Returns:
        Settings with defaults for anything unset.

    Raises:
        ValueError: If SENTINELS_BACKEND names an unknown backend.
    """
    load_dotenv()
    defaults = Settings()
    settings = Settings(
        backend=os.getenv("SENTINELS_BACKEND", defaults.backend).strip().lower(),
        database_url=os.getenv("SENTINELS_DATABASE_URL", defaults.database_url),
        collection=os.getenv("SENTINELS_COLLECTION", defaults.collection),
        document_id=os.getenv("SENTINELS_DOCUMENT_ID", defaults.document_id),
        data_dir=os.getenv("SENTINELS_DATA_DIR", defaults.data_dir),
        log_level=os.getenv("SENTINELS_LOG_LEVEL", defaults.log_level).upper(),
    )
    if settings.backend not in VALID_BACKENDS:
        raise ValueError(f"Unknown backend '{settings.backend}'")
    return settings


def get_base_document() -> Dict[str, Any]:
    """Get the hardcoded base layer in stored document form.

    Returns:
        Document dictionary keyed by category.
    """
    return {
        "THREATS": [
            {"id": 101, "name": "MSC United VIII", "lat": 13.2, "lng": 42.9,
             "type": "Missile Strike", "faction": "Houthi Forces"},
            {"id": 102, "name": "Maersk Hangzhou", "lat": 14.8, "lng": 41.9,
             "type": "Anti-Ship Missile", "faction": "Houthi Forces"},
            {"id": 103, "name": "Chem Pluto", "lat": 20.1, "lng": 65.2,
             "type": "Drone Strike", "faction": "Houthi Forces"},
            {"id": 106, "name": "Galaxy Leader", "lat": 14.9, "lng": 42.8,
             "type": "Hijacking", "faction": "Houthi Forces"},
            {"id": 201, "name": "Sim: W.C.C. Raid", "lat": -5.8, "lng": 11.5,
             "type": "Raid", "faction": "West Congo Cougars"},
            {"id": 202, "name": "Sim: Supply Convoy", "lat": -4.9, "lng": 12.1,
             "type": "Ambush", "faction": "West Congo Cougars"},
        ],
        "ASSETS": [
            {"id": 301, "name": "FOB: The Crib", "lat": 44.7, "lng": -63.6,
             "type": "Safehouse", "faction": "My Squad"},
            {"id": 302, "name": "Asset: Dave's House", "lat": 44.65, "lng": -63.58,
             "type": "Ally", "faction": "My Squad"},
        ],
        "LOGISTICS": [
            {"id": 401, "name": "Refuel: Pizza Hut", "lat": 44.66, "lng": -63.62,
             "type": "Nutrition", "faction": "Supply Chain"},
            {"id": 402, "name": "Refuel: Gym", "lat": 44.72, "lng": -63.65,
             "type": "Training", "faction": "Self Improvement"},
        ],
    }


def get_base_dataset() -> Dataset:
    """Build a fresh copy of the base layer."""
    return Dataset.from_document(get_base_document(), origin=Origin.BASE)


def get_empty_document() -> Dict[str, Any]:
    """Get an overlay document with three empty categories."""
    return {"THREATS": [], "ASSETS": [], "LOGISTICS": []}
