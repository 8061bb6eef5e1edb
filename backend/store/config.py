from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class StoreConfig:
    project: str | None = os.getenv("FIRESTORE_PROJECT") or None
    credentials_path: str | None = os.getenv("FIREBASE_CREDENTIALS") or None
    menu_collection: str = "fs_food_items"
    recommendations_collection: str = "recommendations"
    places_collection: str = "hotels"
    rating_field: str = "productRating"


DEFAULT_STORE_CONFIG = StoreConfig()
