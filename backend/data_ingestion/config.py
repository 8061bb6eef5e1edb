"""
Configuration for seeding Firestore collections from CSV exports.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class IngestionConfig:
    """
    Where to read rows from and which collection to write them into.

    ``id_column`` names the CSV column used as the document id; rows without
    one get an id assigned by Firestore.
    """

    source_path: Path = Path("backend/data/fs_food_items.csv")
    collection: str = "fs_food_items"
    id_column: str = "id"
    rating_column: str = "productRating"
    coordinate_columns: tuple[str, ...] = ("latitude", "longitude")
    batch_size: int = 500


DEFAULT_INGESTION_CONFIG = IngestionConfig()
