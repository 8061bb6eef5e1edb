from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
from typing import Any

import pandas as pd
from google.cloud import firestore

from ..store.firestore import create_firestore_client
from .config import DEFAULT_INGESTION_CONFIG, IngestionConfig

logger = logging.getLogger(__name__)


def _normalize_rating(rating: float | int | str | None) -> float | None:
    if rating is None:
        return None
    raw = str(rating).strip()
    # Handle "X/5" format (e.g. "4.1/5")
    if "/" in raw:
        raw = raw.split("/")[0].strip()
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None

    # Clamp to [0, 5]
    return max(0.0, min(5.0, value))


def _is_blank(value: Any) -> bool:
    if isinstance(value, str):
        return not value.strip()
    return value is None or bool(pd.isna(value))


def load_rows(path: Path, config: IngestionConfig = DEFAULT_INGESTION_CONFIG) -> pd.DataFrame:
    df = pd.read_csv(path, dtype={config.id_column: str})
    for col in config.coordinate_columns:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")
    return df


def build_documents(
    df: pd.DataFrame,
    config: IngestionConfig = DEFAULT_INGESTION_CONFIG,
) -> list[tuple[str | None, dict[str, Any]]]:
    """
    Turn CSV rows into ``(document_id, fields)`` pairs.

    Blank cells are dropped so the stored document simply lacks the field,
    ratings are normalized to a float in [0, 5] and the id column is lifted
    out of the field map.
    """
    documents: list[tuple[str | None, dict[str, Any]]] = []
    for row in df.to_dict(orient="records"):
        fields = {str(k): v for k, v in row.items() if not _is_blank(v)}

        if config.rating_column in fields:
            rating = _normalize_rating(fields[config.rating_column])
            if rating is None:
                del fields[config.rating_column]
            else:
                fields[config.rating_column] = rating

        doc_id = fields.pop(config.id_column, None)
        documents.append((str(doc_id) if doc_id is not None else None, fields))
    return documents


async def run_ingestion(
    client: firestore.AsyncClient,
    config: IngestionConfig = DEFAULT_INGESTION_CONFIG,
) -> int:
    """
    Seed ``config.collection`` from ``config.source_path``.

    Returns the number of documents written.
    """
    documents = build_documents(load_rows(config.source_path, config), config)
    collection = client.collection(config.collection)

    for start in range(0, len(documents), config.batch_size):
        batch = client.batch()
        for doc_id, fields in documents[start:start + config.batch_size]:
            ref = collection.document(doc_id) if doc_id else collection.document()
            batch.set(ref, fields)
        await batch.commit()
        logger.info("Committed %d documents to %r", min(start + config.batch_size, len(documents)), config.collection)

    return len(documents)


def _parse_args() -> IngestionConfig:
    parser = argparse.ArgumentParser(description="Seed a Firestore collection from a CSV file.")
    parser.add_argument("source", type=Path)
    parser.add_argument("--collection", default=DEFAULT_INGESTION_CONFIG.collection)
    parser.add_argument("--id-column", default=DEFAULT_INGESTION_CONFIG.id_column)
    args = parser.parse_args()
    return IngestionConfig(source_path=args.source, collection=args.collection, id_column=args.id_column)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    cfg = _parse_args()
    count = asyncio.run(run_ingestion(create_firestore_client(), cfg))
    print(f"Ingestion complete. Wrote {count} documents to {cfg.collection}")
