from __future__ import annotations

import logging
from typing import Any, TypeVar

from google.api_core.exceptions import GoogleAPIError
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from google.oauth2 import service_account
from pydantic import BaseModel, ValidationError

from ..recommendations.models import MenuItem, Place
from .config import DEFAULT_STORE_CONFIG, StoreConfig

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class StoreError(Exception):
    """Raised when a Firestore read fails."""


def create_firestore_client(config: StoreConfig = DEFAULT_STORE_CONFIG) -> firestore.AsyncClient:
    """Build the async client from a service-account file, or from ambient credentials."""
    if config.credentials_path:
        credentials = service_account.Credentials.from_service_account_file(config.credentials_path)
        return firestore.AsyncClient(
            project=config.project or credentials.project_id,
            credentials=credentials,
        )
    return firestore.AsyncClient(project=config.project)


def _to_record(snapshot: Any) -> dict[str, Any]:
    return {"id": snapshot.id, **(snapshot.to_dict() or {})}


def _validate_all(model: type[ModelT], records: list[dict[str, Any]], collection: str) -> list[ModelT]:
    """Validate each record, skipping the ones that do not fit ``model``."""
    valid: list[ModelT] = []
    for record in records:
        try:
            valid.append(model.model_validate(record))
        except ValidationError:
            logger.warning("Skipping malformed record %r in %r", record.get("id"), collection, exc_info=True)
    return valid


class MenuStore:
    """Read-only access to the menu, recommendation and place collections."""

    def __init__(
        self,
        client: firestore.AsyncClient,
        config: StoreConfig = DEFAULT_STORE_CONFIG,
    ) -> None:
        self.client = client
        self.config = config

    async def _get(self, query: Any, collection: str) -> list[Any]:
        try:
            return await query.get()
        except GoogleAPIError as exc:
            logger.error("Firestore read from %r failed", collection, exc_info=True)
            raise StoreError(f"Failed to read collection {collection!r}: {exc}") from exc

    async def fetch_all(self, collection: str) -> list[dict[str, Any]]:
        """Every document in ``collection``, store id merged into its fields."""
        snapshots = await self._get(self.client.collection(collection), collection)
        return [_to_record(s) for s in snapshots]

    async def fetch_menu(self) -> list[MenuItem]:
        records = await self.fetch_all(self.config.menu_collection)
        return _validate_all(MenuItem, records, self.config.menu_collection)

    async def fetch_places(self) -> list[Place]:
        records = await self.fetch_all(self.config.places_collection)
        return _validate_all(Place, records, self.config.places_collection)

    async def fetch_precomputed(self, limit: int = 5) -> list[dict[str, Any]]:
        """Pre-computed recommendation records, field maps only."""
        collection = self.config.recommendations_collection
        snapshots = await self._get(self.client.collection(collection).limit(limit), collection)
        return [s.to_dict() or {} for s in snapshots]

    async def fetch_popular(self, min_rating: float = 4.0, limit: int = 5) -> list[MenuItem]:
        """Menu items rated at least ``min_rating``, best first."""
        collection = self.config.menu_collection
        field = self.config.rating_field
        query = (
            self.client.collection(collection)
            .where(filter=FieldFilter(field, ">=", min_rating))
            .order_by(field, direction=firestore.Query.DESCENDING)
            .limit(limit)
        )
        snapshots = await self._get(query, collection)
        return _validate_all(MenuItem, [_to_record(s) for s in snapshots], collection)
