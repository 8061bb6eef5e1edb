from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import DEFAULT_SERVER_CONFIG
from .dependencies import get_model, get_store
from .llm.groq_client import GroqTextModel, TextModel
from .recommendations.geo import InvalidCoordinateError, distance_km, place_coordinates
from .recommendations.models import ChatRequest, ChatResponse, MenuItem, NearbyHotel, Place
from .recommendations.resolver import resolve
from .store.firestore import MenuStore, StoreError, create_firestore_client

logger = logging.getLogger(__name__)

POPULAR_MIN_RATING = 4.0
LIST_LIMIT = 5
CHAT_ERROR = "An error occurred while processing the chat."

PLACE_DEFAULTS = {
    "name": "Name not available",
    "address": "Address not available",
    "phone": "Phone not available",
    "type": "restaurant",
}


class APIError(Exception):
    """An error rendered to the client as ``{"error": ..., "details": ...}``."""

    def __init__(self, status_code: int, error: str, details: str | None = None) -> None:
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.details = details

    def to_dict(self) -> dict[str, str]:
        body = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        return body


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.store = MenuStore(create_firestore_client())
    app.state.model = GroqTextModel()
    logger.info("Store and model clients ready")
    yield
    await app.state.model.close()


app = FastAPI(title="Food Ordering Recommendation API", version="1.0.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(DEFAULT_SERVER_CONFIG.cors_origins),
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(APIError)
async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


# ── Helpers ──────────────────────────────────────────────────────────────


async def _chat_reply(model: TextModel, message: str) -> str | None:
    try:
        return await model.generate(message)
    except Exception:
        logger.warning("Chat reply generation failed, omitting reply", exc_info=True)
        return None


def _with_distance(
    item: MenuItem,
    places_by_id: dict[str, Place],
    lat: float,
    lon: float,
) -> dict[str, Any]:
    record = item.to_record()
    place_id = record.get("hotelId")
    place = places_by_id.get(str(place_id)) if place_id is not None else None
    coords = place_coordinates(place) if place else None
    if coords is None:
        return record
    try:
        record["distance"] = distance_km(lat, lon, *coords)
    except InvalidCoordinateError:
        logger.warning("Skipping distance for item %s", item.id, exc_info=True)
    return record


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/api/chat", response_model=ChatResponse)
async def chat(
    body: ChatRequest,
    store: MenuStore = Depends(get_store),
    model: TextModel = Depends(get_model),
) -> ChatResponse:
    message = (body.message or "").strip()
    meal_type = (body.meal_type or "").strip()
    if not message and not meal_type:
        raise APIError(400, CHAT_ERROR, details="Message or mealType is required")

    try:
        menu = await store.fetch_menu()
    except StoreError as exc:
        logger.error("Error processing chat", exc_info=True)
        raise APIError(500, CHAT_ERROR, details=str(exc)) from exc

    reply = await _chat_reply(model, message) if message else None
    result = await resolve(message, menu, model, meal_type=meal_type)
    logger.info("Chat resolved %d recommendations (%s)", len(result.items), result.status.value)

    return ChatResponse(
        response=reply,
        recommendations=[item.to_record() for item in result.items],
    )


@app.get("/api/recommendations")
async def recommendations(store: MenuStore = Depends(get_store)) -> list[dict[str, Any]]:
    try:
        return await store.fetch_precomputed(limit=LIST_LIMIT)
    except StoreError as exc:
        raise APIError(500, "Failed to fetch recommendations") from exc


@app.get("/api/popular-items")
async def popular_items(store: MenuStore = Depends(get_store)) -> list[dict[str, Any]]:
    try:
        items = await store.fetch_popular(min_rating=POPULAR_MIN_RATING, limit=LIST_LIMIT)
    except StoreError as exc:
        raise APIError(500, "Failed to fetch popular items") from exc
    return [item.to_record() for item in items]


@app.get("/api/personalized-recommendations")
async def personalized_recommendations(
    query: str | None = None,
    meal_type: str | None = Query(default=None, alias="mealType"),
    lat: float | None = Query(default=None, ge=-90.0, le=90.0),
    lon: float | None = Query(default=None, ge=-180.0, le=180.0),
    store: MenuStore = Depends(get_store),
    model: TextModel = Depends(get_model),
) -> list[dict[str, Any]]:
    try:
        menu = await store.fetch_menu()
    except StoreError as exc:
        raise APIError(500, "Failed to fetch personalized recommendations") from exc

    result = await resolve(query, menu, model, meal_type=meal_type)

    if lat is None or lon is None or not result.items:
        return [item.to_record() for item in result.items]

    try:
        places = await store.fetch_places()
    except StoreError as exc:
        raise APIError(500, "Failed to fetch personalized recommendations") from exc

    places_by_id = {place.id: place for place in places}
    return [_with_distance(item, places_by_id, lat, lon) for item in result.items]


@app.get("/api/nearby-hotels", response_model=list[NearbyHotel])
async def nearby_hotels(
    latitude: float = Query(..., ge=-90.0, le=90.0),
    longitude: float = Query(..., ge=-180.0, le=180.0),
    store: MenuStore = Depends(get_store),
) -> list[NearbyHotel]:
    try:
        places = await store.fetch_places()
    except StoreError as exc:
        raise APIError(500, "Failed to fetch nearby hotels") from exc

    hotels: list[NearbyHotel] = []
    for place in places:
        coords = place_coordinates(place)
        if coords is None:
            continue
        try:
            distance = distance_km(latitude, longitude, *coords)
        except InvalidCoordinateError:
            logger.warning("Skipping place %s with bad coordinates", place.id, exc_info=True)
            continue
        hotels.append(NearbyHotel(
            id=place.id,
            name=place.name or PLACE_DEFAULTS["name"],
            address=place.address or PLACE_DEFAULTS["address"],
            phone=place.phone or PLACE_DEFAULTS["phone"],
            type=place.type or PLACE_DEFAULTS["type"],
            latitude=coords[0],
            longitude=coords[1],
            distance=distance,
        ))

    hotels.sort(key=lambda h: h.distance)
    return hotels[:LIST_LIMIT]
