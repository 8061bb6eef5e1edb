from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator, model_validator


class MenuItem(BaseModel):
    """A menu record. Fields other than id/title/rating are passed through untouched."""

    model_config = ConfigDict(extra="allow")

    id: str
    title: str = Field(default="", alias="productTitle")
    rating: float | None = Field(default=None, alias="productRating")

    _record: dict[str, Any] = PrivateAttr(default_factory=dict)

    @model_validator(mode="wrap")
    @classmethod
    def _keep_record(cls, data: Any, handler: Any) -> MenuItem:
        item = handler(data)
        if isinstance(data, dict):
            item._record = dict(data)
        return item

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, str):
            return value
        return str(value)

    @field_validator("rating", mode="before")
    @classmethod
    def _parse_rating(cls, value: Any) -> float | None:
        if value is None or isinstance(value, bool):
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None

    def to_record(self) -> dict[str, Any]:
        """The record exactly as the store returned it."""
        if self._record:
            return dict(self._record)
        return self.model_dump(by_alias=True, exclude_unset=True)


class Place(BaseModel):
    """A hotel/restaurant record. Coordinates may be missing or stored as strings."""

    model_config = ConfigDict(extra="allow")

    id: str
    name: str | None = None
    address: str | None = None
    phone: str | None = None
    type: str | None = None
    latitude: float | str | None = None
    longitude: float | str | None = None

    @field_validator("name", "address", "phone", "type", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)


class RecommendationCandidate(BaseModel):
    id: str
    relevance: float = Field(..., ge=0.0, le=1.0)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str | None = Field(default=None, max_length=1000)
    meal_type: str | None = Field(default=None, alias="mealType")


class ChatResponse(BaseModel):
    response: str | None = None
    recommendations: list[dict[str, Any]]


class NearbyHotel(BaseModel):
    id: str
    name: str
    address: str
    phone: str
    type: str
    latitude: float
    longitude: float
    distance: float
