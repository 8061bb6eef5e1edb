from __future__ import annotations

from typing import Any

from geopy.distance import geodesic

from .models import Place


class InvalidCoordinateError(ValueError):
    """Raised when a latitude/longitude is missing or not numeric."""


def _to_float(value: Any, name: str) -> float:
    if value is None or isinstance(value, bool):
        raise InvalidCoordinateError(f"{name} is missing")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidCoordinateError(f"{name} is not numeric: {value!r}") from exc


def distance_km(lat1: Any, lon1: Any, lat2: Any, lon2: Any) -> float:
    """Geodesic (WGS-84) distance between two points in decimal degrees, in km."""
    point_a = (_to_float(lat1, "lat1"), _to_float(lon1, "lon1"))
    point_b = (_to_float(lat2, "lat2"), _to_float(lon2, "lon2"))
    try:
        return geodesic(point_a, point_b).km
    except ValueError as exc:
        # geopy rejects out-of-range latitudes
        raise InvalidCoordinateError(str(exc)) from exc


def place_coordinates(place: Place) -> tuple[float, float] | None:
    """Return the parsed ``(lat, lon)`` of a place, or ``None`` if it has none usable."""
    try:
        return _to_float(place.latitude, "latitude"), _to_float(place.longitude, "longitude")
    except InvalidCoordinateError:
        return None
