"""Geolocation helpers for geofenced attendance."""

from __future__ import annotations

import math
from dataclasses import dataclass

from ..core.constants import EARTH_RADIUS_METERS


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


def calculate_distance(point1: Coordinates, point2: Coordinates) -> float:
    """Great-circle distance in meters (haversine)."""
    phi1 = math.radians(point1.latitude)
    phi2 = math.radians(point2.latitude)
    d_phi = math.radians(point2.latitude - point1.latitude)
    d_lambda = math.radians(point2.longitude - point1.longitude)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def _round_half_up(value: float) -> int:
    # Halves go up: 848.5m shows as 849m and 22.5 degrees as NE.
    return math.floor(value + 0.5)


def is_within_geofence(location: Coordinates, office: Coordinates, radius_meters: float) -> bool:
    return calculate_distance(location, office) <= radius_meters


def is_valid_coordinates(coords: Coordinates) -> bool:
    return -90 <= coords.latitude <= 90 and -180 <= coords.longitude <= 180


def format_distance(meters: float) -> str:
    if meters < 1000:
        return f"{_round_half_up(meters)}m"
    return f"{meters / 1000:.2f}km"


def location_accuracy(accuracy_meters: float) -> str:
    if accuracy_meters <= 10:
        return "high"
    if accuracy_meters <= 50:
        return "medium"
    return "low"


def calculate_bearing(point1: Coordinates, point2: Coordinates) -> float:
    """Initial bearing from point1 to point2 in degrees [0, 360)."""
    phi1 = math.radians(point1.latitude)
    phi2 = math.radians(point2.latitude)
    d_lambda = math.radians(point2.longitude - point1.longitude)

    y = math.sin(d_lambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(d_lambda)
    return (math.degrees(math.atan2(y, x)) + 360) % 360


def cardinal_direction(bearing: float) -> str:
    directions = ["N", "NE", "E", "SE", "S", "SW", "W", "NW"]
    return directions[_round_half_up(bearing / 45) % 8]
