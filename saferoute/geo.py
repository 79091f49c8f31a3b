"""SafeRoute Backend — Geodesy helpers (distance, bearing, bounds, formatting)"""

import math
from typing import Optional

from saferoute.models import BoundingBox, Coordinate

EARTH_RADIUS_M = 6_371_000
KM_PER_DEGREE_LAT = 111.0

_COMPASS_POINTS = ["N", "NE", "E", "SE", "S", "SW", "W", "NW"]


def haversine_distance_meters(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance in meters (Haversine formula)."""
    dlat = math.radians(b.latitude - a.latitude)
    dlng = math.radians(b.longitude - a.longitude)
    h = (math.sin(dlat / 2) ** 2
         + math.cos(math.radians(a.latitude))
         * math.cos(math.radians(b.latitude))
         * math.sin(dlng / 2) ** 2)
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def bounding_box(center: Coordinate, radius_km: float) -> BoundingBox:
    """Approximate box around center: ~111 km per degree, longitude scaled by cos(lat)."""
    lat_delta = radius_km / KM_PER_DEGREE_LAT
    lng_delta = radius_km / (KM_PER_DEGREE_LAT * math.cos(math.radians(center.latitude)))
    return BoundingBox(
        minLat=center.latitude - lat_delta,
        maxLat=center.latitude + lat_delta,
        minLng=center.longitude - lng_delta,
        maxLng=center.longitude + lng_delta,
    )


def is_within_bounds(coord: Coordinate, box: BoundingBox) -> bool:
    return (box.minLat <= coord.latitude <= box.maxLat
            and box.minLng <= coord.longitude <= box.maxLng)


def bearing(start: Coordinate, end: Coordinate) -> float:
    """Initial bearing from start to end, in degrees [0, 360)."""
    lat1 = math.radians(start.latitude)
    lat2 = math.radians(end.latitude)
    dlng = math.radians(end.longitude - start.longitude)
    y = math.sin(dlng) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(dlng)
    return (math.degrees(math.atan2(y, x)) + 360) % 360


def compass_direction(bearing_deg: float) -> str:
    index = int(math.floor(bearing_deg / 45 + 0.5)) % 8
    return _COMPASS_POINTS[index]


def center_of_coordinates(coords: list[Coordinate]) -> Coordinate:
    if not coords:
        return Coordinate(latitude=0.0, longitude=0.0)
    return Coordinate(
        latitude=sum(c.latitude for c in coords) / len(coords),
        longitude=sum(c.longitude for c in coords) / len(coords),
    )


def midpoint(a: Coordinate, b: Coordinate) -> Coordinate:
    """Simple average of two points (not a path midpoint)."""
    return center_of_coordinates([a, b])


def find_nearest_coordinate(
    target: Coordinate, coords: list[Coordinate]
) -> Optional[tuple[Coordinate, float, int]]:
    """Return (coordinate, distance_m, index) of the closest point, or None if coords is empty."""
    if not coords:
        return None
    best_idx, best_dist = 0, haversine_distance_meters(target, coords[0])
    for i, c in enumerate(coords[1:], start=1):
        d = haversine_distance_meters(target, c)
        if d < best_dist:
            best_idx, best_dist = i, d
    return coords[best_idx], best_dist, best_idx


def format_distance(distance_km: float) -> str:
    if distance_km < 1:
        return f"{round(distance_km * 1000)} m"
    return f"{distance_km:.1f} km"


def format_duration(duration_seconds: float) -> str:
    minutes = round(duration_seconds / 60)
    if minutes < 60:
        return f"{minutes} min"
    return f"{minutes // 60}h {minutes % 60}m"
