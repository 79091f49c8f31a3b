"""SafeRoute Backend — Synthetic fallback routes

Used when the routing provider is unreachable or finds nothing. Geometry is
a straight-line interpolation with a per-type perturbation; scores and
factors are presets, not computed, since no community data backs them.
"""

import logging

import numpy as np

from saferoute.geo import haversine_distance_meters
from saferoute.models import Coordinate, RouteResult, SafetyFactors, ScoredRoute

logger = logging.getLogger("saferoute.mock_routes")

WALKING_SPEED_MPS = 1.4
INTERMEDIATE_STEPS = 15
PERTURBATION_DEG = 0.0003  # ~33 m

# id, name, waypoint type, distance factor, preset score, preset factors
_MOCK_ROUTE_PRESETS = [
    ("route_1", "Main Road (Safest)", "direct", 1.1, 85, (4.2, 3.8, 4.5)),
    ("route_2", "Busy Streets", "populated", 1.3, 72, (3.2, 4.5, 3.8)),
    ("route_3", "Shortest Path", "short", 1.0, 58, (2.5, 2.0, 3.0)),
]


def generate_waypoints(origin: Coordinate, destination: Coordinate, kind: str) -> list[Coordinate]:
    """Origin, INTERMEDIATE_STEPS perturbed points, destination."""
    t = np.arange(1, INTERMEDIATE_STEPS + 1) / (INTERMEDIATE_STEPS + 1)
    lat = origin.latitude + (destination.latitude - origin.latitude) * t
    lng = origin.longitude + (destination.longitude - origin.longitude) * t

    v = PERTURBATION_DEG
    if kind == "direct":
        lat = lat + np.sin(t * np.pi) * v
        lng = lng + np.cos(t * np.pi * 2) * v * 0.5
    elif kind == "populated":
        lng = lng + np.sin(t * np.pi) * v * 2
        lat = lat + np.cos(t * np.pi) * v
    else:
        lat = lat + np.sin(t * np.pi * 3) * v * 0.2

    # Perturbation may step past a pole or the antimeridian
    lat = np.clip(lat, -90.0, 90.0)
    lng = (lng + 180.0) % 360.0 - 180.0

    middle = [
        Coordinate(latitude=float(la), longitude=float(lo))
        for la, lo in zip(lat, lng)
    ]
    return [origin, *middle, destination]


def generate_mock_routes(origin: Coordinate, destination: Coordinate) -> RouteResult:
    distance = haversine_distance_meters(origin, destination)
    routes = []
    for route_id, name, kind, factor, score, (lighting, crowd, reports) in _MOCK_ROUTE_PRESETS:
        route_distance = distance * factor
        routes.append(ScoredRoute(
            id=route_id,
            name=name,
            distanceMeters=route_distance,
            durationSeconds=route_distance / WALKING_SPEED_MPS,
            waypoints=generate_waypoints(origin, destination, kind),
            safetyScore=score,
            safetyFactors=SafetyFactors(lighting=lighting, crowd=crowd, reports=reports),
            isBestRoute=(route_id == "route_1"),
        ))

    logger.info(f"Generated {len(routes)} fallback routes ({distance:.0f} m straight-line)")
    return RouteResult(routes=routes, bestRouteIndex=0, status="success")
