"""SafeRoute Backend — Route source adapter

Fetches candidate geometries from the routing provider and decodes them.
Fallback synthesis lives in mock_routes; the pipeline decides when to use it.
"""

import logging

from saferoute.config import ROUTE_ALTERNATIVES
from saferoute.data_fetchers import fetch_external_routes
from saferoute.errors import DecodeError
from saferoute.models import Coordinate, RouteCandidate
from saferoute.polyline import decode_polyline

logger = logging.getLogger("saferoute.route_source")


class RouteSource:
    def __init__(self, fetch_routes=fetch_external_routes, alternatives: int = ROUTE_ALTERNATIVES):
        self._fetch_routes = fetch_routes
        self.alternatives = alternatives

    async def get_candidates(self, origin: Coordinate, destination: Coordinate) -> list[RouteCandidate]:
        """Return decoded candidates; an empty list means "no route".

        TransportError from the provider propagates. A route whose polyline
        fails to decode is dropped on its own.
        """
        raw_routes = await self._fetch_routes(origin, destination, self.alternatives)

        candidates = []
        for idx, raw in enumerate(raw_routes):
            encoded = raw.get("encodedPolyline")
            try:
                waypoints = decode_polyline(encoded)
            except DecodeError as e:
                logger.warning(f"Dropping route {idx + 1}: {e}")
                continue
            if not waypoints:
                logger.warning(f"Dropping route {idx + 1}: empty geometry")
                continue
            candidates.append(RouteCandidate(
                distanceMeters=raw.get("distanceMeters", 0.0),
                durationSeconds=raw.get("durationSeconds", 0.0),
                encodedPolyline=encoded,
                waypoints=waypoints,
            ))
            logger.debug(f"Route {idx + 1}: {len(waypoints)} points, {raw.get('distanceMeters', 0):.0f} m")

        return candidates
