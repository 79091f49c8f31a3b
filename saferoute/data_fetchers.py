"""SafeRoute Backend — External routing provider (OSRM public API)"""

import asyncio
import logging
from typing import Optional

import httpx
from cachetools import TTLCache

from saferoute.config import OSRM_BASE_URL, ROUTE_ALTERNATIVES, ROUTE_CACHE_TTL, ROUTING_TIMEOUT_SECONDS
from saferoute.errors import TransportError
from saferoute.models import Coordinate

logger = logging.getLogger("saferoute.fetchers")

# Shared async HTTP client
client = httpx.AsyncClient(timeout=ROUTING_TIMEOUT_SECONDS, headers={"Accept": "application/json"})

# Provider responses keyed by request URL
route_cache = TTLCache(maxsize=256, ttl=ROUTE_CACHE_TTL)


def build_route_url(origin: Coordinate, destination: Coordinate, alternatives: int = ROUTE_ALTERNATIVES) -> str:
    # OSRM takes longitude,latitude pairs
    return (
        f"{OSRM_BASE_URL}/{origin.longitude},{origin.latitude};"
        f"{destination.longitude},{destination.latitude}"
        f"?overview=full&geometries=polyline&alternatives={alternatives}"
    )


def _parse_route(route) -> dict:
    if not isinstance(route, dict):
        raise TransportError(f"Routing provider sent a malformed route: {route!r:.80}")
    try:
        distance = float(route.get("distance") or 0)
        duration = float(route.get("duration") or 0)
    except (TypeError, ValueError) as e:
        raise TransportError(f"Routing provider sent a malformed route: {e}") from e
    # Geometry is passed through as-is; the decoder rejects non-strings per route
    return {"distanceMeters": distance, "durationSeconds": duration, "encodedPolyline": route.get("geometry")}


async def fetch_external_routes(
    origin: Coordinate,
    destination: Coordinate,
    alternatives: int = ROUTE_ALTERNATIVES,
    http_client: Optional[httpx.AsyncClient] = None,
    timeout: float = ROUTING_TIMEOUT_SECONDS,
) -> list[dict]:
    """Fetch walking routes from OSRM.

    Returns a list of ``{distanceMeters, durationSeconds, encodedPolyline}``
    dicts, empty when the provider finds no route. Raises TransportError on
    network failure, timeout, a non-2xx status or a body that is not an
    OSRM route response.
    """
    url = build_route_url(origin, destination, alternatives)
    cached = route_cache.get(url)
    if cached is not None:
        return [dict(r) for r in cached]

    http = http_client or client
    try:
        r = await asyncio.wait_for(http.get(url), timeout=timeout)
    except asyncio.TimeoutError as e:
        raise TransportError(f"Routing provider timed out after {timeout}s") from e
    except httpx.HTTPError as e:
        raise TransportError(f"Routing provider unreachable: {e}") from e

    if r.status_code != 200:
        logger.warning(f"OSRM error {r.status_code}: {r.text[:200]}")
        raise TransportError(f"Routing provider returned HTTP {r.status_code}")

    try:
        data = r.json()
    except ValueError as e:
        raise TransportError(f"Routing provider sent invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise TransportError(f"Routing provider sent {type(data).__name__}, expected an object")

    routes = data.get("routes") or []
    if not isinstance(routes, list):
        raise TransportError(f"Routing provider sent routes as {type(routes).__name__}")
    if not routes:
        logger.warning(f"OSRM returned no routes ({data.get('code', 'unknown')})")
        return []

    results = [_parse_route(route) for route in routes]
    logger.info(f"OSRM returned {len(results)} routes")
    route_cache[url] = results
    return [dict(r) for r in results]
