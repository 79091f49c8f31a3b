"""SafeRoute Backend — Route ranking pipeline

IDLE -> FETCHING -> SCORING -> RANKED, or FAILED when even fallback
synthesis cannot produce a route.
"""

import asyncio
import enum
import logging

from saferoute.config import DEFAULT_SCORING_CONFIG, ScoringConfig
from saferoute.errors import NoRouteFound, ScoringDataError, TransportError
from saferoute.mock_routes import generate_mock_routes
from saferoute.models import (
    Coordinate, RouteCandidate, RouteRequest, RouteResult, SafetyFactors, ScoredRoute,
)
from saferoute.route_source import RouteSource
from saferoute.scoring import (
    calculate_route_safety_score, route_name, safety_factors_from,
)

logger = logging.getLogger("saferoute.pipeline")


class PipelineState(str, enum.Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    SCORING = "scoring"
    RANKED = "ranked"
    FAILED = "failed"


def select_best_index(routes: list[ScoredRoute]) -> int:
    """Index of the highest safety score; the first one wins ties."""
    best_idx = 0
    for idx, route in enumerate(routes):
        if route.safetyScore > routes[best_idx].safetyScore:
            best_idx = idx
    return best_idx


class RouteRankingPipeline:
    """Scores and ranks candidate routes for a single request."""

    def __init__(
        self,
        route_source: RouteSource,
        reports,
        ratings,
        config: ScoringConfig = DEFAULT_SCORING_CONFIG,
    ):
        self.route_source = route_source
        self.reports = reports
        self.ratings = ratings
        self.config = config
        self.state = PipelineState.IDLE

    async def run(self, origin: Coordinate, destination: Coordinate) -> RouteResult:
        request = RouteRequest(origin=origin, destination=destination)

        self.state = PipelineState.FETCHING
        try:
            candidates = await self.route_source.get_candidates(origin, destination)
            if not candidates:
                raise NoRouteFound("routing provider returned no usable routes")
        except (TransportError, NoRouteFound) as e:
            logger.warning(f"Using fallback routes: {e}")
            return self._fallback(origin, destination)

        self.state = PipelineState.SCORING
        logger.info(f"Scoring {len(candidates)} candidate routes")
        routes = await asyncio.gather(*(
            self._score_candidate(idx, candidate, request)
            for idx, candidate in enumerate(candidates)
        ))
        routes = list(routes)

        best_idx = select_best_index(routes)
        routes[best_idx].isBestRoute = True
        self.state = PipelineState.RANKED
        logger.info(f"Best route: {routes[best_idx].name} ({routes[best_idx].safetyScore})")
        return RouteResult(routes=routes, bestRouteIndex=best_idx, status="success")

    async def _score_candidate(self, idx: int, candidate: RouteCandidate, request: RouteRequest) -> ScoredRoute:
        """Score one candidate; lookup failures give the neutral score.

        A neutral route is named by the same score bands as any other
        ("Route n - Moderate"), not with a bare "Route n".
        """
        try:
            assessment = await calculate_route_safety_score(
                candidate.waypoints, request, self.reports, self.ratings, self.config,
            )
        except ScoringDataError as e:
            logger.warning(f"Route {idx + 1} scored as neutral: {e}")
            score = self.config.neutral_score
            return ScoredRoute(
                **candidate.model_dump(),
                id=f"route_{idx}",
                name=route_name(idx, score),
                safetyScore=score,
                safetyFactors=SafetyFactors(),
            )

        return ScoredRoute(
            **candidate.model_dump(),
            id=f"route_{idx}",
            name=route_name(idx, assessment.score),
            safetyScore=assessment.score,
            safetyFactors=safety_factors_from(assessment.breakdown),
            hazardZones=assessment.hazardZones,
        )

    def _fallback(self, origin: Coordinate, destination: Coordinate) -> RouteResult:
        try:
            result = generate_mock_routes(origin, destination)
        except Exception as e:
            logger.error(f"Fallback route synthesis failed: {e}")
            self.state = PipelineState.FAILED
            return RouteResult(routes=[], bestRouteIndex=-1, status="error", errorMessage=str(e))

        if not result.routes:
            self.state = PipelineState.FAILED
            return RouteResult(
                routes=[], bestRouteIndex=-1, status="no_route",
                errorMessage="No route could be found",
            )

        self.state = PipelineState.RANKED
        return result


async def find_safe_routes(
    origin: Coordinate,
    destination: Coordinate,
    reports,
    ratings,
    route_source: RouteSource | None = None,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> RouteResult:
    pipeline = RouteRankingPipeline(route_source or RouteSource(), reports, ratings, config)
    return await pipeline.run(origin, destination)
