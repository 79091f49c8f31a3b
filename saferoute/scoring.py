"""SafeRoute Backend — Route safety scoring

Combines community road ratings (lighting, crowd) with hazard-report
penalties into a weighted 0-100 safety score.
"""

import logging
import math
from dataclasses import dataclass, field

from saferoute.config import DEFAULT_SCORING_CONFIG, ScoringConfig
from saferoute.errors import ScoringDataError
from saferoute.geo import midpoint
from saferoute.hazards import aggregate_hazards
from saferoute.models import (
    Coordinate, HazardZone, RouteRequest, SafetyBreakdown, SafetyFactors,
)

logger = logging.getLogger("saferoute.scoring")

_ROUTE_KEY_PRECISION = 4

# (minimum score, label), checked top to bottom
_SCORE_BANDS = [
    (80, "Safest"),
    (65, "Safe"),
    (50, "Moderate"),
]


@dataclass
class SafetyAssessment:
    score: int
    breakdown: SafetyBreakdown
    hazardZones: list[HazardZone] = field(default_factory=list)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_score(value: float, low: int = 0, high: int = 100) -> int:
    return int(min(high, max(low, value)))


def route_key_for(origin: Coordinate, destination: Coordinate) -> str:
    """Identity string grouping routes between near-identical endpoints (4 d.p.)."""
    p = _ROUTE_KEY_PRECISION
    return (f"{origin.latitude:.{p}f}_{origin.longitude:.{p}f}_"
            f"{destination.latitude:.{p}f}_{destination.longitude:.{p}f}")


def route_name(index: int, score: int) -> str:
    for threshold, label in _SCORE_BANDS:
        if score >= threshold:
            return f"Route {index + 1} - {label}"
    return f"Route {index + 1} - Caution"


def safety_factors_from(breakdown: SafetyBreakdown) -> SafetyFactors:
    """Map 0-100 component scores onto the 0-5 factor scale."""
    return SafetyFactors(
        lighting=breakdown.lightingScore / 20,
        crowd=breakdown.crowdScore / 20,
        reports=breakdown.reportScore / 20,
    )


async def calculate_route_safety_score(
    waypoints: list[Coordinate],
    request: RouteRequest,
    reports,
    ratings,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> SafetyAssessment:
    """Score one route.

    `reports` must provide ``await fetch_reports_near(center, radius_km)`` and
    `ratings` must provide ``await fetch_aggregated_rating(route_key)``.
    Failures from either lookup are re-raised as ScoringDataError so the
    caller can degrade this route alone.
    """
    center = midpoint(request.origin, request.destination)
    route_key = route_key_for(request.origin, request.destination)

    try:
        nearby_reports = await reports.fetch_reports_near(center, config.report_search_radius_km)
        rating = await ratings.fetch_aggregated_rating(route_key)
    except Exception as e:
        raise ScoringDataError(f"community data lookup failed for {route_key}: {e}") from e

    if rating is not None:
        avg_lighting = rating.avgLightingQuality
        avg_crowd = rating.avgCrowdLevel
    else:
        avg_lighting = avg_crowd = config.default_rating

    lighting_score = (avg_lighting / 5) * 100
    crowd_score = (avg_crowd / 5) * 100
    hazards = aggregate_hazards(waypoints, nearby_reports, config)

    w = config.weights
    total = round_half_up(
        lighting_score * w.lighting
        + crowd_score * w.crowd
        + hazards.reportScore * w.reports
    )
    total = clamp_score(total)

    logger.debug(
        f"Route {route_key}: lighting={lighting_score:.0f} crowd={crowd_score:.0f} "
        f"reports={hazards.reportScore:.0f} -> {total}"
    )

    return SafetyAssessment(
        score=total,
        breakdown=SafetyBreakdown(
            lightingScore=round_half_up(lighting_score),
            crowdScore=round_half_up(crowd_score),
            reportScore=round_half_up(hazards.reportScore),
            totalScore=total,
        ),
        hazardZones=hazards.hazardZones,
    )
