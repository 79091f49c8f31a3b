"""SafeRoute Backend — Hazard aggregation along a route

A community report "hits" a route when any sampled waypoint lies strictly
within the proximity threshold of the report. Only waypoints are tested, not
the segments between them, so a sparse waypoint list can miss a report that
sits near the line but far from every vertex.
"""

import logging
from dataclasses import dataclass, field

from saferoute.config import DEFAULT_SCORING_CONFIG, ScoringConfig
from saferoute.geo import haversine_distance_meters
from saferoute.models import CommunityReport, Coordinate, HazardZone

logger = logging.getLogger("saferoute.hazards")


@dataclass
class HazardAssessment:
    reportScore: float
    hazardZones: list[HazardZone] = field(default_factory=list)


def report_penalty(category: str, config: ScoringConfig = DEFAULT_SCORING_CONFIG) -> float:
    return config.category_penalties.get(category, config.default_penalty)


def is_near_route(
    waypoints: list[Coordinate], location: Coordinate, threshold_m: float
) -> bool:
    return any(haversine_distance_meters(wp, location) < threshold_m for wp in waypoints)


def aggregate_hazards(
    waypoints: list[Coordinate],
    reports: list[CommunityReport],
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> HazardAssessment:
    """Penalise the route's report score for every nearby report and emit hazard zones.

    Penalties are subtracted from the base score and the total is clamped to
    >= 0 once, after all hits (not per hit).
    """
    report_score = config.base_report_score
    zones: list[HazardZone] = []

    for report in reports:
        if not is_near_route(waypoints, report.location, config.proximity_threshold_m):
            continue
        penalty = report_penalty(report.category, config)
        report_score -= penalty
        zones.append(HazardZone(
            center=report.location,
            radiusMeters=config.hazard_radius_m,
            severity="high" if penalty > config.high_severity_penalty else "medium",
            reason=report.title,
        ))

    if zones:
        logger.debug(f"{len(zones)} of {len(reports)} reports lie on route")

    report_score = max(0.0, report_score)
    return HazardAssessment(reportScore=report_score, hazardZones=zones)
