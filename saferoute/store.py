"""SafeRoute Backend — In-memory community report and road rating stores"""

import logging
import time
import uuid
from typing import Optional

from saferoute.config import REPORT_FETCH_LIMIT
from saferoute.geo import haversine_distance_meters
from saferoute.models import (
    AggregatedRoadRating, CommunityReport, Coordinate, RatingCreate, ReportCreate, RoadRating,
)
from saferoute.scoring import round_half_up, route_key_for

logger = logging.getLogger("saferoute.store")


def _now_ms() -> float:
    return time.time() * 1000


class ReportStore:
    """Community hazard reports. Missing ids raise KeyError."""

    def __init__(self, max_reports: int = 1000):
        self._reports: dict[str, CommunityReport] = {}
        self._max_reports = max_reports

    async def create(self, data: ReportCreate) -> CommunityReport:
        now = _now_ms()
        report = CommunityReport(
            id=str(uuid.uuid4())[:8],
            **data.model_dump(),
            createdAt=now,
            updatedAt=now,
        )
        self._reports[report.id] = report
        # Keep only the newest reports
        if len(self._reports) > self._max_reports:
            oldest = min(self._reports.values(), key=lambda r: r.createdAt)
            del self._reports[oldest.id]

        logger.info(
            f"Report submitted: {report.category} at "
            f"({report.location.latitude:.4f}, {report.location.longitude:.4f})"
        )
        return report

    async def list_active(self, limit: int = REPORT_FETCH_LIMIT) -> list[CommunityReport]:
        active = [r for r in self._reports.values() if r.status == "active"]
        active.sort(key=lambda r: r.createdAt, reverse=True)
        return active[:limit]

    async def fetch_reports_near(self, center: Coordinate, radius_km: float = 5.0) -> list[CommunityReport]:
        """Active reports within radius_km of center (great-circle)."""
        radius_m = radius_km * 1000
        return [
            r for r in await self.list_active()
            if haversine_distance_meters(center, r.location) <= radius_m
        ]

    async def get(self, report_id: str) -> Optional[CommunityReport]:
        return self._reports.get(report_id)

    def _require(self, report_id: str) -> CommunityReport:
        report = self._reports.get(report_id)
        if report is None:
            raise KeyError(report_id)
        return report

    async def upvote(self, report_id: str) -> CommunityReport:
        report = self._require(report_id)
        report.upvotes += 1
        report.updatedAt = _now_ms()
        return report

    async def downvote(self, report_id: str) -> CommunityReport:
        report = self._require(report_id)
        report.downvotes += 1
        report.updatedAt = _now_ms()
        return report

    async def resolve(self, report_id: str) -> CommunityReport:
        report = self._require(report_id)
        report.status = "resolved"
        report.updatedAt = _now_ms()
        logger.info(f"Report {report_id} resolved")
        return report

    async def delete(self, report_id: str) -> None:
        self._require(report_id)
        del self._reports[report_id]

    def clear(self):
        self._reports.clear()


class RatingStore:
    """Road ratings keyed by route id (see scoring.route_key_for)."""

    def __init__(self):
        self._ratings: list[RoadRating] = []

    async def create(self, data: RatingCreate) -> RoadRating:
        route_id = data.routeId or route_key_for(data.startLocation, data.endLocation)
        rating = RoadRating(
            id=str(uuid.uuid4())[:8],
            userId=data.userId,
            routeId=route_id,
            startLocation=data.startLocation,
            endLocation=data.endLocation,
            lightingQuality=data.lightingQuality,
            crowdLevel=data.crowdLevel,
            safetyFeeling=data.safetyFeeling,
            comment=data.comment,
            createdAt=_now_ms(),
        )
        self._ratings.append(rating)
        logger.info(f"Rating submitted for {route_id}")
        return rating

    async def ratings_for_route(self, route_id: str) -> list[RoadRating]:
        matches = [r for r in self._ratings if r.routeId == route_id]
        return sorted(matches, key=lambda r: r.createdAt, reverse=True)

    async def ratings_for_user(self, user_id: str) -> list[RoadRating]:
        matches = [r for r in self._ratings if r.userId == user_id]
        return sorted(matches, key=lambda r: r.createdAt, reverse=True)

    async def fetch_aggregated_rating(self, route_id: str) -> Optional[AggregatedRoadRating]:
        ratings = await self.ratings_for_route(route_id)
        if not ratings:
            return None

        count = len(ratings)
        avg_lighting = sum(r.lightingQuality for r in ratings) / count
        avg_crowd = sum(r.crowdLevel for r in ratings) / count
        avg_safety = sum(r.safetyFeeling for r in ratings) / count
        # Mean of three 1-5 averages mapped onto 0-100
        overall = ((avg_lighting + avg_crowd + avg_safety) / 3 - 1) * 25

        return AggregatedRoadRating(
            routeId=route_id,
            avgLightingQuality=avg_lighting,
            avgCrowdLevel=avg_crowd,
            avgSafetyFeeling=avg_safety,
            totalRatings=count,
            overallScore=round_half_up(overall),
        )

    def clear(self):
        self._ratings.clear()
