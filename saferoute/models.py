"""SafeRoute Backend — Pydantic Models"""

from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

ReportCategory = Literal["dark_spot", "stray_dog", "harassment", "light_failure", "suspicious_activity"]
ReportStatus = Literal["active", "resolved", "expired"]
HazardSeverity = Literal["low", "medium", "high"]
RouteStatus = Literal["success", "no_route", "error"]


class Coordinate(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class BoundingBox(BaseModel):
    minLat: float
    maxLat: float
    minLng: float
    maxLng: float


# ─────────────────────────── Community Reports ──────────────────

class ReportCreate(BaseModel):
    title: str = Field(min_length=3, max_length=100)
    description: str = Field(default="", max_length=500)
    category: ReportCategory
    location: Coordinate
    reporterUid: str = "anonymous"


class CommunityReport(BaseModel):
    id: str
    title: str
    description: str = ""
    category: ReportCategory
    location: Coordinate
    reporterUid: str = "anonymous"
    createdAt: float = 0.0  # epoch millis
    updatedAt: float = 0.0
    status: ReportStatus = "active"
    upvotes: int = 0
    downvotes: int = 0


# ─────────────────────────── Road Ratings ───────────────────────

class RatingCreate(BaseModel):
    startLocation: Coordinate
    endLocation: Coordinate
    routeId: Optional[str] = None  # derived from the endpoints when omitted
    userId: str = "anonymous"
    lightingQuality: int = Field(default=3, ge=1, le=5)
    crowdLevel: int = Field(default=3, ge=1, le=5)
    safetyFeeling: int = Field(default=3, ge=1, le=5)
    comment: Optional[str] = None


class RoadRating(BaseModel):
    id: str
    userId: str
    routeId: str
    startLocation: Coordinate
    endLocation: Coordinate
    lightingQuality: int
    crowdLevel: int
    safetyFeeling: int
    comment: Optional[str] = None
    createdAt: float = 0.0


class AggregatedRoadRating(BaseModel):
    routeId: str = ""
    avgLightingQuality: float = Field(ge=1, le=5)
    avgCrowdLevel: float = Field(ge=1, le=5)
    avgSafetyFeeling: float = Field(ge=1, le=5)
    totalRatings: int = 0
    overallScore: int = 0


# ─────────────────────────── Routes ─────────────────────────────

class RouteRequest(BaseModel):
    origin: Coordinate
    destination: Coordinate


class HazardZone(BaseModel):
    center: Coordinate
    radiusMeters: float
    severity: HazardSeverity
    reason: str


class SafetyFactors(BaseModel):
    lighting: float = Field(default=0.0, ge=0, le=5)
    crowd: float = Field(default=0.0, ge=0, le=5)
    reports: float = Field(default=0.0, ge=0, le=5)


class SafetyBreakdown(BaseModel):
    lightingScore: int
    crowdScore: int
    reportScore: int
    totalScore: int


class RouteCandidate(BaseModel):
    distanceMeters: float
    durationSeconds: float
    encodedPolyline: str = ""
    waypoints: list[Coordinate] = []


class ScoredRoute(RouteCandidate):
    id: str
    name: str
    safetyScore: int = Field(ge=0, le=100)
    safetyFactors: SafetyFactors = Field(default_factory=SafetyFactors)
    hazardZones: list[HazardZone] = []
    isBestRoute: bool = False


class RouteResult(BaseModel):
    routes: list[ScoredRoute]
    bestRouteIndex: int
    status: RouteStatus
    errorMessage: Optional[str] = None
