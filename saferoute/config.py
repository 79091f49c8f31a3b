"""SafeRoute Backend — Configuration & Constants"""

import math
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

# Load .env from project root (one level up from saferoute/)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path)

# ── Routing provider (OSRM, no key needed) ──
OSRM_BASE_URL = os.environ.get("OSRM_BASE_URL", "https://router.project-osrm.org/route/v1/foot")
ROUTING_TIMEOUT_SECONDS = float(os.environ.get("ROUTING_TIMEOUT_SECONDS", "10"))
ROUTE_ALTERNATIVES = int(os.environ.get("ROUTE_ALTERNATIVES", "3"))
ROUTE_CACHE_TTL = int(os.environ.get("ROUTE_CACHE_TTL", "300"))  # seconds

# ── API ──
API_VERSION = "2.0.0"
RATE_LIMIT = int(os.environ.get("RATE_LIMIT", "30"))  # requests per minute per IP
RATE_WINDOW = 60  # seconds

# ── Community data ──
REPORT_FETCH_LIMIT = 500


class SafetyWeights(BaseModel):
    """Weights of the composite safety score. Must sum to 1.0."""

    lighting: float = Field(default=0.35, ge=0.0, le=1.0)  # street lighting quality
    crowd: float = Field(default=0.30, ge=0.0, le=1.0)     # pedestrian density
    reports: float = Field(default=0.35, ge=0.0, le=1.0)   # community hazard reports

    @model_validator(mode="after")
    def _check_sum(self):
        total = self.lighting + self.crowd + self.reports
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise ValueError(f"safety weights must sum to 1.0, got {total}")
        return self


class ScoringConfig(BaseModel):
    """Tunable parameters for hazard aggregation and route scoring."""

    weights: SafetyWeights = Field(default_factory=SafetyWeights)
    proximity_threshold_m: float = 100.0
    report_search_radius_km: float = 5.0
    hazard_radius_m: float = 50.0
    base_report_score: float = 100.0
    category_penalties: dict[str, float] = Field(
        default_factory=lambda: {"harassment": 25.0, "suspicious_activity": 20.0}
    )
    default_penalty: float = 15.0
    high_severity_penalty: float = 15.0  # penalties above this are "high"
    default_rating: float = 3.0
    neutral_score: int = 50


SAFETY_WEIGHTS = SafetyWeights()
DEFAULT_SCORING_CONFIG = ScoringConfig()
