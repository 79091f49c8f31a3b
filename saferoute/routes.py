"""SafeRoute Backend — FastAPI Routes"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from saferoute.config import API_VERSION, DEFAULT_SCORING_CONFIG, RATE_LIMIT, RATE_WINDOW
from saferoute.data_fetchers import client
from saferoute.models import (
    AggregatedRoadRating, CommunityReport, Coordinate, RatingCreate, ReportCreate,
    RoadRating, RouteRequest, RouteResult,
)
from saferoute.pipeline import RouteRankingPipeline
from saferoute.route_source import RouteSource
from saferoute.store import RatingStore, ReportStore

logger = logging.getLogger("saferoute")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("SafeRoute API starting")
    yield
    await client.aclose()
    logger.info("SafeRoute API stopped")


# ─────────────────────────── App Setup ──────────────────────────

app = FastAPI(title="SafeRoute API", version=API_VERSION, lifespan=lifespan)

_allowed_origins = [
    f"http://localhost:{p}" for p in range(8081, 8090)
] + [
    f"http://127.0.0.1:{p}" for p in range(8081, 8090)
] + [
    f"http://localhost:{p}" for p in range(19000, 19007)  # Expo dev server
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Collaborators shared by all requests
report_store = ReportStore()
rating_store = RatingStore()
route_source = RouteSource()
scoring_config = DEFAULT_SCORING_CONFIG


# ─────────────────────────── Rate Limiting ──────────────────────

_rate_store: dict[str, list[float]] = {}
_RATE_EVICT_INTERVAL = 300  # evict stale IPs every 5 minutes
_last_rate_evict = 0.0


@app.middleware("http")
async def rate_limit_middleware(request: Request, call_next):
    client_ip = request.client.host if request.client else "unknown"
    now = time.time()

    # Periodically evict stale IPs to bound memory
    global _last_rate_evict
    if now - _last_rate_evict > _RATE_EVICT_INTERVAL:
        stale_ips = [ip for ip, timestamps in _rate_store.items()
                     if not timestamps or now - timestamps[-1] > RATE_WINDOW * 2]
        for ip in stale_ips:
            del _rate_store[ip]
        _last_rate_evict = now

    recent = [t for t in _rate_store.get(client_ip, []) if now - t < RATE_WINDOW]
    if len(recent) >= RATE_LIMIT:
        _rate_store[client_ip] = recent
        return JSONResponse(
            status_code=429,
            content={"detail": "Rate limit exceeded. Try again in a minute."},
        )

    recent.append(now)
    _rate_store[client_ip] = recent
    return await call_next(request)


# ─────────────────────────── Safe Routes ────────────────────────

@app.post("/api/routes", response_model=RouteResult)
async def find_routes(req: RouteRequest):
    pipeline = RouteRankingPipeline(route_source, report_store, rating_store, scoring_config)
    result = await pipeline.run(req.origin, req.destination)
    logger.info(f"Route request finished: {result.status}, {len(result.routes)} routes")
    return result


# ─────────────────────────── Community Reports ──────────────────

async def _report_or_404(report_id: str) -> CommunityReport:
    report = await report_store.get(report_id)
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return report


@app.post("/api/reports", response_model=CommunityReport)
async def submit_report(report: ReportCreate):
    return await report_store.create(report)


@app.get("/api/reports")
async def get_reports(lat: float, lng: float, radius_km: float = 5.0):
    try:
        center = Coordinate(latitude=lat, longitude=lng)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    nearby = await report_store.fetch_reports_near(center, radius_km)
    return {"reports": [r.model_dump() for r in nearby]}


@app.get("/api/reports/{report_id}", response_model=CommunityReport)
async def get_report(report_id: str):
    return await _report_or_404(report_id)


@app.post("/api/reports/{report_id}/upvote", response_model=CommunityReport)
async def upvote_report(report_id: str):
    await _report_or_404(report_id)
    return await report_store.upvote(report_id)


@app.post("/api/reports/{report_id}/downvote", response_model=CommunityReport)
async def downvote_report(report_id: str):
    await _report_or_404(report_id)
    return await report_store.downvote(report_id)


@app.post("/api/reports/{report_id}/resolve", response_model=CommunityReport)
async def resolve_report(report_id: str):
    await _report_or_404(report_id)
    return await report_store.resolve(report_id)


@app.delete("/api/reports/{report_id}")
async def delete_report(report_id: str):
    await _report_or_404(report_id)
    await report_store.delete(report_id)
    return {"id": report_id, "status": "deleted"}


# ─────────────────────────── Road Ratings ───────────────────────

@app.post("/api/ratings", response_model=RoadRating)
async def submit_rating(rating: RatingCreate):
    return await rating_store.create(rating)


@app.get("/api/ratings/{route_id}")
async def get_route_ratings(route_id: str):
    ratings = await rating_store.ratings_for_route(route_id)
    return {"ratings": [r.model_dump() for r in ratings]}


@app.get("/api/ratings/{route_id}/aggregate", response_model=AggregatedRoadRating)
async def get_aggregated_rating(route_id: str):
    aggregated = await rating_store.fetch_aggregated_rating(route_id)
    if aggregated is None:
        raise HTTPException(status_code=404, detail="No ratings for this route")
    return aggregated


@app.get("/api/users/{user_id}/ratings")
async def get_user_ratings(user_id: str):
    ratings = await rating_store.ratings_for_user(user_id)
    return {"ratings": [r.model_dump() for r in ratings]}


# ─────────────────────────── Utility Endpoints ──────────────────

@app.get("/api/health")
async def health():
    return {"status": "ok", "version": API_VERSION}
