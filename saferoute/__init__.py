"""SafeRoute: safety-scored walking routes for pedestrians at night."""

from saferoute.pipeline import find_safe_routes
from saferoute.polyline import decode_polyline

__all__ = ["find_safe_routes", "decode_polyline"]
