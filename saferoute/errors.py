"""SafeRoute Backend — Error taxonomy"""


class SafeRouteError(Exception):
    """Base class for route-finding errors."""


class TransportError(SafeRouteError):
    """The routing provider call failed, returned an error status, or timed out."""


class NoRouteFound(SafeRouteError):
    """The routing provider returned zero routes."""


class ScoringDataError(SafeRouteError):
    """Report or rating lookup failed while scoring a single route."""


class DecodeError(SafeRouteError, ValueError):
    """Malformed encoded polyline."""
