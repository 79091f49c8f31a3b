"""SafeRoute Backend — Encoded polyline codec (Google / OSRM format, precision 1e5)"""

from cachetools import LRUCache, cached

from saferoute.errors import DecodeError
from saferoute.models import Coordinate

_PRECISION = 1e5
_DECODE_CACHE = LRUCache(maxsize=256)


def _read_varint(encoded: str, index: int) -> tuple[int, int]:
    """Read one zig-zag varint starting at index. Returns (value, next_index)."""
    shift = 0
    result = 0
    while True:
        if index >= len(encoded):
            raise DecodeError(f"truncated polyline at offset {index}")
        b = ord(encoded[index]) - 63
        if b < 0 or b > 0x3F:
            raise DecodeError(f"invalid polyline character {encoded[index]!r} at offset {index}")
        index += 1
        result |= (b & 0x1F) << shift
        shift += 5
        if b < 0x20:
            break
    value = ~(result >> 1) if (result & 1) else (result >> 1)
    return value, index


@cached(_DECODE_CACHE)
def _decode(encoded: str) -> tuple[Coordinate, ...]:
    points = []
    index = 0
    lat = 0
    lng = 0
    while index < len(encoded):
        dlat, index = _read_varint(encoded, index)
        dlng, index = _read_varint(encoded, index)
        lat += dlat
        lng += dlng
        latitude, longitude = lat / _PRECISION, lng / _PRECISION
        if not (-90 <= latitude <= 90 and -180 <= longitude <= 180):
            raise DecodeError(f"point ({latitude}, {longitude}) out of range at offset {index}")
        points.append(Coordinate(latitude=latitude, longitude=longitude))
    return tuple(points)


def decode_polyline(encoded: str) -> list[Coordinate]:
    """Decode an encoded polyline into coordinates.

    An empty string decodes to an empty list. Raises DecodeError when the
    input is not a string, when a varint group is cut off before the end of
    the string, or when a point falls outside valid latitude/longitude.
    """
    if not isinstance(encoded, str):
        raise DecodeError(f"expected an encoded string, got {type(encoded).__name__}")
    return list(_decode(encoded))


def _encode_value(value: int) -> str:
    value = ~(value << 1) if value < 0 else (value << 1)
    chunks = []
    while value >= 0x20:
        chunks.append(chr((0x20 | (value & 0x1F)) + 63))
        value >>= 5
    chunks.append(chr(value + 63))
    return "".join(chunks)


def encode_polyline(coords: list[Coordinate]) -> str:
    """Encode coordinates with the same scheme decode_polyline reads."""
    out = []
    prev_lat = 0
    prev_lng = 0
    for c in coords:
        lat = round(c.latitude * _PRECISION)
        lng = round(c.longitude * _PRECISION)
        out.append(_encode_value(lat - prev_lat))
        out.append(_encode_value(lng - prev_lng))
        prev_lat, prev_lng = lat, lng
    return "".join(out)
