"""Encoded polyline codec (precision 1e5) used by OSRM route geometry."""

from __future__ import annotations

import math
from typing import Iterable

PRECISION = 1e5
_ALPHABET_OFFSET = 63
_CHUNK_CONTINUE = 0x20
_CHUNK_MASK = 0x1F


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _encode_value(value: int) -> str:
    shifted = ~(value << 1) if value < 0 else value << 1
    chunks = []
    while shifted >= _CHUNK_CONTINUE:
        chunks.append(chr((_CHUNK_CONTINUE | (shifted & _CHUNK_MASK)) + _ALPHABET_OFFSET))
        shifted >>= 5
    chunks.append(chr(shifted + _ALPHABET_OFFSET))
    return "".join(chunks)


def encode_polyline(coordinates: Iterable[tuple[float, float]]) -> str:
    """Encode (lat, lon) pairs into a polyline string."""
    output = []
    prev_lat = 0
    prev_lon = 0
    for lat, lon in coordinates:
        lat_i = _round_half_away(lat * PRECISION)
        lon_i = _round_half_away(lon * PRECISION)
        output.append(_encode_value(lat_i - prev_lat))
        output.append(_encode_value(lon_i - prev_lon))
        prev_lat, prev_lon = lat_i, lon_i
    return "".join(output)


def _read_value(polyline: str, index: int) -> tuple[int, int]:
    shift = 0
    result = 0
    while True:
        if index >= len(polyline):
            raise ValueError("Polyline ended in the middle of a value.")
        b = ord(polyline[index]) - _ALPHABET_OFFSET
        if b < 0 or b > 0x3F:
            raise ValueError(f"Invalid polyline character {polyline[index]!r} at position {index}.")
        index += 1
        result |= (b & _CHUNK_MASK) << shift
        shift += 5
        if b < _CHUNK_CONTINUE:
            break
    delta = ~(result >> 1) if (result & 1) else (result >> 1)
    return delta, index


def decode_polyline(polyline: str) -> list[tuple[float, float]]:
    """Decode Google polyline string to list of (lat, lon) coordinates.

    OSRM uses Google's polyline encoding format for route geometry.

    Raises:
        ValueError: if the string is truncated or contains characters outside the alphabet.
    """
    coordinates = []
    index = 0
    lat = 0
    lon = 0

    while index < len(polyline):
        dlat, index = _read_value(polyline, index)
        lat += dlat
        dlon, index = _read_value(polyline, index)
        lon += dlon
        coordinates.append((lat / PRECISION, lon / PRECISION))

    return coordinates
