"""Encoded polyline helpers."""

from __future__ import annotations


def decode_polyline(polyline: str, precision: int = 5) -> list[tuple[float, float]]:
    """Decode Google polyline string to list of (lat, lon) coordinates.

    Google Directions and OSRM (``geometries=polyline``) both use this encoding.
    """
    coordinates = []
    index = 0
    lat = 0
    lon = 0
    factor = 10 ** precision

    while index < len(polyline):
        deltas = []
        for _ in range(2):
            shift = 0
            result = 0
            while True:
                if index >= len(polyline):
                    raise ValueError("Truncated polyline.")
                b = ord(polyline[index]) - 63
                index += 1
                result |= (b & 0x1f) << shift
                shift += 5
                if b < 0x20:
                    break
            deltas.append(~(result >> 1) if (result & 1) else (result >> 1))
        lat += deltas[0]
        lon += deltas[1]
        coordinates.append((lat / factor, lon / factor))

    return coordinates
