"""Planar position of a train along its current leg."""
from __future__ import annotations

from typing import Optional, Tuple

from .topology import Station, Topology

__all__ = [
    "interpolate",
    "train_position",
]

ORIGIN_XY = (0.0, 0.0)


def interpolate(
    origin: Optional[Station | Tuple[float, float]],
    dest: Optional[Station | Tuple[float, float]],
    progress: float,
) -> Tuple[float, float]:
    """Linearly interpolate between two endpoints.

    ``progress`` is a percentage (0 = origin, 100 = destination).  A missing
    endpoint yields ``(0, 0)``.
    """
    if origin is None or dest is None:
        return ORIGIN_XY
    ox, oy = origin.xy if isinstance(origin, Station) else origin
    dx, dy = dest.xy if isinstance(dest, Station) else dest
    fraction = progress / 100.0
    return (ox + (dx - ox) * fraction, oy + (dy - oy) * fraction)


def train_position(origin_id: str, destination_id: str, progress: float, topology: Topology) -> Tuple[float, float]:
    """Resolve both station ids and interpolate between them."""
    return interpolate(topology.station(origin_id), topology.station(destination_id), progress)
