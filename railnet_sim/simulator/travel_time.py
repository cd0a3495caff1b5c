"""Travel-time model: hours needed for a train to traverse a track.

The track is split into the piecewise-linear segments of its elevation
profile.  Each segment is run at the nominal speed divided by an effective
speed factor that depends on the signed grade scaled by the train's weight:

    slope_influence = (dz_m / dx_km) * (weight_t / 1000)
    factor          = max(0.01, 1 - slope_influence * 1.5e-3)
    t_segment       = (dx_km / speed_kmh) / factor

Downhill segments give ``factor > 1`` (faster than nominal).  A fixed
penalty per curve is added on top of the summed segment times.
"""
from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np

from .topology import ElevationPoint

__all__ = [
    "DEFAULT_TRAVEL_TIME_H",
    "CURVE_PENALTY_H",
    "SLOPE_COEFFICIENT",
    "MIN_SPEED_FACTOR",
    "estimate_travel_time_hours",
    "segment_times_hours",
    "speed_factors",
    "flat_track_time_hours",
]

DEFAULT_TRAVEL_TIME_H = 1.0  # returned for profiles with < 2 samples
CURVE_PENALTY_H = 0.05  # 3 minutes per curve
SLOPE_COEFFICIENT = 1.5e-3
MIN_SPEED_FACTOR = 0.01


def _profile_arrays(profile) -> Tuple[np.ndarray, np.ndarray]:
    """Return (distance_km, elevation_m) arrays from points or 2-tuples."""
    if len(profile) and isinstance(profile[0], ElevationPoint):
        distance = np.array([p.distance_km for p in profile], dtype=float)
        elevation = np.array([p.elevation_m for p in profile], dtype=float)
        return distance, elevation
    arr = np.asarray(profile, dtype=float).reshape(-1, 2)
    return arr[:, 0], arr[:, 1]


def speed_factors(profile, weight_tonnes: float) -> np.ndarray:
    """Effective speed factor of every profile segment (floored at 0.01)."""
    distance, elevation = _profile_arrays(profile)
    segment_km = np.diff(distance)
    elevation_change_m = np.diff(elevation)
    slope_influence = (elevation_change_m / segment_km) * (weight_tonnes / 1000.0)
    return np.maximum(MIN_SPEED_FACTOR, 1.0 - slope_influence * SLOPE_COEFFICIENT)


def segment_times_hours(profile, weight_tonnes: float, speed_kmh: float) -> np.ndarray:
    """Per-segment traversal times in hours (curve penalty excluded)."""
    distance, _ = _profile_arrays(profile)
    base_time_h = np.diff(distance) / speed_kmh
    return base_time_h / speed_factors(profile, weight_tonnes)


def estimate_travel_time_hours(
    profile: Sequence,
    weight_tonnes: float,
    speed_kmh: float,
    curve_count: int,
) -> float:
    """Expected hours to traverse a track.

    Parameters
    ----------
    profile
        Ordered elevation samples, either ``ElevationPoint`` objects or
        ``(distance_km, elevation_m)`` pairs with strictly increasing distance.
    weight_tonnes
        Train weight.
    speed_kmh
        Nominal average speed.  Non-positive speeds yield ``inf``.
    curve_count
        Number of curves on the track.

    Returns
    -------
    float
        Travel time in hours.  Profiles with fewer than two samples fall back
        to ``DEFAULT_TRAVEL_TIME_H``.
    """
    if profile is None or len(profile) < 2:
        return DEFAULT_TRAVEL_TIME_H
    if speed_kmh <= 0:
        return float("inf")

    total_h = 0.0
    for segment_h in segment_times_hours(profile, weight_tonnes, speed_kmh):
        total_h += float(segment_h)
    return total_h + curve_count * CURVE_PENALTY_H


def flat_track_time_hours(profile: Sequence, speed_kmh: float, curve_count: int = 0) -> float:
    """Baseline time for the same profile with every elevation equalised."""
    if profile is None or len(profile) < 2:
        return DEFAULT_TRAVEL_TIME_H
    if speed_kmh <= 0:
        return float("inf")
    distance, _ = _profile_arrays(profile)
    return float(distance[-1] - distance[0]) / speed_kmh + curve_count * CURVE_PENALTY_H
