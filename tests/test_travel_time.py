"""Sanity tests for the travel-time model."""
import math

import numpy as np
import pytest

from railnet_sim.simulator.topology import ElevationPoint
from railnet_sim.simulator.travel_time import (
    CURVE_PENALTY_H,
    estimate_travel_time_hours,
    flat_track_time_hours,
    speed_factors,
)


def _segment_time(length_km, dz_m, weight, speed):
    slope = (dz_m / length_km) * (weight / 1000)
    factor = max(0.01, 1 - slope * 1.5e-3)
    return (length_km / speed) / factor


def test_flat_track_reduces_to_distance_over_speed():
    profile = [(0, 500), (40, 500), (100, 500), (130, 500)]
    hours = estimate_travel_time_hours(profile, 1200, 65, 3)
    assert np.isclose(hours, 130 / 65 + 3 * 0.05)
    assert np.isclose(hours, flat_track_time_hours(profile, 65, 3))


def test_reference_track_matches_segment_sum():
    # Bangalore - Davanagere: net downhill, 8 curves
    profile = [ElevationPoint(0, 900), ElevationPoint(90, 800), ElevationPoint(180, 600)]
    hours = estimate_travel_time_hours(profile, 500, 80, 8)
    expected = _segment_time(90, -100, 500, 80) + _segment_time(90, -200, 500, 80) + 8 * CURVE_PENALTY_H
    assert hours == pytest.approx(expected, rel=1e-12)
    # Curves push the total above the flat 2.25 h, the downhill grade alone keeps it below
    assert hours > 180 / 80
    assert hours - 8 * CURVE_PENALTY_H < 180 / 80


def test_tuple_and_point_profiles_agree():
    points = [ElevationPoint(0, 450), ElevationPoint(60, 500), ElevationPoint(120, 520)]
    tuples = [(0, 450), (60, 500), (120, 520)]
    assert estimate_travel_time_hours(points, 800, 90, 6) == estimate_travel_time_hours(tuples, 800, 90, 6)


def test_heavier_train_is_slower_uphill():
    profile = [(0, 0), (10, 100)]
    times = [estimate_travel_time_hours(profile, w, 50, 0) for w in (100, 1000, 10000, 40000)]
    assert all(a < b for a, b in zip(times, times[1:]))


def test_speed_factor_floor_plateaus():
    # factor = 1 - 1.5e-5 * w hits the 0.01 floor at w = 66000 t
    profile = [(0, 0), (10, 100)]
    t_70k = estimate_travel_time_hours(profile, 70000, 50, 0)
    t_100k = estimate_travel_time_hours(profile, 100000, 50, 0)
    assert t_70k == t_100k
    assert np.isclose(t_70k, (10 / 50) / 0.01)
    assert np.all(speed_factors(profile, 100000) == 0.01)


def test_downhill_is_faster_but_finite():
    profile = [(0, 600), (100, 300), (200, 50)]
    for weight in (100, 500, 5000, 50000):
        hours = estimate_travel_time_hours(profile, weight, 80, 0)
        assert 0 < hours < flat_track_time_hours(profile, 80)
        assert math.isfinite(hours)
    assert np.all(speed_factors(profile, 50000) > 1)


@pytest.mark.parametrize("profile", [[], [(0, 0)], [ElevationPoint(5, 100)], None])
def test_short_profile_falls_back_to_one_hour(profile):
    assert estimate_travel_time_hours(profile, 500, 80, 4) == 1


@pytest.mark.parametrize("speed", [0, -10])
def test_non_positive_speed_is_infinite(speed):
    assert estimate_travel_time_hours([(0, 0), (10, 0)], 500, speed, 2) == math.inf


def test_estimate_is_deterministic():
    profile = [(0, 520), (70, 480), (140, 400)]
    first = estimate_travel_time_hours(profile, 750, 70, 12)
    assert all(estimate_travel_time_hours(profile, 750, 70, 12) == first for _ in range(5))
