#!/usr/bin/env python3
"""
Test Suite for Physics Module

Tests cover:
1. Vector3D operations (add, subtract, multiply, divide, dot, magnitude, normalization)
2. Phase progress clamping
3. Radial approach, close-in and seek motion models
4. Launch arc shape

Run with: python -m pytest tests/test_physics.py -v
"""

import math

import pytest

from planetary_defense.physics import (
    ARRIVAL_EPSILON,
    LAUNCH_ARC_HEIGHT,
    LAUNCH_REACH,
    Vector3D,
    close_in,
    launch_arc,
    phase_progress,
    radial_approach,
    seek,
)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def origin() -> Vector3D:
    return Vector3D.zero()


@pytest.fixture
def far_point() -> Vector3D:
    return Vector3D(0.0, 0.0, -8.0)


# =============================================================================
# VECTOR3D TESTS
# =============================================================================

class TestVector3D:
    """Tests for Vector3D operations."""

    def test_addition_and_subtraction(self):
        a = Vector3D(1, 2, 3)
        b = Vector3D(4, 5, 6)
        assert a + b == Vector3D(5, 7, 9)
        assert b - a == Vector3D(3, 3, 3)

    def test_scalar_multiplication_both_sides(self):
        v = Vector3D(1, -2, 3)
        assert v * 2 == Vector3D(2, -4, 6)
        assert 2 * v == Vector3D(2, -4, 6)

    def test_division_by_zero_raises(self):
        with pytest.raises(ValueError):
            Vector3D(1, 1, 1) / 0

    def test_negation(self):
        assert -Vector3D(1, -2, 3) == Vector3D(-1, 2, -3)

    def test_dot_product(self):
        assert Vector3D(1, 2, 3).dot(Vector3D(4, -5, 6)) == pytest.approx(12.0)

    def test_magnitude(self):
        assert Vector3D(3, 4, 0).magnitude == pytest.approx(5.0)

    def test_normalized_has_unit_length(self):
        assert Vector3D(1, 0.3, 0.5).normalized().magnitude == pytest.approx(1.0)

    def test_normalized_zero_vector_stays_zero(self):
        """Degenerate direction must not divide by zero."""
        assert Vector3D.zero().normalized() == Vector3D.zero()

    def test_equality_tolerance(self):
        assert Vector3D(1.0, 2.0, 3.0) == Vector3D(1.0 + 1e-12, 2.0, 3.0)
        assert Vector3D(1.0, 2.0, 3.0) != Vector3D(1.001, 2.0, 3.0)

    def test_distance_to(self, origin, far_point):
        assert origin.distance_to(far_point) == pytest.approx(8.0)

    def test_tuple_round_trip(self):
        v = Vector3D(1.5, -2.5, 3.5)
        assert Vector3D.from_tuple(v.to_tuple()) == v

    def test_immutable(self):
        v = Vector3D(1, 2, 3)
        with pytest.raises(AttributeError):
            v.x = 5

    def test_hashable(self):
        assert len({Vector3D(1, 2, 3), Vector3D(1, 2, 3)}) == 1


# =============================================================================
# PHASE PROGRESS TESTS
# =============================================================================

class TestPhaseProgress:
    """Tests for phase_progress clamping."""

    @pytest.mark.parametrize("elapsed,duration,expected", [
        (0.0, 2.0, 0.0),
        (1.0, 2.0, 0.5),
        (2.0, 2.0, 1.0),
        (5.0, 2.0, 1.0),
        (-1.0, 2.0, 0.0),
        (1.0, 0.0, 1.0),
    ])
    def test_progress(self, elapsed, duration, expected):
        assert phase_progress(elapsed, duration) == pytest.approx(expected)


# =============================================================================
# MOTION MODEL TESTS
# =============================================================================

class TestRadialApproach:
    """Tests for the impact-cinematic approach path."""

    def test_starts_at_start_distance(self, origin):
        pos = radial_approach(origin, Vector3D(1, 0.3, 0.5), 8.0, 0.5, 0.0, 2.0)
        assert pos.distance_to(origin) == pytest.approx(8.0)

    def test_ends_at_floor_distance(self, origin):
        pos = radial_approach(origin, Vector3D(1, 0.3, 0.5), 8.0, 0.5, 2.0, 2.0)
        assert pos.distance_to(origin) == pytest.approx(0.5)

    def test_overrun_clamps_to_floor(self, origin):
        pos = radial_approach(origin, Vector3D(1, 0.3, 0.5), 8.0, 0.5, 10.0, 2.0)
        assert pos.distance_to(origin) == pytest.approx(0.5)

    def test_linear_in_progress(self, origin):
        pos = radial_approach(origin, Vector3D(1, 0, 0), 8.0, 0.0, 1.0, 2.0)
        assert pos == Vector3D(4.0, 0.0, 0.0)

    def test_direction_is_preserved(self, origin):
        direction = Vector3D(1, 0.3, 0.5)
        pos = radial_approach(origin, direction, 8.0, 0.5, 0.7, 2.0)
        assert pos.normalized() == direction.normalized()


class TestCloseIn:
    """Tests for constant-speed approach with a floor."""

    def test_moves_toward_origin(self, origin, far_point):
        pos = close_in(far_point, origin, 0.6, 1.0, 2.0)
        assert pos == Vector3D(0.0, 0.0, -7.4)

    def test_never_passes_floor(self, origin, far_point):
        pos = close_in(far_point, origin, 100.0, 1.0, 2.0)
        assert pos.distance_to(origin) == pytest.approx(2.0)

    def test_at_floor_does_not_move(self, origin):
        start = Vector3D(0.0, 0.0, -1.0)
        assert close_in(start, origin, 0.3, 1.0, 1.0) == start

    def test_zero_dt_does_not_move(self, origin, far_point):
        assert close_in(far_point, origin, 0.6, 0.0, 2.0) == far_point


class TestSeek:
    """Tests for pursuit of a live target."""

    def test_steps_by_speed_times_dt(self, origin, far_point):
        pos, arrived = seek(origin, far_point, 3.0, 0.5)
        assert pos == Vector3D(0.0, 0.0, -1.5)
        assert not arrived

    def test_overshoot_lands_on_target(self, origin):
        target = Vector3D(0.0, 0.0, -0.1)
        pos, arrived = seek(origin, target, 3.0, 1.0)
        assert pos == target
        assert arrived

    def test_zero_separation_counts_as_arrived(self):
        """Coincident positions clamp to arrived instead of dividing by zero."""
        point = Vector3D(1.0, 2.0, 3.0)
        pos, arrived = seek(point, point, 3.0, 1.0 / 60)
        assert arrived
        assert pos == point
        assert all(math.isfinite(c) for c in pos.to_tuple())

    def test_sub_epsilon_separation_counts_as_arrived(self):
        point = Vector3D(1.0, 2.0, 3.0)
        nearly = point + Vector3D(ARRIVAL_EPSILON / 10, 0.0, 0.0)
        pos, arrived = seek(point, nearly, 3.0, 1.0 / 60)
        assert arrived
        assert pos == point


class TestLaunchArc:
    """Tests for the spacecraft launch arc."""

    def test_starts_at_origin(self, origin, far_point):
        assert launch_arc(origin, far_point, 0.0, 3.0) == origin

    def test_ends_reach_along_heading(self, origin, far_point):
        pos = launch_arc(origin, far_point, 3.0, 3.0)
        assert pos.x == pytest.approx(0.0)
        assert pos.y == pytest.approx(0.0, abs=1e-9)
        assert pos.z == pytest.approx(-LAUNCH_REACH)

    def test_peak_lift_at_midpoint(self, origin, far_point):
        pos = launch_arc(origin, far_point, 1.5, 3.0)
        assert pos.y == pytest.approx(LAUNCH_ARC_HEIGHT)
        assert pos.z == pytest.approx(-LAUNCH_REACH / 2)
