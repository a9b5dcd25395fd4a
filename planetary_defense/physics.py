#!/usr/bin/env python3
"""
Kinematics Module for the Planetary Defense Simulator

Implements the simple motion models used by the mission and impact phases:
- 3D vector operations
- Radial approach (interpolated fall from a start distance to a floor)
- Close-in (constant-speed approach toward an origin, stopping at a floor)
- Seek (constant-speed pursuit of a live target)
- Launch arc (spacecraft climb out from Earth toward the target)

All positions are in abstract simulation units centred on Earth. None of
these functions mutate their inputs.
"""

from __future__ import annotations
import math
from dataclasses import dataclass


# =============================================================================
# CONSTANTS
# =============================================================================

# Separations below this are treated as "arrived"
ARRIVAL_EPSILON = 1e-6

# Launch arc shape (simulation units)
LAUNCH_REACH = 2.0
LAUNCH_ARC_HEIGHT = 0.5


# =============================================================================
# VECTOR3D CLASS
# =============================================================================

@dataclass(frozen=True)
class Vector3D:
    """
    3D vector for positions and directions in simulation space.

    Earth sits at the origin. Instances are immutable so a snapshot handed
    to rendering code can never be altered behind the controller's back.
    """
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __add__(self, other: Vector3D) -> Vector3D:
        """Vector addition."""
        return Vector3D(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vector3D) -> Vector3D:
        """Vector subtraction."""
        return Vector3D(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> Vector3D:
        """Scalar multiplication."""
        return Vector3D(self.x * scalar, self.y * scalar, self.z * scalar)

    def __rmul__(self, scalar: float) -> Vector3D:
        """Right scalar multiplication."""
        return self.__mul__(scalar)

    def __truediv__(self, scalar: float) -> Vector3D:
        """Scalar division."""
        if scalar == 0:
            raise ValueError("Cannot divide vector by zero")
        return Vector3D(self.x / scalar, self.y / scalar, self.z / scalar)

    def __neg__(self) -> Vector3D:
        """Negation."""
        return Vector3D(-self.x, -self.y, -self.z)

    def __eq__(self, other: object) -> bool:
        """Equality check with tolerance."""
        if not isinstance(other, Vector3D):
            return False
        eps = 1e-10
        return (abs(self.x - other.x) < eps and
                abs(self.y - other.y) < eps and
                abs(self.z - other.z) < eps)

    def __hash__(self) -> int:
        return hash((round(self.x, 9), round(self.y, 9), round(self.z, 9)))

    def dot(self, other: Vector3D) -> float:
        """Dot product."""
        return self.x * other.x + self.y * other.y + self.z * other.z

    @property
    def magnitude(self) -> float:
        """Vector magnitude (length)."""
        return math.sqrt(self.x**2 + self.y**2 + self.z**2)

    def normalized(self) -> Vector3D:
        """Return unit vector in same direction (zero vector stays zero)."""
        mag = self.magnitude
        if mag < ARRIVAL_EPSILON:
            return Vector3D(0, 0, 0)
        return self / mag

    def distance_to(self, other: Vector3D) -> float:
        """Distance to another point."""
        return (self - other).magnitude

    def to_tuple(self) -> tuple[float, float, float]:
        """Convert to tuple."""
        return (self.x, self.y, self.z)

    @classmethod
    def from_tuple(cls, t: tuple[float, float, float]) -> Vector3D:
        """Create from tuple."""
        return cls(t[0], t[1], t[2])

    @classmethod
    def zero(cls) -> Vector3D:
        """Zero vector."""
        return cls(0.0, 0.0, 0.0)

    @classmethod
    def unit_y(cls) -> Vector3D:
        """Unit vector in Y direction (up in the scene)."""
        return cls(0.0, 1.0, 0.0)

    def __repr__(self) -> str:
        return f"Vector3D({self.x:.6g}, {self.y:.6g}, {self.z:.6g})"


# =============================================================================
# MOTION MODELS
# =============================================================================

def phase_progress(elapsed: float, duration: float) -> float:
    """
    Fraction of a phase completed, clamped to [0, 1].

    A non-positive duration counts as already complete.
    """
    if duration <= 0:
        return 1.0
    return max(0.0, min(1.0, elapsed / duration))


def radial_approach(
    origin: Vector3D,
    direction: Vector3D,
    start_distance: float,
    floor_distance: float,
    elapsed: float,
    duration: float
) -> Vector3D:
    """
    Position of a body falling radially toward an origin.

    The body travels along the fixed ``direction`` (pointing from the origin
    out to the body) from ``start_distance`` down to ``floor_distance``,
    linearly in ``progress = min(elapsed / duration, 1)``.

    Args:
        origin: Centre the body falls toward (Earth).
        direction: Direction from origin to body; normalised here.
        start_distance: Distance from origin at progress 0.
        floor_distance: Distance from origin at progress 1.
        elapsed: Time spent in the approach so far (seconds).
        duration: Total approach time (seconds).

    Returns:
        The interpolated position.
    """
    progress = phase_progress(elapsed, duration)
    distance = start_distance - (start_distance - floor_distance) * progress
    return origin + direction.normalized() * distance


def close_in(
    position: Vector3D,
    origin: Vector3D,
    speed: float,
    dt: float,
    floor_distance: float
) -> Vector3D:
    """
    Move a body toward an origin at constant speed without passing a floor.

    Args:
        position: Current position.
        origin: Point being approached.
        speed: Closing speed (units per second).
        dt: Time step (seconds).
        floor_distance: Minimum distance the body may reach.

    Returns:
        New position, never nearer the origin than ``floor_distance``.
    """
    offset = position - origin
    distance = offset.magnitude
    if distance <= floor_distance or distance < ARRIVAL_EPSILON:
        return position
    new_distance = max(floor_distance, distance - speed * dt)
    return origin + offset.normalized() * new_distance


def seek(
    position: Vector3D,
    target: Vector3D,
    speed: float,
    dt: float
) -> tuple[Vector3D, bool]:
    """
    Step a body toward a live target at constant speed.

    The separation vector is normalised and scaled by ``speed * dt``. When
    the separation is below ``ARRIVAL_EPSILON`` the body is considered to
    have arrived and is not moved, so normalisation never divides by zero.
    A step longer than the remaining separation lands exactly on the target.

    Args:
        position: Current position of the pursuing body.
        target: Current position of the target.
        speed: Pursuit speed (units per second).
        dt: Time step (seconds).

    Returns:
        Tuple of (new position, arrived flag).
    """
    separation = target - position
    distance = separation.magnitude
    if distance < ARRIVAL_EPSILON:
        return position, True

    step = speed * dt
    if step >= distance:
        return target, True

    return position + (separation / distance) * step, False


def launch_arc(
    origin: Vector3D,
    target: Vector3D,
    elapsed: float,
    duration: float,
    reach: float = LAUNCH_REACH,
    arc_height: float = LAUNCH_ARC_HEIGHT
) -> Vector3D:
    """
    Spacecraft position while climbing out from Earth toward a target.

    The craft moves ``reach`` units along the origin-to-target direction over
    ``duration`` seconds, lifted by a half-sine hump of ``arc_height`` on the
    scene's up axis.
    """
    progress = phase_progress(elapsed, duration)
    heading = (target - origin).normalized()
    lift = Vector3D.unit_y() * (math.sin(progress * math.pi) * arc_height)
    return origin + heading * (progress * reach) + lift
