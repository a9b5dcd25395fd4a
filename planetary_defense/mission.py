#!/usr/bin/env python3
"""
Mission Phase Controller for the Planetary Defense Simulator.

Drives the intercept state machine for one mission run:

    approach -> launch -> intercept -> outcome

- approach: the asteroid closes on Earth for a fixed time
- launch: the spacecraft climbs out on an arc toward the asteroid
- intercept: the spacecraft seeks the asteroid until it is within the
  intercept threshold; the outcome is resolved exactly once at that moment
- outcome: the result is displayed, then the run either completes
  (success) or hands off to the impact cinematic (failure)

The controller is advanced by the host's frame loop via ``step`` /
``on_tick``. All state lives in a single ``MissionState`` that only the
controller mutates; rendering code reads frozen ``MissionSnapshot`` copies.
Within one tick, kinematics update first, then transition checks, then
event emission.

Usage:
    controller = MissionPhaseController(asteroid, strategy)
    controller.start()
    while not controller.finished:
        controller.on_tick(frame_delta)
        draw(controller.get_state())
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .catalog import Asteroid, DefenseStrategy
from .events import EventDispatcher, SimulationEvent, SimulationEventType
from .outcome import OutcomeLatch, OutcomeResolver, estimate_success_probability
from .physics import Vector3D, close_in, launch_arc, seek

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

# Phase timing (seconds)
APPROACH_DURATION = 4.0
LAUNCH_DURATION = 3.0
RESOLUTION_DELAY = 2.0          # intercept -> outcome after resolution
SUCCESS_DISPLAY_TIME = 4.0
FAILURE_DISPLAY_TIME = 3.0
MISSION_TIME_BUDGET = 30.0      # HUD countdown budget

# Strategy effect timing within launch (seconds)
LASER_START_DELAY = 1.0
GRAVITY_FIELD_DELAY = 2.0

# Explosion marker display time (seconds)
NUCLEAR_EXPLOSION_DISPLAY = 3.0
KINETIC_EXPLOSION_DISPLAY = 1.5

# Geometry (simulation units, Earth at origin)
EARTH_POSITION = Vector3D(0.0, 0.0, 0.0)
ASTEROID_START_POSITION = Vector3D(0.0, 0.0, -8.0)
INTERCEPT_THRESHOLD = 0.3
APPROACH_SPEED = 0.6            # asteroid closing speed during approach
APPROACH_FLOOR = 2.0
INTERCEPT_ASTEROID_SPEED = 0.3  # asteroid closing speed during intercept
INTERCEPT_FLOOR = 1.0
DIRECT_SEEK_SPEED = 3.0         # spacecraft pursuit speed
STATION_KEEPING_SEEK_SPEED = 1.2
DEFLECTED_TRAJECTORY_OFFSET = Vector3D(3.0, 2.0, -3.0)

# Successful intercepts below this diameter destroy the asteroid outright
DESTROY_DIAMETER_M = 200.0

GRAVITY_TRACTOR_CODE = "GRAV"
LASER_ABLATION_CODE = "LASR"

SPACECRAFT_TYPES = {
    "DART": "dart",
    "GRAV": "gravity",
    "NUKE": "nuclear",
    "LASR": "laser",
}


# =============================================================================
# PHASES AND OUTCOMES
# =============================================================================

class MissionPhase(Enum):
    """Stages of the intercept state machine."""
    APPROACH = "approach"
    LAUNCH = "launch"
    INTERCEPT = "intercept"
    OUTCOME = "outcome"


class MissionOutcome(Enum):
    """Outcome shown to the HUD."""
    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"


def phase_label(phase: MissionPhase, outcome: MissionOutcome) -> str:
    """HUD heading for a phase."""
    if phase == MissionPhase.APPROACH:
        return "THREAT APPROACH"
    if phase == MissionPhase.LAUNCH:
        return "DEFENSE LAUNCH"
    if phase == MissionPhase.INTERCEPT:
        return "INTERCEPTING"
    return "MISSION SUCCESS" if outcome == MissionOutcome.SUCCESS else "MISSION FAILED"


def asteroid_visual_size(diameter_m: float) -> float:
    """Scene radius for the asteroid model, clamped to [0.1, 0.3]."""
    return min(0.3, max(0.1, diameter_m / 1000.0))


# =============================================================================
# STATE
# =============================================================================

@dataclass
class MissionState:
    """
    Mutable state of one mission run. Owned by MissionPhaseController.

    Attributes:
        phase: Current phase.
        clock: Run time accumulated from tick deltas (seconds).
        phase_start_time: Clock value at entry to the current phase.
        asteroid_position: Asteroid position.
        spacecraft_position: Spacecraft position.
        distance_to_earth: Asteroid distance from Earth.
        distance_to_target: Spacecraft distance from the asteroid.
        time_remaining: HUD countdown.
        outcome: Outcome as shown to the HUD (pending until outcome phase).
        latch: At-most-once outcome guard.
        resolved_at: Clock value when the outcome was resolved.
    """
    phase: MissionPhase = MissionPhase.APPROACH
    clock: float = 0.0
    phase_start_time: float = 0.0
    asteroid_position: Vector3D = ASTEROID_START_POSITION
    spacecraft_position: Vector3D = EARTH_POSITION
    distance_to_earth: float = ASTEROID_START_POSITION.magnitude
    distance_to_target: float = ASTEROID_START_POSITION.magnitude
    time_remaining: float = MISSION_TIME_BUDGET
    outcome: MissionOutcome = MissionOutcome.PENDING
    latch: OutcomeLatch = field(default_factory=OutcomeLatch)
    resolved_at: Optional[float] = None

    # Visual flags
    asteroid_destroyed: bool = False
    asteroid_deflected: bool = False
    show_explosion: bool = False
    explosion_position: Optional[Vector3D] = None
    explosion_started_at: float = 0.0
    show_laser: bool = False
    show_gravity_field: bool = False

    # One-shot cue guards
    laser_cue_sent: bool = False

    @property
    def elapsed_in_phase(self) -> float:
        """Time spent in the current phase."""
        return self.clock - self.phase_start_time


@dataclass(frozen=True)
class MissionSnapshot:
    """Read-only copy of the mission state for rendering, HUD and audio."""
    phase: MissionPhase
    outcome: MissionOutcome
    phase_label: str
    elapsed_in_phase: float
    asteroid_position: Vector3D
    spacecraft_position: Vector3D
    distance_to_earth: float
    distance_to_target: float
    time_remaining: float
    success_probability: float
    intercepted: bool
    asteroid_destroyed: bool
    asteroid_deflected: bool
    show_explosion: bool
    explosion_position: Optional[Vector3D]
    show_laser: bool
    show_gravity_field: bool
    spacecraft_visible: bool
    spacecraft_type: str
    asteroid_size: float
    deflected_trajectory_end: Optional[Vector3D]


# =============================================================================
# CONTROLLER
# =============================================================================

class MissionPhaseController:
    """
    Intercept state machine for one asteroid and one defense strategy.

    Attributes:
        asteroid: The incoming asteroid (immutable for the run).
        strategy: The chosen defense strategy (immutable for the run).
        resolver: Authoritative outcome resolver.
        dispatcher: Optional dispatcher receiving emitted events.
        state: Mutable mission state.
    """

    def __init__(
        self,
        asteroid: Asteroid,
        strategy: DefenseStrategy,
        resolver: Optional[OutcomeResolver] = None,
        dispatcher: Optional[EventDispatcher] = None,
        *,
        intercept_threshold: float = INTERCEPT_THRESHOLD,
        time_budget: float = MISSION_TIME_BUDGET
    ) -> None:
        """
        Initialize the controller.

        Args:
            asteroid: Target asteroid.
            strategy: Defense strategy.
            resolver: Outcome resolver (a fresh unseeded one by default).
            dispatcher: Where emitted events are delivered, if anywhere.
            intercept_threshold: Spacecraft-asteroid distance that counts as
                an intercept (simulation units).
            time_budget: Countdown budget shown on the HUD (seconds).
        """
        self.asteroid = asteroid
        self.strategy = strategy
        self.resolver = resolver or OutcomeResolver()
        self.dispatcher = dispatcher
        self.intercept_threshold = intercept_threshold
        self.time_budget = time_budget

        self.state = MissionState(time_remaining=time_budget)
        self.success_probability = estimate_success_probability(strategy, asteroid)

        self._started = False
        self._finished = False
        self._cancelled = False
        self._pending: list[SimulationEvent] = []

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    @property
    def finished(self) -> bool:
        """Whether the run reached its terminal exit."""
        return self._finished

    @property
    def cancelled(self) -> bool:
        """Whether the host tore the controller down."""
        return self._cancelled

    @property
    def seek_speed(self) -> float:
        """Pursuit speed: station-keeping strategies close in slower."""
        if self.strategy.code == GRAVITY_TRACTOR_CODE:
            return STATION_KEEPING_SEEK_SPEED
        return DIRECT_SEEK_SPEED

    def start(self) -> list[SimulationEvent]:
        """
        Begin the run. Called automatically by the first tick.

        Returns:
            Events emitted on start.
        """
        if self._started or self._cancelled:
            return []
        self._started = True
        logger.info("Mission started: %s vs %s", self.strategy.name, self.asteroid.name)
        self._emit(SimulationEventType.SPACE_AMBIENCE_START)
        self._emit(SimulationEventType.PHASE_CHANGED, {"phase": self.state.phase.value})
        return self._flush()

    def cancel(self) -> None:
        """
        Tear down the run. Pending phase timers are dropped and no further
        events are emitted.
        """
        if self._cancelled:
            return
        self._cancelled = True
        self._pending.clear()
        logger.info("Mission cancelled in phase %s", self.state.phase.value)

    # -------------------------------------------------------------------------
    # Tick
    # -------------------------------------------------------------------------

    def on_tick(self, delta_seconds: float) -> None:
        """Host frame callback; state is read back through ``get_state``."""
        self.step(delta_seconds)

    def step(self, delta_seconds: float) -> list[SimulationEvent]:
        """
        Advance the mission by one frame.

        Args:
            delta_seconds: Wall-clock time since the previous frame.

        Returns:
            Events emitted during this tick, in emission order.

        Raises:
            ValueError: If delta_seconds is negative.
        """
        if delta_seconds < 0:
            raise ValueError("Tick delta must be non-negative")
        if self._cancelled or self._finished:
            return []

        events = self.start() if not self._started else []

        state = self.state
        state.clock += delta_seconds
        self._update_explosion_marker()

        if state.phase == MissionPhase.APPROACH:
            self._tick_approach(delta_seconds)
        elif state.phase == MissionPhase.LAUNCH:
            self._tick_launch()
        elif state.phase == MissionPhase.INTERCEPT:
            self._tick_intercept(delta_seconds)
        elif state.phase == MissionPhase.OUTCOME:
            self._tick_outcome()

        self._update_time_remaining()

        events.extend(self._flush())
        return events

    def _tick_approach(self, dt: float) -> None:
        state = self.state
        state.asteroid_position = close_in(
            state.asteroid_position, EARTH_POSITION, APPROACH_SPEED, dt, APPROACH_FLOOR
        )
        self._update_distances()

        if state.elapsed_in_phase >= APPROACH_DURATION:
            self._enter_phase(MissionPhase.LAUNCH)
            self._emit(SimulationEventType.LAUNCH)

    def _tick_launch(self) -> None:
        state = self.state
        elapsed = state.elapsed_in_phase
        state.spacecraft_position = launch_arc(
            EARTH_POSITION, state.asteroid_position, elapsed, LAUNCH_DURATION
        )
        self._update_distances()

        if self.strategy.code == LASER_ABLATION_CODE and elapsed > LASER_START_DELAY:
            state.show_laser = True
            if not state.laser_cue_sent:
                state.laser_cue_sent = True
                self._emit(SimulationEventType.LASER_BEAM_START)
        if self.strategy.code == GRAVITY_TRACTOR_CODE and elapsed > GRAVITY_FIELD_DELAY:
            state.show_gravity_field = True

        if elapsed >= LAUNCH_DURATION:
            self._enter_phase(MissionPhase.INTERCEPT)

    def _tick_intercept(self, dt: float) -> None:
        state = self.state
        state.spacecraft_position, _ = seek(
            state.spacecraft_position, state.asteroid_position, self.seek_speed, dt
        )
        state.asteroid_position = close_in(
            state.asteroid_position, EARTH_POSITION, INTERCEPT_ASTEROID_SPEED, dt, INTERCEPT_FLOOR
        )
        self._update_distances()

        # Edge-triggered: the latch lets only the first qualifying tick through
        if state.distance_to_target < self.intercept_threshold and not state.latch.determined:
            success = state.latch.try_resolve(self.resolver, self.strategy, self.asteroid)
            if success is not None:
                self._on_intercept(success)

        if state.resolved_at is not None and state.clock - state.resolved_at >= RESOLUTION_DELAY:
            success = bool(state.latch.success)
            state.outcome = MissionOutcome.SUCCESS if success else MissionOutcome.FAILURE
            self._enter_phase(MissionPhase.OUTCOME)
            self._emit(SimulationEventType.SUCCESS if success else SimulationEventType.FAILURE)

    def _on_intercept(self, success: bool) -> None:
        """Apply the one-time effects of reaching the asteroid."""
        state = self.state
        state.resolved_at = state.clock

        state.show_explosion = True
        state.explosion_position = state.asteroid_position
        state.explosion_started_at = state.clock

        if self.strategy.code == LASER_ABLATION_CODE:
            state.show_laser = False
            self._emit(SimulationEventType.LASER_BEAM_STOP)

        if self.strategy.is_nuclear:
            self._emit(SimulationEventType.NUCLEAR_EXPLOSION)
        else:
            self._emit(SimulationEventType.IMPACT)

        if success:
            if self.strategy.is_nuclear or self.asteroid.diameter_m < DESTROY_DIAMETER_M:
                state.asteroid_destroyed = True
            else:
                state.asteroid_deflected = True

        self._emit(SimulationEventType.OUTCOME_RESOLVED, {
            "success": success,
            "destroyed": state.asteroid_destroyed,
            "deflected": state.asteroid_deflected,
        })

    def _tick_outcome(self) -> None:
        state = self.state
        elapsed = state.elapsed_in_phase

        if state.outcome == MissionOutcome.SUCCESS and elapsed >= SUCCESS_DISPLAY_TIME:
            self._finish()
            self._emit(SimulationEventType.MISSION_COMPLETE, {"success": True})
        elif state.outcome == MissionOutcome.FAILURE and elapsed >= FAILURE_DISPLAY_TIME:
            self._finish()
            self._emit(SimulationEventType.SHOW_IMPACT)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _enter_phase(self, phase: MissionPhase) -> None:
        previous = self.state.phase
        self.state.phase = phase
        self.state.phase_start_time = self.state.clock
        logger.info("Mission phase %s -> %s at T+%.2fs", previous.value, phase.value, self.state.clock)
        self._emit(SimulationEventType.PHASE_CHANGED, {
            "from": previous.value,
            "phase": phase.value,
        })

    def _finish(self) -> None:
        self._finished = True
        self._emit(SimulationEventType.SPACE_AMBIENCE_STOP)

    def _update_distances(self) -> None:
        state = self.state
        state.distance_to_earth = state.asteroid_position.distance_to(EARTH_POSITION)
        state.distance_to_target = state.spacecraft_position.distance_to(state.asteroid_position)

    def _update_time_remaining(self) -> None:
        state = self.state
        if state.phase == MissionPhase.OUTCOME:
            state.time_remaining = 0.0
        else:
            state.time_remaining = max(0.0, self.time_budget - state.clock)

    def _update_explosion_marker(self) -> None:
        state = self.state
        if not state.show_explosion:
            return
        display = NUCLEAR_EXPLOSION_DISPLAY if self.strategy.is_nuclear else KINETIC_EXPLOSION_DISPLAY
        if state.clock - state.explosion_started_at >= display:
            state.show_explosion = False

    def _emit(self, event_type: SimulationEventType, data: Optional[dict] = None) -> None:
        self._pending.append(SimulationEvent(
            event_type=event_type,
            timestamp=self.state.clock,
            source="mission",
            phase=self.state.phase.value,
            data=data or {},
        ))

    def _flush(self) -> list[SimulationEvent]:
        events, self._pending = self._pending, []
        if self.dispatcher is not None and not self._cancelled:
            self.dispatcher.dispatch_all(events)
        return events

    # -------------------------------------------------------------------------
    # Snapshot
    # -------------------------------------------------------------------------

    def get_state(self) -> MissionSnapshot:
        """Read-only snapshot of the current mission state."""
        state = self.state
        deflected_end = None
        if state.asteroid_deflected:
            deflected_end = state.asteroid_position + DEFLECTED_TRAJECTORY_OFFSET

        return MissionSnapshot(
            phase=state.phase,
            outcome=state.outcome,
            phase_label=phase_label(state.phase, state.outcome),
            elapsed_in_phase=state.elapsed_in_phase,
            asteroid_position=state.asteroid_position,
            spacecraft_position=state.spacecraft_position,
            distance_to_earth=state.distance_to_earth,
            distance_to_target=state.distance_to_target,
            time_remaining=state.time_remaining,
            success_probability=self.success_probability,
            intercepted=state.latch.determined,
            asteroid_destroyed=state.asteroid_destroyed,
            asteroid_deflected=state.asteroid_deflected,
            show_explosion=state.show_explosion,
            explosion_position=state.explosion_position,
            show_laser=state.show_laser,
            show_gravity_field=state.show_gravity_field,
            spacecraft_visible=state.phase != MissionPhase.APPROACH and not state.show_explosion,
            spacecraft_type=SPACECRAFT_TYPES.get(self.strategy.code, "dart"),
            asteroid_size=asteroid_visual_size(self.asteroid.diameter_m),
            deflected_trajectory_end=deflected_end,
        )
