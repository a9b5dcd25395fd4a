#!/usr/bin/env python3
"""
Impact Phase Controller for the Planetary Defense Simulator.

After a failed intercept the asteroid strikes Earth. This controller drives
the cinematic state machine:

    approach -> impact -> explosion -> aftermath -> damaged -> reset -> complete

Every transition is gated only by time spent in the phase. The damage model
runs exactly once, on the aftermath -> damaged transition, and its result is
published with a DAMAGE_READY event. At most one transition happens per
tick; a long frame simply starts the next phase on that tick.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .catalog import Asteroid
from .damage import (
    DamageAssessment,
    assess,
    calculate_impact_energy,
    explosion_color,
    explosion_scale,
    sound_intensity,
)
from .events import EventDispatcher, SimulationEvent, SimulationEventType
from .physics import Vector3D, phase_progress, radial_approach

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

EARTH_POSITION = Vector3D(0.0, 0.0, 0.0)
EARTH_RADIUS = 0.5
APPROACH_START_DISTANCE = 8.0
APPROACH_DIRECTION = Vector3D(1.0, 0.3, 0.5)

ATMOSPHERIC_ENTRY_CUE_DURATION = 2.0
RUMBLE_CUE_DURATION = 1.5


class ImpactPhase(Enum):
    """Stages of the impact cinematic."""
    APPROACH = "approach"
    IMPACT = "impact"
    EXPLOSION = "explosion"
    AFTERMATH = "aftermath"
    DAMAGED = "damaged"
    RESET = "reset"
    COMPLETE = "complete"


# Nominal phase durations (seconds)
PHASE_DURATIONS: dict[ImpactPhase, float] = {
    ImpactPhase.APPROACH: 2.0,
    ImpactPhase.IMPACT: 0.1,
    ImpactPhase.EXPLOSION: 1.5,
    ImpactPhase.AFTERMATH: 1.0,
    ImpactPhase.DAMAGED: 3.0,
    ImpactPhase.RESET: 0.5,
}

NEXT_PHASE: dict[ImpactPhase, ImpactPhase] = {
    ImpactPhase.APPROACH: ImpactPhase.IMPACT,
    ImpactPhase.IMPACT: ImpactPhase.EXPLOSION,
    ImpactPhase.EXPLOSION: ImpactPhase.AFTERMATH,
    ImpactPhase.AFTERMATH: ImpactPhase.DAMAGED,
    ImpactPhase.DAMAGED: ImpactPhase.RESET,
    ImpactPhase.RESET: ImpactPhase.COMPLETE,
}


# =============================================================================
# STATE
# =============================================================================

@dataclass
class ImpactState:
    """Mutable state of the impact cinematic. Owned by ImpactPhaseController."""
    phase: ImpactPhase = ImpactPhase.APPROACH
    clock: float = 0.0
    phase_start_time: float = 0.0
    asteroid_position: Vector3D = EARTH_POSITION
    assessment: Optional[DamageAssessment] = None

    @property
    def elapsed_in_phase(self) -> float:
        return self.clock - self.phase_start_time


@dataclass(frozen=True)
class ImpactSnapshot:
    """Read-only copy of the impact state for rendering."""
    phase: ImpactPhase
    elapsed_in_phase: float
    progress: float
    asteroid_position: Vector3D
    asteroid_visible: bool
    distance_to_earth: float
    impact_energy_mt: float
    explosion_size: float
    shockwave_size: float
    shockwave_opacity: float
    explosion_color: str
    fade: float
    assessment: Optional[DamageAssessment]


# =============================================================================
# CONTROLLER
# =============================================================================

class ImpactPhaseController:
    """
    Impact cinematic state machine for one asteroid.

    Attributes:
        asteroid: The impacting asteroid.
        dispatcher: Optional dispatcher receiving emitted events.
        earth_radius: Surface radius the asteroid falls to.
        state: Mutable impact state.
    """

    def __init__(
        self,
        asteroid: Asteroid,
        dispatcher: Optional[EventDispatcher] = None,
        *,
        earth_radius: float = EARTH_RADIUS,
        damage_model: Callable[[float, float], DamageAssessment] = assess,
        start_time: float = 0.0
    ) -> None:
        """
        Initialize the controller.

        Args:
            asteroid: Impacting asteroid.
            dispatcher: Where emitted events are delivered, if anywhere.
            earth_radius: Earth radius in scene units.
            damage_model: ``(mass_kg, velocity_kps) -> DamageAssessment``.
            start_time: Run clock value the cinematic starts at, so event
                timestamps continue the mission's timeline.
        """
        self.asteroid = asteroid
        self.dispatcher = dispatcher
        self.earth_radius = earth_radius
        self.damage_model = damage_model

        self.impact_energy_mt = calculate_impact_energy(asteroid.mass_kg, asteroid.velocity_kps)
        self._explosion_scale = explosion_scale(self.impact_energy_mt)

        self.state = ImpactState(clock=start_time, phase_start_time=start_time)
        self.state.asteroid_position = self._approach_position(0.0)

        self._started = False
        self._cancelled = False
        self._pending: list[SimulationEvent] = []

    @property
    def finished(self) -> bool:
        """Whether the cinematic reached COMPLETE."""
        return self.state.phase == ImpactPhase.COMPLETE

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def start(self) -> list[SimulationEvent]:
        """Begin the cinematic. Called automatically by the first tick."""
        if self._started or self._cancelled:
            return []
        self._started = True
        logger.info("Impact cinematic started for %s (%.3g MT)", self.asteroid.name, self.impact_energy_mt)
        self._emit(SimulationEventType.PHASE_CHANGED, {"phase": self.state.phase.value})
        self._emit(SimulationEventType.ATMOSPHERIC_ENTRY, {"duration": ATMOSPHERIC_ENTRY_CUE_DURATION})
        return self._flush()

    def cancel(self) -> None:
        """Tear down the cinematic; nothing is emitted afterwards."""
        if self._cancelled:
            return
        self._cancelled = True
        self._pending.clear()
        logger.info("Impact cinematic cancelled in phase %s", self.state.phase.value)

    # -------------------------------------------------------------------------
    # Tick
    # -------------------------------------------------------------------------

    def on_tick(self, delta_seconds: float) -> None:
        """Host frame callback; state is read back through ``get_state``."""
        self.step(delta_seconds)

    def step(self, delta_seconds: float) -> list[SimulationEvent]:
        """
        Advance the cinematic by one frame.

        Returns:
            Events emitted during this tick.

        Raises:
            ValueError: If delta_seconds is negative.
        """
        if delta_seconds < 0:
            raise ValueError("Tick delta must be non-negative")
        if self._cancelled or self.finished:
            return []

        events = self.start() if not self._started else []

        state = self.state
        state.clock += delta_seconds

        if state.phase == ImpactPhase.APPROACH:
            state.asteroid_position = self._approach_position(state.elapsed_in_phase)

        if state.elapsed_in_phase >= PHASE_DURATIONS[state.phase]:
            self._advance()

        events.extend(self._flush())
        return events

    def _advance(self) -> None:
        """Leave the current phase and run the entry actions of the next one."""
        state = self.state
        previous = state.phase
        phase = NEXT_PHASE[previous]
        state.phase = phase
        state.phase_start_time = state.clock
        logger.info("Impact phase %s -> %s at T+%.2fs", previous.value, phase.value, state.clock)
        self._emit(SimulationEventType.PHASE_CHANGED, {"from": previous.value, "phase": phase.value})

        if phase == ImpactPhase.IMPACT:
            state.asteroid_position = self._approach_position(PHASE_DURATIONS[ImpactPhase.APPROACH])
            self._emit(SimulationEventType.IMPACT)
        elif phase == ImpactPhase.EXPLOSION:
            self._emit(SimulationEventType.EXPLOSION, {
                "intensity": sound_intensity(self.impact_energy_mt),
            })
        elif phase == ImpactPhase.AFTERMATH:
            self._emit(SimulationEventType.RUMBLE, {"duration": RUMBLE_CUE_DURATION})
        elif phase == ImpactPhase.DAMAGED:
            if state.assessment is None:
                state.assessment = self.damage_model(self.asteroid.mass_kg, self.asteroid.velocity_kps)
                self._emit(SimulationEventType.DAMAGE_READY, {"assessment": state.assessment})
        elif phase == ImpactPhase.RESET:
            self._emit(SimulationEventType.VISUAL_FADE)
        elif phase == ImpactPhase.COMPLETE:
            self._emit(SimulationEventType.IMPACT_COMPLETE)

    def _approach_position(self, elapsed: float) -> Vector3D:
        return radial_approach(
            EARTH_POSITION,
            APPROACH_DIRECTION,
            APPROACH_START_DISTANCE,
            self.earth_radius,
            elapsed,
            PHASE_DURATIONS[ImpactPhase.APPROACH],
        )

    def _emit(self, event_type: SimulationEventType, data: Optional[dict] = None) -> None:
        self._pending.append(SimulationEvent(
            event_type=event_type,
            timestamp=self.state.clock,
            source="impact",
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

    def get_state(self) -> ImpactSnapshot:
        """Read-only snapshot of the cinematic for rendering."""
        state = self.state
        phase = state.phase
        duration = PHASE_DURATIONS.get(phase, 0.0)
        progress = phase_progress(state.elapsed_in_phase, duration)

        explosion_size = 0.0
        shockwave_size = 0.0
        shockwave_opacity = 0.0
        if phase == ImpactPhase.EXPLOSION:
            explosion_size = self._explosion_scale * (1 - (1 - progress) ** 3)
            shockwave_size = self._explosion_scale * 2 * progress
            shockwave_opacity = 0.6 * (1 - progress)
        elif phase == ImpactPhase.AFTERMATH:
            explosion_size = self._explosion_scale * (1 + progress * 0.5)

        return ImpactSnapshot(
            phase=phase,
            elapsed_in_phase=state.elapsed_in_phase,
            progress=progress,
            asteroid_position=state.asteroid_position,
            asteroid_visible=phase == ImpactPhase.APPROACH,
            distance_to_earth=state.asteroid_position.distance_to(EARTH_POSITION),
            impact_energy_mt=self.impact_energy_mt,
            explosion_size=explosion_size,
            shockwave_size=shockwave_size,
            shockwave_opacity=shockwave_opacity,
            explosion_color=explosion_color(self.impact_energy_mt),
            fade=progress if phase == ImpactPhase.RESET else (1.0 if phase == ImpactPhase.COMPLETE else 0.0),
            assessment=state.assessment,
        )
