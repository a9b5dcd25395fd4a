#!/usr/bin/env python3
"""
Mission Orchestrator for the Planetary Defense Simulator.

Top-level sequencer for one run:

    MissionPhaseController --success--> complete
                           --failure--> ImpactPhaseController --> complete

The orchestrator owns the effect engine and the event dispatcher for the
run. Every event a controller emits is routed, in order, to the effect
engine, to dispatcher subscribers and to the recorded event log; handoff
events additionally drive the typed host callbacks.

Usage:
    orchestrator = MissionOrchestrator(
        asteroid, strategy,
        callbacks=HostCallbacks(on_complete=show_results),
    )
    while not orchestrator.finished:
        orchestrator.on_tick(frame_delta)
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from .catalog import Asteroid, DefenseStrategy
from .config import Settings
from .damage import DamageAssessment, assess
from .effects import EffectEngine
from .events import EventDispatcher, SimulationEvent, SimulationEventType
from .impact import ImpactPhaseController, ImpactSnapshot
from .mission import MissionPhaseController, MissionSnapshot
from .outcome import OutcomeResolver, roll_deflection_amount

logger = logging.getLogger(__name__)


# Upper bound on headless run length (simulated seconds)
MAX_RUN_SECONDS = 120.0


class OrchestratorStage(Enum):
    """Which controller currently owns the run."""
    MISSION = "mission"
    IMPACT = "impact"
    COMPLETE = "complete"
    CANCELLED = "cancelled"


@dataclass
class HostCallbacks:
    """
    Typed notifications to the host application. Any of them may be None.

    Attributes:
        on_complete: ``(success, deflection_amount)`` once per run.
        on_show_impact: Mission failed; the impact cinematic is starting.
        on_impact_complete: The impact cinematic finished.
        on_damage_ready: Damage assessment for the impact display.
    """
    on_complete: Optional[Callable[[bool, float], None]] = None
    on_show_impact: Optional[Callable[[], None]] = None
    on_impact_complete: Optional[Callable[[], None]] = None
    on_damage_ready: Optional[Callable[[DamageAssessment], None]] = None


@dataclass(frozen=True)
class OrchestratorSnapshot:
    """Read-only view of the whole run."""
    stage: OrchestratorStage
    mission: MissionSnapshot
    impact: Optional[ImpactSnapshot]
    success: Optional[bool]
    deflection_amount: Optional[float]
    assessment: Optional[DamageAssessment]


class MissionOrchestrator:
    """
    Sequences the mission and impact controllers for one run.

    Attributes:
        asteroid: Incoming asteroid.
        strategy: Chosen defense strategy.
        settings: Runtime settings.
        rng: Random source shared by the resolver and deflection rolls.
        effects: Effect engine driven by the run's cues.
        dispatcher: Dispatcher fanning events out to subscribers.
        callbacks: Host callbacks.
        mission: The mission controller.
        impact: The impact controller, created on failure.
        events: Every event routed during the run, in order.
    """

    def __init__(
        self,
        asteroid: Asteroid,
        strategy: DefenseStrategy,
        *,
        rng: Optional[random.Random] = None,
        settings: Optional[Settings] = None,
        effects: Optional[EffectEngine] = None,
        dispatcher: Optional[EventDispatcher] = None,
        callbacks: Optional[HostCallbacks] = None,
        damage_model: Callable[[float, float], DamageAssessment] = assess
    ) -> None:
        self.asteroid = asteroid
        self.strategy = strategy
        self.settings = settings or Settings()
        self.rng = rng or random.Random(self.settings.seed)
        self.effects = effects or EffectEngine()
        self.dispatcher = dispatcher or EventDispatcher()
        self.callbacks = callbacks or HostCallbacks()
        self.damage_model = damage_model

        self.mission = MissionPhaseController(
            asteroid,
            strategy,
            resolver=OutcomeResolver(self.rng),
            intercept_threshold=self.settings.intercept_threshold,
            time_budget=self.settings.time_budget_s,
        )
        self.impact: Optional[ImpactPhaseController] = None

        self.stage = OrchestratorStage.MISSION
        self.success: Optional[bool] = None
        self.deflection_amount: Optional[float] = None
        self.assessment: Optional[DamageAssessment] = None
        self.events: list[SimulationEvent] = []

        self._started = False

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    @property
    def finished(self) -> bool:
        """Whether the run is over, either completed or cancelled."""
        return self.stage in (OrchestratorStage.COMPLETE, OrchestratorStage.CANCELLED)

    @property
    def clock(self) -> float:
        """Run time of the active controller."""
        if self.impact is not None:
            return self.impact.state.clock
        return self.mission.state.clock

    def start(self) -> list[SimulationEvent]:
        """Start the effect engine and the mission. Called by the first tick."""
        if self._started or self.finished:
            return []
        self._started = True
        self._call_effects("start")
        return self._route_all(self.mission.start())

    def cancel(self) -> None:
        """
        Tear the run down: both controllers are cancelled, the effect engine
        is disposed and the dispatcher closed. Nothing fires afterwards.
        """
        if self.stage == OrchestratorStage.CANCELLED:
            return
        logger.info("Run cancelled during %s stage", self.stage.value)
        self.stage = OrchestratorStage.CANCELLED
        self.mission.cancel()
        if self.impact is not None:
            self.impact.cancel()
        self._call_effects("dispose")
        self.dispatcher.close()

    # -------------------------------------------------------------------------
    # Tick
    # -------------------------------------------------------------------------

    def on_tick(self, delta_seconds: float) -> None:
        """Host frame callback."""
        self.step(delta_seconds)

    def step(self, delta_seconds: float) -> list[SimulationEvent]:
        """
        Advance the active controller by one frame.

        Returns:
            Events routed during this tick.

        Raises:
            ValueError: If delta_seconds is negative.
        """
        if delta_seconds < 0:
            raise ValueError("Tick delta must be non-negative")
        if self.finished:
            return []

        routed = self.start() if not self._started else []
        if self.finished:
            return routed

        if self.stage == OrchestratorStage.MISSION:
            raw = self.mission.step(delta_seconds)
        else:
            raw = self.impact.step(delta_seconds)

        routed.extend(self._route_all(raw))
        return routed

    def run(self, delta_seconds: Optional[float] = None, max_seconds: float = MAX_RUN_SECONDS) -> list[SimulationEvent]:
        """
        Tick at a fixed rate until the run finishes or ``max_seconds`` of
        simulated time pass.

        Args:
            delta_seconds: Frame delta (defaults to 1 / settings.tick_hz).
            max_seconds: Simulated time limit.

        Returns:
            All events routed during the run.
        """
        dt = delta_seconds if delta_seconds is not None else self.settings.tick_seconds
        if dt <= 0:
            raise ValueError("Run delta must be positive")

        elapsed = 0.0
        while not self.finished and elapsed < max_seconds:
            self.step(dt)
            elapsed += dt

        if not self.finished:
            logger.warning("Run did not finish within %.1fs (stage %s)", max_seconds, self.stage.value)
        return list(self.events)

    # -------------------------------------------------------------------------
    # Routing
    # -------------------------------------------------------------------------

    def _route_all(self, events: list[SimulationEvent]) -> list[SimulationEvent]:
        routed: list[SimulationEvent] = []
        for event in events:
            if self.stage == OrchestratorStage.CANCELLED:
                break
            routed.extend(self._route(event))
        return routed

    def _route(self, event: SimulationEvent) -> list[SimulationEvent]:
        """Publish one controller event and act on the handoffs it carries."""
        event_type = event.event_type

        # The mission's own completion is replaced by the run-level one
        if event_type == SimulationEventType.MISSION_COMPLETE:
            return self._complete(True)

        routed = [event]
        self._publish(event)

        if event_type == SimulationEventType.SHOW_IMPACT:
            routed.extend(self._begin_impact())
        elif event_type == SimulationEventType.DAMAGE_READY:
            self.assessment = event.data.get("assessment")
            self._notify(self.callbacks.on_damage_ready, self.assessment)
        elif event_type == SimulationEventType.IMPACT_COMPLETE:
            self._notify(self.callbacks.on_impact_complete)
            if self.stage != OrchestratorStage.CANCELLED:
                routed.extend(self._complete(False))

        return routed

    def _begin_impact(self) -> list[SimulationEvent]:
        logger.info("Mission failed; handing off to impact cinematic for %s", self.asteroid.name)
        self.stage = OrchestratorStage.IMPACT
        self.impact = ImpactPhaseController(
            self.asteroid,
            earth_radius=self.settings.earth_radius,
            damage_model=self.damage_model,
            start_time=self.mission.state.clock,
        )
        self._notify(self.callbacks.on_show_impact)
        if self.stage == OrchestratorStage.CANCELLED:
            return []
        return self._route_all(self.impact.start())

    def _complete(self, success: bool) -> list[SimulationEvent]:
        """Report the run result to the host exactly once."""
        if self.success is not None:
            return []
        self.success = success
        self.deflection_amount = roll_deflection_amount(success, self.rng)
        self.stage = OrchestratorStage.COMPLETE
        logger.info(
            "Run complete: %s (deflection %.1f%%)",
            "success" if success else "failure", self.deflection_amount
        )

        event = SimulationEvent(
            event_type=SimulationEventType.MISSION_COMPLETE,
            timestamp=self.clock,
            source="orchestrator",
            phase=self.stage.value,
            data={"success": success, "deflection_amount": self.deflection_amount},
        )
        self._publish(event)
        self._notify(self.callbacks.on_complete, success, self.deflection_amount)
        self._call_effects("dispose")
        return [event]

    def _publish(self, event: SimulationEvent) -> None:
        self.events.append(event)
        self._call_effects("handle", event)
        self.dispatcher.dispatch(event)

    def _call_effects(self, method: str, *args: Any) -> None:
        # A failing effect engine must not drop the rest of the tick
        try:
            getattr(self.effects, method)(*args)
        except Exception:
            logger.exception("Effect engine %s failed", method)

    def _notify(self, callback: Optional[Callable[..., Any]], *args: Any) -> None:
        if callback is None:
            return
        try:
            callback(*args)
        except Exception:
            logger.exception("Host callback %s failed", getattr(callback, "__name__", callback))

    # -------------------------------------------------------------------------
    # Snapshot
    # -------------------------------------------------------------------------

    def get_state(self) -> OrchestratorSnapshot:
        """Read-only view of the run for the host."""
        return OrchestratorSnapshot(
            stage=self.stage,
            mission=self.mission.get_state(),
            impact=self.impact.get_state() if self.impact is not None else None,
            success=self.success,
            deflection_amount=self.deflection_amount,
            assessment=self.assessment,
        )
