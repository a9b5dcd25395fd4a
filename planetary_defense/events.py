#!/usr/bin/env python3
"""
Simulation events for the Planetary Defense Simulator.

Controllers never call presentation code directly. Each tick they collect
``SimulationEvent`` records and hand them to an ``EventDispatcher``, which
fans them out to subscribers (effect engine, host callbacks, recorders).
Events are synchronous, fire-and-forget notifications.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable

logger = logging.getLogger(__name__)


# =============================================================================
# EVENT TYPES
# =============================================================================

class SimulationEventType(Enum):
    """Types of events emitted by the mission and impact controllers."""
    # Effect cues (consumed by the effect engine)
    SPACE_AMBIENCE_START = auto()
    SPACE_AMBIENCE_STOP = auto()
    LAUNCH = auto()
    LASER_BEAM_START = auto()
    LASER_BEAM_STOP = auto()
    IMPACT = auto()
    NUCLEAR_EXPLOSION = auto()
    SUCCESS = auto()
    FAILURE = auto()
    ATMOSPHERIC_ENTRY = auto()
    EXPLOSION = auto()
    RUMBLE = auto()

    # Phase flow
    PHASE_CHANGED = auto()
    OUTCOME_RESOLVED = auto()
    VISUAL_FADE = auto()

    # Handoffs and completion (consumed by the host)
    SHOW_IMPACT = auto()
    DAMAGE_READY = auto()
    IMPACT_COMPLETE = auto()
    MISSION_COMPLETE = auto()


EFFECT_CUES = frozenset({
    SimulationEventType.SPACE_AMBIENCE_START,
    SimulationEventType.SPACE_AMBIENCE_STOP,
    SimulationEventType.LAUNCH,
    SimulationEventType.LASER_BEAM_START,
    SimulationEventType.LASER_BEAM_STOP,
    SimulationEventType.IMPACT,
    SimulationEventType.NUCLEAR_EXPLOSION,
    SimulationEventType.SUCCESS,
    SimulationEventType.FAILURE,
    SimulationEventType.ATMOSPHERIC_ENTRY,
    SimulationEventType.EXPLOSION,
    SimulationEventType.RUMBLE,
})


# =============================================================================
# SIMULATION EVENT
# =============================================================================

@dataclass
class SimulationEvent:
    """
    An event that occurs during a mission run.

    Attributes:
        event_type: The type of event.
        timestamp: Run clock when the event occurred (seconds).
        source: Emitting stage ('mission', 'impact' or 'orchestrator').
        phase: Phase name at emission time.
        data: Additional event-specific data.
    """
    event_type: SimulationEventType
    timestamp: float
    source: str = ""
    phase: str = ""
    data: dict = field(default_factory=dict)

    @property
    def is_effect_cue(self) -> bool:
        """Whether this event is an audio/visual effect cue."""
        return self.event_type in EFFECT_CUES

    def __str__(self) -> str:
        phase_str = f"[{self.source}:{self.phase}]" if self.phase else f"[{self.source}]"
        return f"T+{self.timestamp:.2f}s {phase_str} {self.event_type.name}"


EventCallback = Callable[[SimulationEvent], None]


# =============================================================================
# DISPATCHER
# =============================================================================

class EventDispatcher:
    """
    Delivers events to subscribers in subscription order.

    A failing subscriber is logged and skipped; delivery continues to the
    rest. After ``close()`` nothing is delivered again.
    """

    def __init__(self) -> None:
        self._subscribers: list[EventCallback] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        """Whether the dispatcher has been closed."""
        return self._closed

    def subscribe(self, callback: EventCallback) -> None:
        """Register a callback for every dispatched event."""
        self._subscribers.append(callback)

    def unsubscribe(self, callback: EventCallback) -> None:
        """Remove a callback."""
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def dispatch(self, event: SimulationEvent) -> None:
        """Deliver one event to all subscribers."""
        if self._closed:
            return
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                logger.exception("Event subscriber failed on %s", event.event_type.name)

    def dispatch_all(self, events: list[SimulationEvent]) -> None:
        """Deliver events in order, stopping if a subscriber closes the dispatcher."""
        for event in events:
            if self._closed:
                return
            self.dispatch(event)

    def close(self) -> None:
        """Stop all further delivery and drop subscribers."""
        self._closed = True
        self._subscribers.clear()
