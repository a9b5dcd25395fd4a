#!/usr/bin/env python3
"""
Effect engine interface for the Planetary Defense Simulator.

The effect engine is the audio/visual collaborator. It is constructed and
disposed alongside a mission run rather than living as a global. The
simulation only tells it *which* cue to play; waveform synthesis, mixing
and timing belong to concrete subclasses.
"""

from __future__ import annotations

import logging
from typing import Callable

from .events import SimulationEvent, SimulationEventType

logger = logging.getLogger(__name__)


class EffectEngine:
    """
    Base effect engine with an explicit start/stop/dispose lifecycle.

    Cues received while the engine is stopped or disposed are ignored.
    Subclasses override the ``on_*`` hooks; the defaults only log.
    """

    def __init__(self) -> None:
        self.running = False
        self.disposed = False
        self._handlers: dict[SimulationEventType, Callable[[SimulationEvent], None]] = {
            SimulationEventType.SPACE_AMBIENCE_START: lambda e: self.on_space_ambience_start(),
            SimulationEventType.SPACE_AMBIENCE_STOP: lambda e: self.on_space_ambience_stop(),
            SimulationEventType.LAUNCH: lambda e: self.on_launch(),
            SimulationEventType.LASER_BEAM_START: lambda e: self.on_laser_beam_start(),
            SimulationEventType.LASER_BEAM_STOP: lambda e: self.on_laser_beam_stop(),
            SimulationEventType.IMPACT: lambda e: self.on_impact(),
            SimulationEventType.NUCLEAR_EXPLOSION: lambda e: self.on_nuclear_explosion(),
            SimulationEventType.SUCCESS: lambda e: self.on_success(),
            SimulationEventType.FAILURE: lambda e: self.on_failure(),
            SimulationEventType.ATMOSPHERIC_ENTRY: lambda e: self.on_atmospheric_entry(
                e.data.get("duration", 2.0)),
            SimulationEventType.EXPLOSION: lambda e: self.on_explosion(
                e.data.get("intensity", 1.0)),
            SimulationEventType.RUMBLE: lambda e: self.on_rumble(
                e.data.get("duration", 1.5)),
        }

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """Begin accepting cues."""
        if self.disposed:
            return
        self.running = True

    def stop(self) -> None:
        """Silence everything and stop accepting cues."""
        self.running = False

    def dispose(self) -> None:
        """Release resources. The engine cannot be restarted afterwards."""
        self.stop()
        self.disposed = True

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def handle(self, event: SimulationEvent) -> None:
        """Route a simulation event to its cue hook (non-cue events are ignored)."""
        if not self.running:
            return
        handler = self._handlers.get(event.event_type)
        if handler is not None:
            handler(event)

    # -------------------------------------------------------------------------
    # Cue hooks
    # -------------------------------------------------------------------------

    def on_space_ambience_start(self) -> None:
        logger.debug("cue: space ambience start")

    def on_space_ambience_stop(self) -> None:
        logger.debug("cue: space ambience stop")

    def on_launch(self) -> None:
        logger.debug("cue: launch")

    def on_laser_beam_start(self) -> None:
        logger.debug("cue: laser beam start")

    def on_laser_beam_stop(self) -> None:
        logger.debug("cue: laser beam stop")

    def on_impact(self) -> None:
        logger.debug("cue: impact")

    def on_nuclear_explosion(self) -> None:
        logger.debug("cue: nuclear explosion")

    def on_success(self) -> None:
        logger.debug("cue: success")

    def on_failure(self) -> None:
        logger.debug("cue: failure")

    def on_atmospheric_entry(self, duration: float) -> None:
        logger.debug("cue: atmospheric entry (%.1fs)", duration)

    def on_explosion(self, intensity: float) -> None:
        logger.debug("cue: explosion (intensity %.2f)", intensity)

    def on_rumble(self, duration: float) -> None:
        logger.debug("cue: rumble (%.1fs)", duration)


class CueRecorder(EffectEngine):
    """Effect engine that records cue names in order; used by headless runs."""

    def __init__(self) -> None:
        super().__init__()
        self.cues: list[str] = []

    def handle(self, event: SimulationEvent) -> None:
        if self.running and event.is_effect_cue:
            self.cues.append(event.event_type.name)
        super().handle(event)
