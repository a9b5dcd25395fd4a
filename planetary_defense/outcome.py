#!/usr/bin/env python3
"""
Outcome Resolution for the Planetary Defense Simulator.

This module decides whether an intercept succeeds:
- OutcomeResolver: the authoritative, randomized success draw
- OutcomeLatch: at-most-once guard around the resolver for one mission run
- estimate_success_probability: display-only figure shown before intercept
- comparison_probability: effectiveness-weighted figure for strategy comparison
- roll_deflection_amount: narrative deflection percentage for the results

Only ``OutcomeResolver.resolve`` decides an outcome. The display estimator
uses a softer penalty schedule and a [20, 95] clamp; the two are kept
separate on purpose and must not be unified.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from typing import Optional

from .catalog import Asteroid, DefenseStrategy

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

# Authoritative penalty schedule (percentage points)
LARGE_DIAMETER_M = 500.0
HUGE_DIAMETER_M = 1000.0
LARGE_SIZE_PENALTY = 15.0
HUGE_SIZE_PENALTY = 20.0
COORDINATION_TORINO_LEVEL = 5
COORDINATION_PENALTY = 20.0
MIN_SUCCESS_CHANCE = 20.0

# Display-only penalty schedule (percentage points)
DISPLAY_LARGE_SIZE_PENALTY = 10.0
DISPLAY_HUGE_SIZE_PENALTY = 15.0
DISPLAY_COORDINATION_PENALTY = 15.0
DISPLAY_MIN_PROBABILITY = 20.0
DISPLAY_MAX_PROBABILITY = 95.0

# Narrative deflection ranges (percent)
SUCCESS_DEFLECTION_RANGE = (50.0, 100.0)
FAILURE_DEFLECTION_RANGE = (0.0, 30.0)


def _finite_or_zero(value: float) -> float:
    """Replace NaN/inf with zero so penalties never poison the chance."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    return value if math.isfinite(value) else 0.0


# =============================================================================
# AUTHORITATIVE RESOLVER
# =============================================================================

class OutcomeResolver:
    """
    Resolves an intercept into success or failure.

    The chance starts at ``success_rate * 100``, loses 15 points above
    500 m and a further 20 above 1000 m, loses 20 points when the Torino
    level is 5 or more and the strategy is not nuclear-class, and is floored
    at 20. One uniform draw in [0, 100) below the chance is a success.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        """
        Initialize the resolver.

        Args:
            rng: Random number source; any object with a ``random()`` method
                returning floats in [0, 1).
        """
        self.rng = rng or random.Random()

    @staticmethod
    def raw_chance(strategy: DefenseStrategy, asteroid: Asteroid) -> float:
        """Success chance in percent after penalties, before the floor."""
        chance = _finite_or_zero(strategy.success_rate) * 100.0
        diameter = _finite_or_zero(asteroid.diameter_m)

        if diameter > LARGE_DIAMETER_M:
            chance -= LARGE_SIZE_PENALTY
        if diameter > HUGE_DIAMETER_M:
            chance -= HUGE_SIZE_PENALTY

        if asteroid.torino_scale >= COORDINATION_TORINO_LEVEL and not strategy.is_nuclear:
            chance -= COORDINATION_PENALTY

        return chance

    @classmethod
    def resolved_chance(cls, strategy: DefenseStrategy, asteroid: Asteroid) -> float:
        """Success chance in percent that the draw is compared against."""
        return max(MIN_SUCCESS_CHANCE, cls.raw_chance(strategy, asteroid))

    def resolve(self, strategy: DefenseStrategy, asteroid: Asteroid) -> bool:
        """
        Draw the outcome.

        Returns:
            True if the intercept succeeds.
        """
        chance = self.resolved_chance(strategy, asteroid)
        draw = self.rng.random() * 100.0
        success = draw < chance
        logger.info(
            "Outcome resolved for %s vs %s: draw=%.2f chance=%.1f -> %s",
            strategy.code, asteroid.name, draw, chance,
            "success" if success else "failure"
        )
        return success


@dataclass
class OutcomeLatch:
    """
    At-most-once guard for outcome resolution in a single mission run.

    The intercept check runs every tick and may stay true for many ticks;
    only the first call to ``try_resolve`` reaches the resolver.

    Attributes:
        determined: Whether the outcome has been resolved.
        success: The resolved outcome, or None while undetermined.
    """
    determined: bool = False
    success: Optional[bool] = None

    def try_resolve(
        self,
        resolver: OutcomeResolver,
        strategy: DefenseStrategy,
        asteroid: Asteroid
    ) -> Optional[bool]:
        """
        Resolve the outcome if it has not been resolved yet.

        Returns:
            The outcome on the first call, None on every later call.
        """
        if self.determined:
            logger.debug("Outcome already determined; ignoring repeat intercept")
            return None
        self.determined = True
        self.success = resolver.resolve(strategy, asteroid)
        return self.success


# =============================================================================
# PRESENTATION FIGURES
# =============================================================================

def estimate_success_probability(strategy: DefenseStrategy, asteroid: Asteroid) -> float:
    """
    Display-only success probability in percent, clamped to [20, 95].

    Never use this to decide an outcome.
    """
    prob = _finite_or_zero(strategy.success_rate) * 100.0
    diameter = _finite_or_zero(asteroid.diameter_m)

    if diameter > LARGE_DIAMETER_M:
        prob -= DISPLAY_LARGE_SIZE_PENALTY
    if diameter > HUGE_DIAMETER_M:
        prob -= DISPLAY_HUGE_SIZE_PENALTY
    if asteroid.torino_scale >= COORDINATION_TORINO_LEVEL and not strategy.is_nuclear:
        prob -= DISPLAY_COORDINATION_PENALTY

    return max(DISPLAY_MIN_PROBABILITY, min(DISPLAY_MAX_PROBABILITY, prob))


def comparison_probability(strategy: DefenseStrategy, asteroid: Asteroid) -> float:
    """Effectiveness-weighted success probability (0-1) for comparing strategies."""
    effectiveness = strategy.effectiveness_for(asteroid.size_class)
    return _finite_or_zero(strategy.success_rate) * effectiveness


def roll_deflection_amount(success: bool, rng: Optional[random.Random] = None) -> float:
    """
    Narrative trajectory change in percent.

    Uniform in [50, 100) after a successful intercept and in [0, 30)
    otherwise. Flavour only; it feeds the results report, not the outcome.
    """
    rng = rng or random.Random()
    low, high = SUCCESS_DEFLECTION_RANGE if success else FAILURE_DEFLECTION_RANGE
    return low + rng.random() * (high - low)
