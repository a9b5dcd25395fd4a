#!/usr/bin/env python3
# /// script
# requires-python = ">=3.10"
# dependencies = ["numpy", "python-dotenv"]
# ///
"""
Outcome Monte Carlo for the Planetary Defense Simulator

Estimates the empirical intercept success rate of every catalog strategy
against every catalog asteroid and sets it beside the resolver's chance,
the HUD estimate and the effectiveness-weighted comparison figure.

Usage:
    python scripts/outcome_monte_carlo.py
    python scripts/outcome_monte_carlo.py --trials 100000 --seed 1 --json
"""

import argparse
import json
import sys
from pathlib import Path

import numpy as np

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from planetary_defense.catalog import load_asteroids, load_strategies
from planetary_defense.outcome import (
    OutcomeResolver, comparison_probability, estimate_success_probability
)


def simulate_pair(resolver_chance: float, trials: int, rng: np.random.Generator) -> tuple[float, float]:
    """
    Empirical success rate and its standard error for one pairing.

    Each trial is one uniform draw in [0, 100) compared against the chance,
    exactly as OutcomeResolver.resolve does.
    """
    draws = rng.random(trials) * 100.0
    successes = draws < resolver_chance
    rate = successes.mean()
    stderr = np.sqrt(rate * (1 - rate) / trials)
    return float(rate), float(stderr)


def resolver_spot_check(trials: int, seed: int) -> float:
    """Run the real resolver with a numpy generator as its random source."""
    asteroid = load_asteroids()[0]
    strategy = load_strategies()[0]
    resolver = OutcomeResolver(np.random.default_rng(seed))
    outcomes = np.array([resolver.resolve(strategy, asteroid) for _ in range(trials)])
    return float(outcomes.mean())


def main():
    parser = argparse.ArgumentParser(description="Monte Carlo intercept success rates")
    parser.add_argument("--trials", type=int, default=20000, help="Draws per pairing (default: 20000)")
    parser.add_argument("--seed", type=int, default=42, help="numpy seed (default: 42)")
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    args = parser.parse_args()

    rng = np.random.default_rng(args.seed)
    asteroids = load_asteroids()
    strategies = load_strategies()

    results = []
    for asteroid in asteroids:
        for strategy in strategies:
            chance = OutcomeResolver.resolved_chance(strategy, asteroid)
            rate, stderr = simulate_pair(chance, args.trials, rng)
            results.append({
                "asteroid": asteroid.asteroid_id,
                "strategy": strategy.code,
                "resolver_chance": chance,
                "empirical_rate": rate * 100,
                "stderr": stderr * 100,
                "display_estimate": estimate_success_probability(strategy, asteroid),
                "comparison_probability": comparison_probability(strategy, asteroid) * 100,
            })

    if args.json:
        print(json.dumps(results, indent=2))
        return 0

    print("=" * 78)
    print(f"INTERCEPT SUCCESS RATES ({args.trials} trials per pairing, seed {args.seed})")
    print("=" * 78)
    print(f"{'Asteroid':<10} {'Code':<5} {'Chance':>8} {'Empirical':>10} {'+/-':>6} {'HUD':>6} {'Compare':>8}")
    print("-" * 78)
    for r in results:
        print(f"{r['asteroid']:<10} {r['strategy']:<5} {r['resolver_chance']:>7.1f}% "
              f"{r['empirical_rate']:>9.2f}% {r['stderr']:>5.2f} {r['display_estimate']:>5.0f}% "
              f"{r['comparison_probability']:>7.1f}%")

    chances = np.array([r["resolver_chance"] for r in results])
    empirical = np.array([r["empirical_rate"] for r in results])
    print("-" * 78)
    print(f"Max |empirical - chance|: {np.max(np.abs(empirical - chances)):.2f} points")

    spot = resolver_spot_check(min(args.trials, 5000), args.seed)
    print(f"Resolver spot check ({asteroids[0].asteroid_id} vs {strategies[0].code}): {spot * 100:.2f}%")
    return 0


if __name__ == "__main__":
    sys.exit(main())
