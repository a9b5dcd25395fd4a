#!/usr/bin/env python3
"""
Run one headless planetary defense mission and print the results report.

Usage:
    python scripts/run_mission.py --asteroid apophis --strategy DART
    python scripts/run_mission.py --asteroid bennu --strategy NUKE --seed 7 --json
    python scripts/run_mission.py --custom-diameter 1200 --custom-velocity 30 --strategy GRAV
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from planetary_defense.catalog import (
    create_custom_asteroid, get_asteroid, get_strategy, load_asteroids, load_strategies
)
from planetary_defense.config import Settings, configure_logging, get_settings
from planetary_defense.effects import CueRecorder
from planetary_defense.orchestrator import HostCallbacks, MissionOrchestrator
from planetary_defense.report import assess_threat, create_report_from_orchestrator


def main():
    settings = get_settings()

    parser = argparse.ArgumentParser(
        description="Run a headless planetary defense mission",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python scripts/run_mission.py --asteroid apophis --strategy DART
    python scripts/run_mission.py --asteroid 2024-yr4 --strategy laser --verbose
    python scripts/run_mission.py --list
        """,
    )

    parser.add_argument(
        "--asteroid",
        default="2024-yr4",
        help="Catalog asteroid id (default: 2024-yr4)",
    )
    parser.add_argument(
        "--strategy",
        default="DART",
        help="Strategy id or mission code (default: DART)",
    )
    parser.add_argument(
        "--custom-diameter",
        type=float,
        help="Fly against a custom asteroid of this diameter (m) instead",
    )
    parser.add_argument(
        "--custom-velocity",
        type=float,
        default=20.0,
        help="Velocity of the custom asteroid in km/s (default: 20)",
    )
    parser.add_argument(
        "--custom-torino",
        type=int,
        default=1,
        help="Torino level of the custom asteroid (default: 1)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=settings.seed,
        help="RNG seed (default: PLANETARY_DEFENSE_SEED or random)",
    )
    parser.add_argument(
        "--tick-hz",
        type=float,
        default=settings.tick_hz,
        help=f"Fixed tick rate (default: {settings.tick_hz:g})",
    )

    # Output
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the report as JSON",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List catalog asteroids and strategies, then exit",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log phase transitions",
    )

    args = parser.parse_args()

    configure_logging("INFO" if args.verbose else settings.log_level)

    if args.list:
        print("ASTEROIDS:")
        for asteroid in load_asteroids():
            print(f"  {asteroid.asteroid_id:<10} {asteroid.name:<22} {asteroid.diameter_m:>6.0f} m  "
                  f"{asteroid.velocity_kps:>5.1f} km/s  Torino {asteroid.torino_scale}")
        print("STRATEGIES:")
        for strategy in load_strategies():
            print(f"  {strategy.strategy_id:<10} {strategy.code:<5} {strategy.name:<24} "
                  f"{strategy.success_rate:.0%}")
        return 0

    try:
        if args.custom_diameter is not None:
            asteroid = create_custom_asteroid(
                diameter_m=args.custom_diameter,
                velocity_kps=args.custom_velocity,
                torino_scale=args.custom_torino,
            )
        else:
            asteroid = get_asteroid(args.asteroid)
        strategy = get_strategy(args.strategy)
    except KeyError as e:
        print(f"Error: {e.args[0]}", file=sys.stderr)
        return 1

    run_settings = Settings(
        log_level=settings.log_level,
        seed=args.seed,
        time_budget_s=settings.time_budget_s,
        intercept_threshold=settings.intercept_threshold,
        earth_radius=settings.earth_radius,
        tick_hz=args.tick_hz,
    )

    if not args.json:
        threat = assess_threat(asteroid)
        print(f"Target: {asteroid.name} ({asteroid.diameter_m:.0f} m, {asteroid.velocity_kps:.1f} km/s)")
        print(f"Threat: Torino {threat.torino_scale} ({threat.torino_band}) - {threat.torino_description}")
        print(f"Energy: {threat.impact_energy_mt:.2f} MT, damage radius {threat.damage_radius_km:.2f} km")
        print()

    recorder = CueRecorder()
    callbacks = HostCallbacks(
        on_show_impact=lambda: None if args.json else print(">>> Intercept failed - impact imminent"),
    )
    orchestrator = MissionOrchestrator(
        asteroid,
        strategy,
        settings=run_settings,
        effects=recorder,
        callbacks=callbacks,
    )
    orchestrator.run()

    if orchestrator.success is None:
        print("Error: mission did not complete", file=sys.stderr)
        return 1

    report = create_report_from_orchestrator(orchestrator)
    if args.json:
        print(report.to_json())
    else:
        print(report.to_text())
        if args.verbose:
            print("Cues: " + ", ".join(recorder.cues))

    return 0


if __name__ == "__main__":
    sys.exit(main())
