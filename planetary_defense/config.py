"""
Configuration for the Planetary Defense Simulator.

Tunables come from environment variables with defaults matching the
simulation constants. A ``.env`` file in the working directory is loaded
through python-dotenv without overriding the real environment.

Environment variables:
    PLANETARY_DEFENSE_LOG_LEVEL            logging level name (WARNING)
    PLANETARY_DEFENSE_SEED                 integer RNG seed (unset = random)
    PLANETARY_DEFENSE_TIME_BUDGET_S        mission countdown budget (30)
    PLANETARY_DEFENSE_INTERCEPT_THRESHOLD  intercept distance (0.3)
    PLANETARY_DEFENSE_EARTH_RADIUS         impact cinematic Earth radius (0.5)
    PLANETARY_DEFENSE_TICK_HZ              headless runner tick rate (60)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

# Load environment variables from a `.env` file if present.
load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

ENV_PREFIX = "PLANETARY_DEFENSE_"

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def _read_float(env: Mapping[str, str], name: str, default: float, *, positive: bool = True) -> float:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be a number, got {raw!r}") from None
    if positive and not value > 0:
        raise ValueError(f"{ENV_PREFIX}{name} must be positive, got {raw!r}")
    return value


def _read_seed(env: Mapping[str, str]) -> Optional[int]:
    raw = env.get(ENV_PREFIX + "SEED")
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}SEED must be an integer, got {raw!r}") from None


def _read_log_level(env: Mapping[str, str]) -> str:
    level = env.get(ENV_PREFIX + "LOG_LEVEL", "WARNING").strip().upper() or "WARNING"
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"{ENV_PREFIX}LOG_LEVEL is not a logging level: {level!r}")
    return level


@dataclass(frozen=True)
class Settings:
    """Container for tunable runtime parameters."""

    log_level: str = "WARNING"
    seed: Optional[int] = None
    time_budget_s: float = 30.0
    intercept_threshold: float = 0.3
    earth_radius: float = 0.5
    tick_hz: float = 60.0

    @property
    def tick_seconds(self) -> float:
        """Fixed frame delta for headless runs."""
        return 1.0 / self.tick_hz

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> Settings:
        """
        Build settings from environment variables.

        Raises:
            ValueError: If a variable is set to a malformed value.
        """
        env = os.environ if env is None else env
        return cls(
            log_level=_read_log_level(env),
            seed=_read_seed(env),
            time_budget_s=_read_float(env, "TIME_BUDGET_S", 30.0),
            intercept_threshold=_read_float(env, "INTERCEPT_THRESHOLD", 0.3),
            earth_radius=_read_float(env, "EARTH_RADIUS", 0.5),
            tick_hz=_read_float(env, "TICK_HZ", 60.0),
        )


def get_settings() -> Settings:
    """Factory returning an immutable settings instance read from the environment."""

    return Settings.from_env()


def configure_logging(level: str | int = "WARNING") -> None:
    """Install a basic stderr handler on the root logger. Meant for scripts."""
    if isinstance(level, str):
        level = level.upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)
