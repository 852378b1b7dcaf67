"""
Game Configuration - Timings, scoring and limits in one place.

Defaults reproduce the standard game. Tests override the delays,
deployments can override the rules through environment variables.
"""

from __future__ import annotations
from dataclasses import dataclass
import os
from typing import Mapping


@dataclass(frozen=True)
class GameConfig:
    """
    Configuration for a game session.
    """
    # Session rules
    session_time_limit: int = 120  # Seconds per session
    shuffles_per_round: int = 3  # Only in shuffle mode
    points_per_match: int = 10
    round_bonus_multiplier: int = 20  # Bonus = round_number * multiplier

    # Cosmetic delays (seconds)
    preview_duration: float = 1.5
    reveal_delay: float = 0.6  # Second tile shown before evaluation
    match_confirm_delay: float = 0.4
    mismatch_flash_duration: float = 0.3
    mismatch_flip_back_delay: float = 1.2
    round_complete_delay: float = 0.5

    # Countdown
    tick_interval: float = 1.0
    low_time_threshold: int = 30  # UI warning below this many seconds

    def round_bonus(self, round_number: int) -> int:
        return round_number * self.round_bonus_multiplier

    def shuffles_for(self, shuffle_mode: bool) -> int:
        return self.shuffles_per_round if shuffle_mode else 0

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> GameConfig:
        """
        Build a config from SQUAREQUEST_* environment variables.

        Unset variables keep their defaults.
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            session_time_limit=int(env.get("SQUAREQUEST_TIME_LIMIT", defaults.session_time_limit)),
            shuffles_per_round=int(env.get("SQUAREQUEST_SHUFFLES", defaults.shuffles_per_round)),
            points_per_match=int(env.get("SQUAREQUEST_POINTS_PER_MATCH", defaults.points_per_match)),
            round_bonus_multiplier=int(env.get("SQUAREQUEST_ROUND_BONUS", defaults.round_bonus_multiplier)),
            low_time_threshold=int(env.get("SQUAREQUEST_LOW_TIME", defaults.low_time_threshold)),
        )
