"""
Session Module - Drives one play session in real or simulated time.

A session represents one timed play period:
- Created when the player picks a difficulty
- Holds the current SessionState snapshot
- Schedules cosmetic delays and the countdown
- Saves one score record when it ends

Sessions are in-memory only. The score store is the only persistence.
"""

from .clock import AsyncioScheduler, Countdown, ManualScheduler, Scheduler, TimerHandle
from .game_session import GameSession

__all__ = [
    "GameSession",
    "Scheduler",
    "TimerHandle",
    "AsyncioScheduler",
    "ManualScheduler",
    "Countdown",
]
