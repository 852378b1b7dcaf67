"""
Pytest fixtures for SquareQuest tests.
"""

import random

import pytest

from ..engine_core.config import GameConfig
from ..engine_core.grid import GridGenerator
from ..engine_core.reducer import Reducer
from ..engine_core.state import Difficulty
from ..session import GameSession, ManualScheduler
from ..store import InMemoryScoreStore


@pytest.fixture
def config() -> GameConfig:
    return GameConfig()


@pytest.fixture
def grid_generator() -> GridGenerator:
    """Seeded generator for reproducible grids."""
    return GridGenerator(rng=random.Random(42))


@pytest.fixture
def reducer(config, grid_generator) -> Reducer:
    return Reducer(config=config, grid_generator=grid_generator)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def store() -> InMemoryScoreStore:
    return InMemoryScoreStore()


@pytest.fixture
def session(store, config, scheduler, grid_generator) -> GameSession:
    """Session on simulated time, not started yet."""
    return GameSession(
        store=store,
        config=config,
        scheduler=scheduler,
        grid_generator=grid_generator,
    )


@pytest.fixture
def easy_session(session, scheduler, config) -> GameSession:
    """Easy session with the preview already over."""
    session.start_session(Difficulty.EASY)
    scheduler.advance(config.preview_duration)
    return session


@pytest.fixture
def shuffle_session(session, scheduler, config) -> GameSession:
    """Medium session in shuffle mode, preview over."""
    session.start_session(Difficulty.MEDIUM, shuffle_mode=True)
    scheduler.advance(config.preview_duration)
    return session
