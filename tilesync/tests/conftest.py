"""
Pytest fixtures for tilesync tests.
"""

import random

import pytest

from ..engine_core.standard import StandardGame
from ..session import SyncController
from .fakes import FakeEngine, factory_for


@pytest.fixture
def fake_engine() -> FakeEngine:
    """Standard 3x3 start, two tiles in the pile."""
    return FakeEngine()


@pytest.fixture
def controller(fake_engine: FakeEngine) -> SyncController:
    """Uninitialized controller over the fake engine."""
    return SyncController(factory_for(fake_engine), name="test")


@pytest.fixture
def standard_game() -> StandardGame:
    """Standard game with a fixed shuffle."""
    return StandardGame(rng=random.Random(7))
