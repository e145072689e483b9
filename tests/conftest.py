import os

# Headless pygame: no window, no audio device
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import pytest

from jezzball import GameConfig, Simulation


@pytest.fixture
def config():
    return GameConfig()


@pytest.fixture
def empty_sim():
    """An arena with no balls at all."""
    return Simulation(GameConfig(initial_balls=()))


@pytest.fixture
def still_sim():
    """Factory for a simulation with motionless balls at the given centers."""
    def make(*positions, **overrides):
        balls = tuple((x, y, 0, 0) for x, y in positions)
        return Simulation(GameConfig(initial_balls=balls, **overrides))
    return make
