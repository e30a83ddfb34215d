"""
Pytest configuration for the test suite.

This file is automatically loaded by pytest and applies configuration
to all tests in the tests/ directory.
"""

import os
import random

# pygame must never open a real window or audio device under test
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import numpy as np
import pytest
import torch

from config import Config
from pongdqn.ai.agent import Agent
from pongdqn.game.pong import PongEnvironment


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


@pytest.fixture(autouse=True)
def seed_rngs():
    """Make network initialisation and sampling repeatable."""
    random.seed(0)
    np.random.seed(0)
    torch.manual_seed(0)


@pytest.fixture
def config():
    """Default configuration without file logging."""
    cfg = Config()
    cfg.LOG_TO_FILE = False
    cfg.SEED = 0
    return cfg


@pytest.fixture
def env(config):
    """Environment with a seeded serve generator."""
    return PongEnvironment(config, rng=np.random.default_rng(0))


@pytest.fixture
def agent(config):
    """Agent with a seeded exploration/sampling source."""
    return Agent(config, rng=random.Random(0))
