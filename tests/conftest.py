"""
Pytest configuration and shared fixtures.
"""

import os

# Pygame must never open a real window or audio device during tests.
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import logging

import numpy as np
import pytest


@pytest.fixture
def rng():
    """Reproducible random number generator."""
    return np.random.default_rng(seed=42)


@pytest.fixture
def sim_params():
    """Default simulation parameters, starting with an empty canvas."""
    return {
        "seed": 42,
        "max_connector_length": 300,
        "gravity_factor": 0.00001,
        "node_count_divisor": 130000,
        "initial_node_count": 0,
        "node_sizes": [10, 20],
        "velocity_jitter": [-0.1, 0.0, 0.1],
        "node_color": "#ffeedd",
        "node_line_width": 3,
    }


@pytest.fixture
def make_system(sim_params, rng):
    """Factory for a ParticleSystem on a 650x400 canvas."""
    from particle import ParticleSystem

    def _make(width=650, height=400, **overrides):
        params = dict(sim_params, **overrides)
        return ParticleSystem(params, width, height, rng=rng)

    return _make


@pytest.fixture
def restore_root_logger():
    """Undo any handler changes made to the root logger by a test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
