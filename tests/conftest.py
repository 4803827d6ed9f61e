"""Pytest configuration and shared fixtures."""

import os
import sys
from pathlib import Path

import pytest

# Allow running the suite from a checkout without installing
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

# Set test environment
os.environ["ENVIRONMENT"] = "development"
os.environ.setdefault("LOG_LEVEL", "WARNING")


def make_scenario_frame(n=200, seed=42):
    """Generate A, B = 2A + noise, and an independent C.

    A is centred at 10, so B sits near 20 and C (centred at 30) is well
    separated from both; bootstrap intervals of the three means do not
    overlap.
    """
    import numpy as np
    import pandas as pd

    rng = np.random.default_rng(seed)
    a = rng.normal(10, 1, n)
    b = 2 * a + rng.normal(0, 0.5, n)
    c = rng.normal(30, 1, n)
    return pd.DataFrame({"A": a, "B": b, "C": c})


@pytest.fixture
def settings():
    """Fresh settings instance, independent of the cached one."""
    from causal_robustness.config.settings import Settings

    return Settings()


@pytest.fixture
def engine(settings):
    """Engine with its own state and event bus."""
    from causal_robustness.robustness import CausalRobustnessEngine, EngineState

    return CausalRobustnessEngine(state=EngineState(), settings=settings)


@pytest.fixture
def scenario_frame():
    """Three-variable scenario with one true relationship (A -> B)."""
    return make_scenario_frame()


@pytest.fixture
def scenario_records(scenario_frame):
    """The scenario as a list of observation records."""
    return scenario_frame.to_dict(orient="records")


@pytest.fixture
def make_scenario():
    """Factory for scenario frames of other sizes or seeds."""
    return make_scenario_frame
