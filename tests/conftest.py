"""
Pytest configuration and shared fixtures for pnp_trajopt tests.

Provides an in-memory environment, a ready-made assembler and a few
pick-and-place poses used across the test suite.
"""

import os
import sys

import numpy as np
import pytest
from spatialmath import SE3

# Add the parent directory to Python path so we can import the package and tests.utils
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from pnp_trajopt.assembler import ProblemAssembler
from tests.utils import FakeEnvironment


# ============================================================================
# ENVIRONMENT FIXTURES
# ============================================================================

@pytest.fixture
def fake_env() -> FakeEnvironment:
    return FakeEnvironment()


@pytest.fixture
def assembler(fake_env) -> ProblemAssembler:
    return ProblemAssembler(fake_env, "manipulator", "tool0", pick_object="box")


# ============================================================================
# POSE FIXTURES
# ============================================================================

@pytest.fixture
def approach_pose() -> SE3:
    """Above the object, tool pointing down."""
    return SE3(0.5, 0.1, 0.30) * SE3.Rx(np.pi)


@pytest.fixture
def grasp_pose() -> SE3:
    return SE3(0.5, 0.1, 0.10) * SE3.Rx(np.pi) * SE3.Rz(np.pi / 6)


@pytest.fixture
def retreat_pose() -> SE3:
    return SE3(0.4, 0.0, 0.45) * SE3.Rx(np.pi)
