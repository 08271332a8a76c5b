"""
Test utilities package.

Provides fake environment/kinematics collaborators for testing pnp_trajopt.
"""

from .fakes import JOINT_NAMES, Q_START, FakeEnvironment, FakeManipulator

__all__ = [
    "JOINT_NAMES",
    "Q_START",
    "FakeEnvironment",
    "FakeManipulator",
]
