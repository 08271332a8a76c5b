"""
pnp_trajopt Python Package

Builds trajectory optimization problems for pick-and-place motions: per-timestep
joint configurations constrained by boundary conditions and linear Cartesian
segments, with joint velocity and collision costs, ready for an external
sequential convex solver.

Key components:
- ProblemAssembler: builds two-phase pick and three-phase place problems
- ProblemDescription: the assembled, validated problem
- build_linear_segment: pose constraints along a straight Cartesian path
- interpolate_poses: linear position / shortest-arc orientation interpolation
- encode_problem: plain-data handoff form for a solver adapter
"""

from ._version import __version__
from .assembler import CostSettings, ProblemAssembler
from .environment import Environment, Manipulator, RoboticsToolboxEnvironment
from .problem import ProblemDescription
from .protocol.wire import encode_problem
from .segments import MotionPhase, TimestepRange, build_linear_segment
from .utils.errors import (
    DegenerateInterpolationError,
    InconsistentTimestepRangeError,
    KinematicsQueryError,
)
from .utils.interpolation import PoseInterpolator, interpolate_poses

__all__ = [
    "__version__",
    "CostSettings",
    "ProblemAssembler",
    "Environment",
    "Manipulator",
    "RoboticsToolboxEnvironment",
    "ProblemDescription",
    "encode_problem",
    "MotionPhase",
    "TimestepRange",
    "build_linear_segment",
    "PoseInterpolator",
    "interpolate_poses",
    "DegenerateInterpolationError",
    "InconsistentTimestepRangeError",
    "KinematicsQueryError",
]
