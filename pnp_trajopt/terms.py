"""
Cost and constraint term records and the factory functions that build them.

Terms form a closed set of frozen record types tagged by ``kind``. Consumers
(problem validation, the solver handoff encoder) switch on ``kind`` explicitly.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import ClassVar, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.spatial.transform import Rotation
from spatialmath import SE3

from pnp_trajopt import config
from pnp_trajopt.config import START_CONSTRAINT_NAME, TRACE
from pnp_trajopt.protocol.types import PenaltyType, TermKind, TermType

logger = logging.getLogger(__name__)


def _trace(msg: str, *args) -> None:
    # Checked per call; config may be reloaded
    if config.TRACE_ENABLED:
        logger.log(TRACE, msg, *args)


@dataclass(frozen=True)
class SafetyMargin:
    """Collision penalty parameters for one timestep."""
    dist_pen: float  # distance (m) below which the penalty starts
    coeff: float


@dataclass(frozen=True)
class JointPositionConstraint:
    """Equality pinning the joint configuration at one timestep."""
    kind: ClassVar[TermKind] = TermKind.JOINT_POSITION

    name: str
    timestep: int
    vals: tuple[float, ...]
    term_type: TermType = TermType.CONSTRAINT


@dataclass(frozen=True)
class JointVelocityCost:
    """Penalty on one joint's step-to-step change across a step range."""
    kind: ClassVar[TermKind] = TermKind.JOINT_VELOCITY

    name: str
    joint_name: str
    first_step: int
    last_step: int
    coeffs: tuple[float, ...]
    penalty_type: PenaltyType = PenaltyType.SQUARED
    term_type: TermType = TermType.COST


@dataclass(frozen=True)
class CollisionCost:
    """Discretized collision penalty over an inclusive step range."""
    kind: ClassVar[TermKind] = TermKind.COLLISION

    name: str
    first_step: int
    last_step: int
    safety_margins: tuple[SafetyMargin, ...]
    gap: int = 1
    continuous: bool = False
    term_type: TermType = TermType.COST


@dataclass(frozen=True, eq=False)
class PoseConstraint:
    """Equality on a link's Cartesian pose at one timestep, weighted per axis."""
    kind: ClassVar[TermKind] = TermKind.POSE

    name: str
    link: str
    timestep: int
    pose: SE3
    pos_coeffs: tuple[float, float, float]
    rot_coeffs: tuple[float, float, float]
    tcp: SE3 = field(default_factory=SE3)
    term_type: TermType = TermType.CONSTRAINT

    @property
    def xyz(self) -> NDArray[np.float64]:
        return np.asarray(self.pose.t, dtype=float)

    @property
    def wxyz(self) -> NDArray[np.float64]:
        """Target orientation as a scalar-first unit quaternion with w >= 0."""
        x, y, z, w = Rotation.from_matrix(self.pose.R).as_quat()
        q = np.array([w, x, y, z], dtype=float)
        return -q if q[0] < 0 else q


Term = Union[JointPositionConstraint, JointVelocityCost, CollisionCost, PoseConstraint]


def _check_step(step: int, what: str) -> int:
    if isinstance(step, bool) or not isinstance(step, (int, np.integer)):
        raise ValueError(f"{what} must be an integer, got {step!r}")
    if step < 0:
        raise ValueError(f"{what} must be non-negative, got {step}")
    return int(step)


def _check_range(first_step: int, last_step: int) -> tuple[int, int]:
    first = _check_step(first_step, "first_step")
    last = _check_step(last_step, "last_step")
    if last < first:
        raise ValueError(f"last_step ({last}) precedes first_step ({first})")
    return first, last


def _coeff3(values: ArrayLike, what: str) -> tuple[float, float, float]:
    arr = np.asarray(values, dtype=float).reshape(-1)
    if arr.shape != (3,):
        raise ValueError(f"{what} must have 3 components, got {arr.shape[0]}")
    return (float(arr[0]), float(arr[1]), float(arr[2]))


def boundary_joint_constraint(
    config: ArrayLike,
    timestep: int = 0,
    name: str = START_CONSTRAINT_NAME,
) -> JointPositionConstraint:
    """Pin the joint configuration at ``timestep`` (the robot's known start state)."""
    vals = np.asarray(config, dtype=float).reshape(-1)
    if vals.size == 0:
        raise ValueError("joint configuration is empty")
    term = JointPositionConstraint(
        name=name,
        timestep=_check_step(timestep, "timestep"),
        vals=tuple(float(v) for v in vals),
    )
    _trace("term name=%s kind=%s step=%d", term.name, term.kind.value, term.timestep)
    return term


def joint_velocity_cost(
    joint_names: Sequence[str],
    first_step: int,
    last_step: int,
    coeff: float,
) -> list[JointVelocityCost]:
    """
    One squared joint-velocity penalty per joint over [first_step, last_step].

    Returns: list in joint-name order, each named ``<joint>_vel``
    """
    first, last = _check_range(first_step, last_step)
    terms = [
        JointVelocityCost(
            name=f"{joint}_vel",
            joint_name=joint,
            first_step=first,
            last_step=last,
            coeffs=(float(coeff),),
        )
        for joint in joint_names
    ]
    _trace("joint velocity costs count=%d range=[%d, %d]", len(terms), first, last)
    return terms


def safety_margin_data(n: int, dist_pen: float, coeff: float) -> tuple[SafetyMargin, ...]:
    """Identical safety margin entries for n timesteps."""
    return tuple(SafetyMargin(float(dist_pen), float(coeff)) for _ in range(n))


def collision_cost(
    first_step: int,
    last_step: int,
    dist_pen: float,
    coeff: float,
    gap: int = 1,
    continuous: bool = False,
    name: str = "collision",
) -> CollisionCost:
    """
    Collision cost over the inclusive step range, checked at sampled steps.

    ``gap`` is the spacing of the step pairs considered (1 = every adjacent pair).
    """
    first, last = _check_range(first_step, last_step)
    if gap < 1:
        raise ValueError(f"gap must be at least 1, got {gap}")
    term = CollisionCost(
        name=name,
        first_step=first,
        last_step=last,
        safety_margins=safety_margin_data(last - first + 1, dist_pen, coeff),
        gap=int(gap),
        continuous=bool(continuous),
    )
    _trace("term name=%s kind=%s range=[%d, %d]", term.name, term.kind.value, first, last)
    return term


def pose_constraint(
    link: str,
    timestep: int,
    pose: SE3,
    pos_coeffs: ArrayLike,
    rot_coeffs: ArrayLike,
    name: str,
    tcp: SE3 | None = None,
) -> PoseConstraint:
    """Hard equality on ``link``'s pose at ``timestep``; position and rotation weights are independent."""
    term = PoseConstraint(
        name=name,
        link=link,
        timestep=_check_step(timestep, "timestep"),
        pose=SE3(np.array(pose.A), check=False),
        pos_coeffs=_coeff3(pos_coeffs, "pos_coeffs"),
        rot_coeffs=_coeff3(rot_coeffs, "rot_coeffs"),
        tcp=SE3() if tcp is None else SE3(np.array(tcp.A), check=False),
    )
    _trace("term name=%s kind=%s step=%d", term.name, term.kind.value, term.timestep)
    return term


__all__ = [
    "SafetyMargin",
    "JointPositionConstraint",
    "JointVelocityCost",
    "CollisionCost",
    "PoseConstraint",
    "Term",
    "boundary_joint_constraint",
    "joint_velocity_cost",
    "safety_margin_data",
    "collision_cost",
    "pose_constraint",
]
