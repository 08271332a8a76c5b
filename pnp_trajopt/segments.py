"""
Linear Cartesian motion segments and the phase timeline they occupy.

Timestep ranges are passed in and handed back explicitly; no step counter is
shared between segment builders.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike
from spatialmath import SE3

from pnp_trajopt import config
from pnp_trajopt.terms import PoseConstraint, pose_constraint
from pnp_trajopt.utils.errors import DegenerateInterpolationError
from pnp_trajopt.utils.interpolation import interpolate_poses

logger = logging.getLogger(__name__)


def default_pos_coeffs() -> tuple[float, float, float]:
    """Position weights from the current config, equal on x/y/z."""
    return (config.POSE_POS_COEFF,) * 3


def default_rot_coeffs() -> tuple[float, float, float]:
    """Rotation weights from the current config, equal on rx/ry/rz."""
    return (config.POSE_ROT_COEFF,) * 3


@dataclass(frozen=True)
class TimestepRange:
    """Inclusive range of global timesteps."""
    first: int
    last: int

    def __post_init__(self):
        if self.first < 0:
            raise ValueError(f"first timestep must be non-negative, got {self.first}")
        if self.last < self.first:
            raise ValueError(f"last timestep ({self.last}) precedes first ({self.first})")

    def __len__(self) -> int:
        return self.last - self.first + 1

    def __iter__(self) -> Iterator[int]:
        return iter(range(self.first, self.last + 1))

    def __contains__(self, step: object) -> bool:
        return isinstance(step, (int, np.integer)) and self.first <= step <= self.last


@dataclass(frozen=True)
class MotionPhase:
    """Named block of the trajectory timeline."""
    name: str
    steps: TimestepRange


def layout_phases(names: Sequence[str], steps_per_phase: int) -> tuple[MotionPhase, ...]:
    """
    Lay out equal-length phases back to back starting at timestep 0.

    Returns: phases in the given order; together they span [0, len(names) * steps_per_phase - 1]
    """
    if steps_per_phase < 1:
        raise ValueError(f"steps_per_phase must be positive, got {steps_per_phase}")
    phases = tuple(
        MotionPhase(name, TimestepRange(i * steps_per_phase, (i + 1) * steps_per_phase - 1))
        for i, name in enumerate(names)
    )
    logger.debug(
        "Phase layout: %s",
        ", ".join(f"{p.name}=[{p.steps.first}, {p.steps.last}]" for p in phases),
    )
    return phases


def build_linear_segment(
    start_pose: SE3,
    end_pose: SE3,
    num_steps: int,
    first_timestep: int,
    link: str,
    pos_coeffs: ArrayLike | None = None,
    rot_coeffs: ArrayLike | None = None,
    tcp: SE3 | None = None,
) -> list[PoseConstraint]:
    """
    Pose constraints pinning ``link`` to the straight line from start_pose to end_pose.

    Term i sits at global timestep first_timestep + i and is named ``pose_<timestep>``.

    Raises:
        DegenerateInterpolationError: num_steps < 2
    """
    if num_steps < 2:
        raise DegenerateInterpolationError(
            f"linear segment needs at least 2 steps, got {num_steps}"
        )
    if pos_coeffs is None:
        pos_coeffs = default_pos_coeffs()
    if rot_coeffs is None:
        rot_coeffs = default_rot_coeffs()
    poses = interpolate_poses(start_pose, end_pose, num_steps)
    terms = [
        pose_constraint(
            link=link,
            timestep=first_timestep + i,
            pose=pose,
            pos_coeffs=pos_coeffs,
            rot_coeffs=rot_coeffs,
            name=f"pose_{first_timestep + i}",
            tcp=tcp,
        )
        for i, pose in enumerate(poses)
    ]
    logger.debug(
        f"Linear segment for {link}: {num_steps} poses at steps "
        f"[{first_timestep}, {first_timestep + num_steps - 1}]"
    )
    return terms


def build_phase_segment(
    start_pose: SE3,
    end_pose: SE3,
    phase: MotionPhase,
    link: str,
    pos_coeffs: ArrayLike | None = None,
    rot_coeffs: ArrayLike | None = None,
    tcp: SE3 | None = None,
) -> tuple[MotionPhase, list[PoseConstraint]]:
    """Linear segment covering exactly ``phase.steps``; returns the phase with its terms."""
    terms = build_linear_segment(
        start_pose,
        end_pose,
        len(phase.steps),
        phase.steps.first,
        link,
        pos_coeffs=pos_coeffs,
        rot_coeffs=rot_coeffs,
        tcp=tcp,
    )
    return phase, terms


__all__ = [
    "default_pos_coeffs",
    "default_rot_coeffs",
    "TimestepRange",
    "MotionPhase",
    "layout_phases",
    "build_linear_segment",
    "build_phase_segment",
]
