"""
Cartesian pose interpolation for linear motion segments.

Positions are interpolated linearly; orientations follow the shorter arc of
the relative rotation between the two poses.
"""

from __future__ import annotations

from collections.abc import Iterator

import numpy as np
from scipy.spatial.transform import Rotation
from spatialmath import SE3

from pnp_trajopt.config import ZERO_ANGLE_TOL
from pnp_trajopt.utils.errors import DegenerateInterpolationError


def relative_axis_angle(start: SE3, end: SE3) -> tuple[np.ndarray, float]:
    """
    Axis and angle of the rotation taking start's orientation onto end's.

    The angle lies in [0, pi]. The axis is expressed in the world frame so that
    rotating start's orientation about it (on the left) by the full angle yields
    end's orientation. A zero rotation returns the zero vector as axis.
    """
    rotvec = Rotation.from_matrix(start.R.T @ end.R).as_rotvec()
    theta = float(np.linalg.norm(rotvec))
    if theta < ZERO_ANGLE_TOL:
        return np.zeros(3), 0.0
    return start.R @ (rotvec / theta), theta


def rotation_angle_between(a: SE3, b: SE3) -> float:
    """Geodesic angle (rad) between the orientations of two poses."""
    return relative_axis_angle(a, b)[1]


def _interpolated(start: SE3, end: SE3, n: int) -> Iterator[SE3]:
    axis, theta = relative_axis_angle(start, end)
    q_start = Rotation.from_matrix(start.R)
    t_start = np.asarray(start.t, dtype=float)
    t_delta = (np.asarray(end.t, dtype=float) - t_start) / (n - 1)

    for i in range(n):
        # Endpoints are returned as given to avoid drift
        if i == 0:
            yield SE3(np.array(start.A), check=False)
            continue
        if i == n - 1:
            yield SE3(np.array(end.A), check=False)
            continue
        half = 0.5 * theta * i / (n - 1)
        # scipy quaternions are scalar-last (x, y, z, w)
        q_i = Rotation.from_quat(np.concatenate([axis * np.sin(half), [np.cos(half)]]))
        rot = (q_i * q_start).as_matrix()
        yield SE3.Rt(rot, t_start + t_delta * i, check=False)


def iter_interpolated_poses(start: SE3, end: SE3, n: int) -> Iterator[SE3]:
    """
    Lazily yield n poses from start to end (inclusive).

    Validation happens eagerly; every call returns a fresh iterator.
    """
    if isinstance(n, bool) or not isinstance(n, (int, np.integer)):
        raise TypeError(f"step count must be an integer, got {type(n).__name__}")
    if n < 2:
        raise DegenerateInterpolationError(
            f"need at least 2 steps to interpolate between poses, got {n}"
        )
    return _interpolated(start, end, int(n))


def interpolate_poses(start: SE3, end: SE3, n: int) -> list[SE3]:
    """
    Interpolate n poses between start and end.

    Position i is start + i * (end - start) / (n - 1). Orientation i is the
    start orientation rotated by theta * i / (n - 1) about the relative axis,
    where (axis, theta) is the shorter-arc decomposition of the relative
    rotation.

    Returns: list of n SE3, first equal to start and last equal to end
    """
    return list(iter_interpolated_poses(start, end, n))


class PoseInterpolator:
    """Stateless interpolator object for code that takes a strategy instance."""

    def interpolate(self, start: SE3, end: SE3, n: int) -> list[SE3]:
        return interpolate_poses(start, end, n)

    def iter_poses(self, start: SE3, end: SE3, n: int) -> Iterator[SE3]:
        return iter_interpolated_poses(start, end, n)


__all__ = [
    "PoseInterpolator",
    "relative_axis_angle",
    "rotation_angle_between",
    "iter_interpolated_poses",
    "interpolate_poses",
]
