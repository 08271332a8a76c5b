"""
Read-only environment and kinematics interface consulted during problem assembly.

Problem construction only ever queries these objects; it never changes robot
state. ``RoboticsToolboxEnvironment`` adapts a Robotics Toolbox robot model.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray
from spatialmath import SE3

from pnp_trajopt.utils.errors import KinematicsQueryError

logger = logging.getLogger(__name__)

BASE_LINK_NAME = "base_link"
DEFAULT_EE_LINK = "tool0"


class Manipulator(ABC):
    """Kinematic chain being planned for."""

    name: str

    @abstractmethod
    def get_joint_names(self) -> list[str]:
        """Joint names in the order used by every joint configuration."""

    @abstractmethod
    def get_base_link_name(self) -> str:
        ...

    @abstractmethod
    def calc_fwd_kin(self, base_transform: SE3, joint_values: ArrayLike, link_name: str) -> SE3:
        """
        Pose of ``link_name`` for the given joint values, expressed from ``base_transform``.

        Raises:
            KinematicsQueryError: unknown link or invalid joint values
        """


class Environment(ABC):
    """Robot environment: current state and manipulator lookup."""

    @abstractmethod
    def get_manipulator(self, name: str) -> Manipulator | None:
        ...

    @abstractmethod
    def get_current_joint_values(self, manipulator: str | None = None) -> NDArray[np.float64]:
        """Current joint values of the whole robot, or of one manipulator's joints."""

    @abstractmethod
    def get_link_transform(self, link_name: str) -> SE3:
        """Current world transform of a link."""


class RoboticsToolboxManipulator(Manipulator):
    """Manipulator backed by a roboticstoolbox robot's ``fkine``."""

    def __init__(
        self,
        robot: Any,
        name: str | None = None,
        joint_names: Sequence[str] | None = None,
        ee_link: str = DEFAULT_EE_LINK,
    ):
        self.robot = robot
        self.name = name or robot.name
        self.ee_link = ee_link
        if joint_names is None:
            joint_names = [f"joint{j + 1}" for j in range(robot.n)]
        if len(joint_names) != robot.n:
            raise ValueError(f"{len(joint_names)} joint names given for a {robot.n}-joint robot")
        self._joint_names = list(joint_names)

    def get_joint_names(self) -> list[str]:
        return list(self._joint_names)

    def get_base_link_name(self) -> str:
        return BASE_LINK_NAME

    def calc_fwd_kin(self, base_transform: SE3, joint_values: ArrayLike, link_name: str) -> SE3:
        q = np.asarray(joint_values, dtype=float).reshape(-1)
        if q.shape[0] != self.robot.n:
            raise KinematicsQueryError(
                f"{self.name} expects {self.robot.n} joint values, got {q.shape[0]}"
            )
        kwargs: dict[str, Any] = {}
        if link_name != self.ee_link:
            link_dict = getattr(self.robot, "link_dict", None) or {}
            if link_name not in link_dict:
                raise KinematicsQueryError(f"Unknown link '{link_name}' on {self.name}")
            kwargs["end"] = link_name
        try:
            T = self.robot.fkine(q, **kwargs)
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise KinematicsQueryError(f"fkine to '{link_name}' failed: {e}") from e
        # fkine already includes the robot base; re-express from the requested base
        return SE3(base_transform) * SE3(self.robot.base).inv() * SE3(T)


class RoboticsToolboxEnvironment(Environment):
    """
    Single-manipulator environment around a roboticstoolbox robot.

    The joint state is captured at construction and never changes afterwards.
    """

    def __init__(
        self,
        robot: Any,
        q: ArrayLike | None = None,
        manipulator_name: str | None = None,
        joint_names: Sequence[str] | None = None,
        ee_link: str = DEFAULT_EE_LINK,
    ):
        self.manipulator = RoboticsToolboxManipulator(
            robot, name=manipulator_name, joint_names=joint_names, ee_link=ee_link
        )
        q_arr = np.asarray(robot.q if q is None else q, dtype=float).reshape(-1)
        if q_arr.shape[0] != robot.n:
            raise ValueError(f"{q_arr.shape[0]} joint values given for a {robot.n}-joint robot")
        self._q = q_arr.copy()
        logger.debug(f"Environment for {self.manipulator.name} with q={self._q.tolist()}")

    def get_manipulator(self, name: str) -> Manipulator | None:
        return self.manipulator if name == self.manipulator.name else None

    def get_current_joint_values(self, manipulator: str | None = None) -> NDArray[np.float64]:
        if manipulator is not None and manipulator != self.manipulator.name:
            raise KinematicsQueryError(f"Unknown manipulator '{manipulator}'")
        return self._q.copy()

    def get_link_transform(self, link_name: str) -> SE3:
        if link_name == self.manipulator.get_base_link_name():
            return SE3(self.manipulator.robot.base)
        raise KinematicsQueryError(f"No transform for link '{link_name}'")


__all__ = [
    "BASE_LINK_NAME",
    "DEFAULT_EE_LINK",
    "Manipulator",
    "Environment",
    "RoboticsToolboxManipulator",
    "RoboticsToolboxEnvironment",
]
