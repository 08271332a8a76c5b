"""
Pick and place problem assembly.

A pick problem has two phases: a free approach (only costs) followed by a
constrained linear motion onto the object. A place problem has three: a linear
retreat from the current tool pose, a free transit, and a constrained linear
motion onto the place pose.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

import numpy as np
from numpy.typing import NDArray
from spatialmath import SE3

from pnp_trajopt import config
from pnp_trajopt.environment import Environment, Manipulator
from pnp_trajopt.problem import BasicInfo, InitInfo, ProblemDescription
from pnp_trajopt.segments import (
    MotionPhase,
    TimestepRange,
    build_phase_segment,
    default_pos_coeffs,
    default_rot_coeffs,
    layout_phases,
)
from pnp_trajopt.terms import Term, boundary_joint_constraint, collision_cost, joint_velocity_cost
from pnp_trajopt.tools import get_tool_transform
from pnp_trajopt.utils.errors import KinematicsQueryError

logger = logging.getLogger(__name__)

PICK_PHASES: tuple[str, str] = ("approach", "final")
PLACE_PHASES: tuple[str, str, str] = ("retreat", "transit", "final")


@dataclass(frozen=True)
class CostSettings:
    """
    Weights shared by every problem an assembler builds.

    Unset fields take the pnp_trajopt.config value current when the settings
    object is created.
    """
    joint_vel_coeff: float = field(default_factory=lambda: config.JOINT_VEL_COEFF)
    collision_dist_pen: float = field(default_factory=lambda: config.COLLISION_DIST_PEN)
    collision_coeff: float = field(default_factory=lambda: config.COLLISION_COEFF)
    collision_gap: int = field(default_factory=lambda: config.COLLISION_GAP)
    collision_continuous: bool = field(default_factory=lambda: config.COLLISION_CONTINUOUS)
    pos_coeffs: tuple[float, float, float] = field(default_factory=default_pos_coeffs)
    rot_coeffs: tuple[float, float, float] = field(default_factory=default_rot_coeffs)


def _query(what: str, fn: Callable[..., Any], *args: Any) -> Any:
    """Run an environment query, reporting any failure as a KinematicsQueryError."""
    try:
        return fn(*args)
    except KinematicsQueryError:
        raise
    except Exception as e:
        raise KinematicsQueryError(f"{what} failed: {e}") from e


class ProblemAssembler:
    """
    Builds pick and place trajectory optimization problems for one manipulator.

    The environment is borrowed and only queried. Each generate_* call is
    independent and returns a new, validated ProblemDescription.
    """

    def __init__(
        self,
        env: Environment,
        manipulator: str,
        ee_link: str,
        pick_object: str | None = None,
        tcp: SE3 | str | None = None,
        settings: CostSettings | None = None,
    ):
        """
        Args:
            env: Environment to query for joint state and kinematics
            manipulator: Manipulator name
            ee_link: End-effector link whose pose is constrained
            pick_object: Name of the object being handled (bookkeeping only)
            tcp: Tool transform (SE3) or tool name from pnp_trajopt.tools; identity if None
            settings: Cost weights; defaults come from pnp_trajopt.config
        """
        self.env = env
        self.manipulator = manipulator
        self.ee_link = ee_link
        self.pick_object = pick_object
        if tcp is None:
            self.tcp = SE3()
        elif isinstance(tcp, str):
            self.tcp = get_tool_transform(tcp)
        else:
            self.tcp = SE3(np.array(SE3(tcp).A), check=False)
        self.settings = settings or CostSettings()

        kin = _query(f"lookup of manipulator '{manipulator}'", env.get_manipulator, manipulator)
        if kin is None:
            raise KinematicsQueryError(f"Unknown manipulator '{manipulator}'")
        self.kin: Manipulator = kin
        self.joint_names: list[str] = list(
            _query(f"joint names of '{manipulator}'", kin.get_joint_names)
        )

    # ----- environment queries -----

    def current_joint_values(self) -> NDArray[np.float64]:
        """Current manipulator joint values, checked against the joint-name list."""
        q = np.asarray(
            _query(
                f"joint state of '{self.manipulator}'",
                self.env.get_current_joint_values,
                self.manipulator,
            ),
            dtype=float,
        ).reshape(-1)
        if q.shape[0] != len(self.joint_names):
            raise KinematicsQueryError(
                f"'{self.manipulator}' reports {q.shape[0]} joint values "
                f"for {len(self.joint_names)} joints"
            )
        if not np.all(np.isfinite(q)):
            raise KinematicsQueryError(f"'{self.manipulator}' joint state is not finite: {q.tolist()}")
        return q

    def current_tool_pose(self, q: NDArray[np.float64] | None = None) -> SE3:
        """Forward kinematics of the end-effector link (with the tool transform) at q."""
        if q is None:
            q = self.current_joint_values()
        base_link = _query(f"base link of '{self.manipulator}'", self.kin.get_base_link_name)
        base = _query(f"transform of '{base_link}'", self.env.get_link_transform, base_link)
        pose = _query(
            f"forward kinematics to '{self.ee_link}'",
            self.kin.calc_fwd_kin,
            base,
            q,
            self.ee_link,
        )
        if not isinstance(pose, SE3) or not np.all(np.isfinite(pose.A)):
            raise KinematicsQueryError(f"forward kinematics to '{self.ee_link}' returned {pose!r}")
        return pose * self.tcp

    # ----- assembly helpers -----

    @staticmethod
    def _check_steps_per_phase(steps_per_phase: int) -> int:
        if isinstance(steps_per_phase, bool) or not isinstance(steps_per_phase, (int, np.integer)):
            raise ValueError(f"steps_per_phase must be an integer, got {steps_per_phase!r}")
        if steps_per_phase < 1:
            raise ValueError(f"steps_per_phase must be positive, got {steps_per_phase}")
        return int(steps_per_phase)

    def _common_terms(self, q: NDArray[np.float64], n_steps: int) -> tuple[list[Term], list[Term]]:
        """Boundary constraint at step 0 and joint velocity costs over the whole timeline."""
        costs: list[Term] = list(
            joint_velocity_cost(self.joint_names, 0, n_steps - 1, self.settings.joint_vel_coeff)
        )
        constraints: list[Term] = [boundary_joint_constraint(q, timestep=0)]
        return constraints, costs

    def _segment(self, start_pose: SE3, end_pose: SE3, phase: MotionPhase) -> list[Term]:
        _, terms = build_phase_segment(
            start_pose,
            end_pose,
            phase,
            self.ee_link,
            pos_coeffs=self.settings.pos_coeffs,
            rot_coeffs=self.settings.rot_coeffs,
            tcp=self.tcp,
        )
        return list(terms)

    def _collision(self, steps: TimestepRange) -> Term:
        s = self.settings
        return collision_cost(
            steps.first,
            steps.last,
            s.collision_dist_pen,
            s.collision_coeff,
            gap=s.collision_gap,
            continuous=s.collision_continuous,
        )

    def _finish(
        self,
        kind: str,
        q: NDArray[np.float64],
        phases: Sequence[MotionPhase],
        constraints: list[Term],
        costs: list[Term],
    ) -> ProblemDescription:
        problem = ProblemDescription(
            basic_info=BasicInfo(
                n_steps=phases[-1].steps.last + 1,
                manip=self.manipulator,
                start_fixed=False,
            ),
            init_info=InitInfo(data=tuple(float(v) for v in q)),
            constraints=tuple(constraints),
            costs=tuple(costs),
            phases=tuple(phases),
            target_object=self.pick_object,
        )
        problem.validate()
        logger.info(
            f"Assembled {kind} problem for {self.manipulator} "
            f"(object={self.pick_object}): {problem.n_steps} steps, "
            f"{len(problem.constraints)} constraints, {len(problem.costs)} costs"
        )
        return problem

    # ----- public API -----

    def generate_pick_problem(
        self, approach_pose: SE3, final_pose: SE3, steps_per_phase: int
    ) -> ProblemDescription:
        """
        Two-phase pick: free approach, then a linear move from approach_pose to final_pose.

        Timeline (k = steps_per_phase): approach [0, k-1], final [k, 2k-1].
        Collision cost covers [0, k]; pose constraints cover the final phase.
        """
        k = self._check_steps_per_phase(steps_per_phase)
        approach, final = layout_phases(PICK_PHASES, k)
        q = self.current_joint_values()

        constraints, costs = self._common_terms(q, 2 * k)
        constraints.extend(self._segment(approach_pose, final_pose, final))
        # Collision checking runs through the first pose-constrained step
        costs.append(self._collision(TimestepRange(approach.steps.first, final.steps.first)))

        return self._finish("pick", q, (approach, final), constraints, costs)

    def generate_place_problem(
        self,
        retreat_pose: SE3,
        approach_pose: SE3,
        final_pose: SE3,
        steps_per_phase: int,
    ) -> ProblemDescription:
        """
        Three-phase place: linear retreat from the current tool pose, free transit,
        then a linear move from approach_pose to final_pose.

        Timeline (k = steps_per_phase): retreat [0, k-1], transit [k, 2k-1],
        final [2k, 3k-1]. Collision cost covers the transit phase.
        """
        k = self._check_steps_per_phase(steps_per_phase)
        retreat, transit, final = layout_phases(PLACE_PHASES, k)
        q = self.current_joint_values()

        constraints, costs = self._common_terms(q, 3 * k)
        start_pose = self.current_tool_pose(q)
        logger.debug(f"Place start pose for {self.ee_link}: t={start_pose.t.tolist()}")

        constraints.extend(self._segment(start_pose, retreat_pose, retreat))
        constraints.extend(self._segment(approach_pose, final_pose, final))
        costs.append(self._collision(transit.steps))

        return self._finish("place", q, (retreat, transit, final), constraints, costs)


__all__ = ["CostSettings", "ProblemAssembler", "PICK_PHASES", "PLACE_PHASES"]
