"""
The assembled optimization problem handed to the solver.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from pnp_trajopt.protocol.types import InitType, TermKind
from pnp_trajopt.segments import MotionPhase
from pnp_trajopt.terms import Term
from pnp_trajopt.utils.errors import InconsistentTimestepRangeError


@dataclass(frozen=True)
class BasicInfo:
    n_steps: int
    manip: str
    start_fixed: bool = False


@dataclass(frozen=True)
class InitInfo:
    """Trajectory seed; for STATIONARY, ``data`` is repeated at every step."""
    data: tuple[float, ...]
    type: InitType = InitType.STATIONARY


def term_steps(term: Term) -> tuple[int, int]:
    """Inclusive (first, last) timesteps a term refers to."""
    if term.kind is TermKind.JOINT_POSITION or term.kind is TermKind.POSE:
        return term.timestep, term.timestep
    if term.kind is TermKind.JOINT_VELOCITY or term.kind is TermKind.COLLISION:
        return term.first_step, term.last_step
    raise TypeError(f"Unknown term kind: {term.kind!r}")


@dataclass(frozen=True)
class ProblemDescription:
    """
    Complete trajectory optimization problem: timeline, seed, constraints and costs.

    Built once per planning request and not modified afterwards.
    """

    basic_info: BasicInfo
    init_info: InitInfo
    constraints: tuple[Term, ...]
    costs: tuple[Term, ...]
    phases: tuple[MotionPhase, ...] = ()
    target_object: str | None = None

    @property
    def n_steps(self) -> int:
        return self.basic_info.n_steps

    @property
    def manip(self) -> str:
        return self.basic_info.manip

    @property
    def terms(self) -> tuple[Term, ...]:
        return self.constraints + self.costs

    def terms_of_kind(self, kind: TermKind) -> list[Term]:
        return [t for t in self.terms if t.kind is kind]

    def phase(self, name: str) -> MotionPhase:
        for p in self.phases:
            if p.name == name:
                return p
        raise KeyError(f"No phase named {name!r}")

    def seed_trajectory(self) -> NDArray[np.float64]:
        """Initial trajectory, shape (n_steps, n_joints)."""
        if self.init_info.type is not InitType.STATIONARY:
            raise ValueError(f"Unsupported init type: {self.init_info.type}")
        return np.tile(np.asarray(self.init_info.data, dtype=float), (self.n_steps, 1))

    def validate(self) -> None:
        """
        Check timeline consistency.

        Raises:
            InconsistentTimestepRangeError: phases do not tile [0, n_steps - 1],
                a term refers to a step outside the timeline, term names collide,
                or the seed and boundary constraints disagree in joint count
        """
        n = self.n_steps
        if n < 1:
            raise InconsistentTimestepRangeError(f"problem has {n} steps")

        if self.phases:
            expected_first = 0
            for p in self.phases:
                if p.steps.first != expected_first:
                    raise InconsistentTimestepRangeError(
                        f"phase '{p.name}' starts at {p.steps.first}, expected {expected_first}"
                    )
                expected_first = p.steps.last + 1
            if expected_first != n:
                raise InconsistentTimestepRangeError(
                    f"phases end at step {expected_first - 1}, timeline ends at {n - 1}"
                )

        for term in self.terms:
            first, last = term_steps(term)
            if first < 0 or last > n - 1:
                raise InconsistentTimestepRangeError(
                    f"term '{term.name}' spans [{first}, {last}] outside [0, {n - 1}]"
                )
            if term.kind is TermKind.COLLISION and len(term.safety_margins) != last - first + 1:
                raise InconsistentTimestepRangeError(
                    f"term '{term.name}' has {len(term.safety_margins)} safety margins "
                    f"for {last - first + 1} steps"
                )
            if term.kind is TermKind.JOINT_POSITION and len(term.vals) != len(self.init_info.data):
                raise InconsistentTimestepRangeError(
                    f"term '{term.name}' pins {len(term.vals)} joints, "
                    f"seed has {len(self.init_info.data)}"
                )

        dupes = [name for name, count in Counter(t.name for t in self.terms).items() if count > 1]
        if dupes:
            raise InconsistentTimestepRangeError(f"duplicate term names: {sorted(dupes)}")


__all__ = ["BasicInfo", "InitInfo", "ProblemDescription", "term_steps"]
