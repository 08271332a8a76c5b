"""
Solver handoff encoding.

Converts a ProblemDescription into plain Python data (dicts, lists, floats,
strings) laid out as basic_info / init_info / costs / constraints, the shape a
solver adapter consumes. Terms are encoded by switching on their kind.
"""

import logging
from typing import Any

from pnp_trajopt.problem import ProblemDescription
from pnp_trajopt.protocol.types import TermKind
from pnp_trajopt.terms import Term

logger = logging.getLogger(__name__)

__all__ = [
    "encode_term",
    "encode_problem",
]


def _floats(values) -> list[float]:
    return [float(v) for v in values]


def encode_term(term: Term) -> dict[str, Any]:
    """Encode one term as {"type", "name", "term_type", "params"}."""
    kind = term.kind
    if kind is TermKind.JOINT_POSITION:
        params: dict[str, Any] = {
            "timestep": term.timestep,
            "vals": _floats(term.vals),
        }
    elif kind is TermKind.JOINT_VELOCITY:
        params = {
            "joint_name": term.joint_name,
            "first_step": term.first_step,
            "last_step": term.last_step,
            "coeffs": _floats(term.coeffs),
            "penalty_type": term.penalty_type.value,
        }
    elif kind is TermKind.COLLISION:
        params = {
            "first_step": term.first_step,
            "last_step": term.last_step,
            "gap": term.gap,
            "continuous": term.continuous,
            "dist_pen": [m.dist_pen for m in term.safety_margins],
            "coeffs": [m.coeff for m in term.safety_margins],
        }
    elif kind is TermKind.POSE:
        params = {
            "link": term.link,
            "timestep": term.timestep,
            "xyz": _floats(term.xyz),
            "wxyz": _floats(term.wxyz),
            "pos_coeffs": _floats(term.pos_coeffs),
            "rot_coeffs": _floats(term.rot_coeffs),
            "tcp": [_floats(row) for row in term.tcp.A],
        }
    else:
        raise TypeError(f"Unknown term kind: {kind!r}")

    return {
        "type": kind.value,
        "name": term.name,
        "term_type": term.term_type.value,
        "params": params,
    }


def encode_problem(problem: ProblemDescription) -> dict[str, Any]:
    """
    Encode a full problem.

    Returns: dict with basic_info, init_info, phases, costs and constraints;
    term lists keep the problem's order
    """
    encoded = {
        "basic_info": {
            "n_steps": problem.basic_info.n_steps,
            "manip": problem.basic_info.manip,
            "start_fixed": problem.basic_info.start_fixed,
        },
        "init_info": {
            "type": problem.init_info.type.value,
            "data": _floats(problem.init_info.data),
        },
        "phases": [
            {"name": p.name, "first_step": p.steps.first, "last_step": p.steps.last}
            for p in problem.phases
        ],
        "costs": [encode_term(t) for t in problem.costs],
        "constraints": [encode_term(t) for t in problem.constraints],
    }
    logger.debug(
        f"Encoded problem: {len(encoded['costs'])} costs, {len(encoded['constraints'])} constraints"
    )
    return encoded
