"""
Type definitions for pnp_trajopt problem descriptions.

Defines the enums shared by term records, the problem aggregate and the
solver handoff encoding.
"""

from enum import Enum


class TermKind(Enum):
    """Closed set of term variants a problem can carry."""
    JOINT_POSITION = "joint_pos"
    JOINT_VELOCITY = "joint_vel"
    COLLISION = "collision"
    POSE = "pose"


class TermType(Enum):
    """Whether a term is a hard constraint or a cost."""
    CONSTRAINT = "TT_CNT"
    COST = "TT_COST"


class PenaltyType(Enum):
    """Penalty applied to a cost term's error."""
    SQUARED = "squared"


class InitType(Enum):
    """Trajectory seeding strategy."""
    STATIONARY = "stationary"  # same configuration at every step
