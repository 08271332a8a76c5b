"""
Central configuration for pnp_trajopt tunables and shared constants.
"""

import logging
import os

TRACE: int = 5
logging.addLevelName(TRACE, "TRACE")
# Add Logger.trace if missing
if not hasattr(logging.Logger, "trace"):

    def _trace(self, msg, *args, **kwargs):
        if self.isEnabledFor(TRACE):
            self._log(TRACE, msg, args, **kwargs)

    logging.Logger.trace = _trace  # type: ignore[attr-defined]
    logging.TRACE = TRACE  # type: ignore[attr-defined]

# Per-term TRACE records are emitted only when this is set
TRACE_ENABLED = str(os.getenv("PNP_TRAJOPT_TRACE", "0")).lower() in ("1", "true", "yes", "on")

logger = logging.getLogger(__name__)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring malformed {name}={raw!r}, using {default}")
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring malformed {name}={raw!r}, using {default}")
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    s = raw.strip().lower()
    if s in ("1", "true", "yes", "on"):
        return True
    if s in ("0", "false", "no", "off"):
        return False
    logger.warning(f"Ignoring malformed {name}={raw!r}, using {default}")
    return default


# Pose constraint weights, applied equally to x/y/z and rx/ry/rz
POSE_POS_COEFF: float = _env_float("PNP_TRAJOPT_POSE_POS_COEFF", 10.0)
POSE_ROT_COEFF: float = _env_float("PNP_TRAJOPT_POSE_ROT_COEFF", 10.0)

# Joint velocity smoothing cost
JOINT_VEL_COEFF: float = _env_float("PNP_TRAJOPT_JOINT_VEL_COEFF", 5.0)

# Discrete collision cost (dist_pen in meters)
COLLISION_DIST_PEN: float = _env_float("PNP_TRAJOPT_COLLISION_DIST_PEN", 0.025)
COLLISION_COEFF: float = _env_float("PNP_TRAJOPT_COLLISION_COEFF", 20.0)
COLLISION_GAP: int = _env_int("PNP_TRAJOPT_COLLISION_GAP", 1)
COLLISION_CONTINUOUS: bool = _env_bool("PNP_TRAJOPT_COLLISION_CONTINUOUS", False)

# Rotation angles below this (rad) are treated as no rotation
ZERO_ANGLE_TOL: float = 1e-12

# Name given to the step-0 joint equality constraint
START_CONSTRAINT_NAME: str = "start_pos_constraint"
