"""
Custom exception types for pnp_trajopt problem construction.
Keep this focused and non-redundant; prefer built-ins where appropriate.
"""


class DegenerateInterpolationError(RuntimeError):
    """Linear segment or interpolation requested with fewer than two steps."""

    def __init__(self, message: str):
        self.original_message = message
        super().__init__(f"Degenerate Interpolation: {message}")

    def __str__(self):
        return f"Degenerate Interpolation: {self.original_message}"


class KinematicsQueryError(RuntimeError):
    """Environment or forward kinematics query failure (unknown link, bad state, etc.)."""

    def __init__(self, message: str):
        self.original_message = message
        super().__init__(f"KINEMATICS ERROR: {message}")

    def __str__(self):
        return f"KINEMATICS ERROR: {self.original_message}"


class InconsistentTimestepRangeError(RuntimeError):
    """Phase or term timesteps fall outside the problem timeline or overlap."""

    def __init__(self, message: str):
        self.original_message = message
        super().__init__(f"Inconsistent Timestep Range: {message}")

    def __str__(self):
        return f"Inconsistent Timestep Range: {self.original_message}"
