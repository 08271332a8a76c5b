"""
Tool Configuration Module

Defines the end-effector tools a problem can be built for, each with the fixed
transform from the end-effector link to the tool center point (TCP).
"""

import numpy as np
from spatialmath import SE3
from typing import Dict, List, Any


TOOL_CONFIGS: Dict[str, Dict[str, Any]] = {
    "NONE": {
        "name": "No Tool",
        "description": "Bare flange, TCP at the end-effector link origin",
        "transform": np.eye(4),
    },
    "SUCTION": {
        "name": "Suction Cup",
        "description": "Straight suction cup, TCP 110 mm along the flange Z axis",
        "transform": SE3(0, 0, 0.110).A,
    },
    "PARALLEL_GRIPPER": {
        "name": "Parallel Gripper",
        "description": "Two-finger gripper, TCP between the fingertips",
        "transform": SE3(0, 0, 0.1034).A,
    },
}


def get_tool_transform(tool_name: str) -> SE3:
    """
    Get the flange-to-TCP transform for a tool.

    Parameters
    ----------
    tool_name : str
        Name of the tool (must be in TOOL_CONFIGS)

    Returns
    -------
    SE3
        Transform from the end-effector link to the tool TCP

    Raises
    ------
    ValueError
        If tool_name is not recognized
    """
    if tool_name not in TOOL_CONFIGS:
        raise ValueError(f"Unknown tool '{tool_name}'. Available tools: {list_tools()}")

    return SE3(np.array(TOOL_CONFIGS[tool_name]["transform"]), check=False)


def list_tools() -> List[str]:
    """
    Get list of available tool names.

    Returns
    -------
    List[str]
        List of available tool configuration names
    """
    return list(TOOL_CONFIGS.keys())
