import importlib
import logging

import numpy as np
import pytest
from spatialmath import SE3

from pnp_trajopt import config
from pnp_trajopt.assembler import ProblemAssembler
from pnp_trajopt.protocol.types import TermKind
from pnp_trajopt.terms import collision_cost
from pnp_trajopt.tools import get_tool_transform, list_tools

from tests.utils import FakeEnvironment


@pytest.fixture
def reload_config(monkeypatch):
    """Reload config after env changes; restore the pristine module afterwards."""
    yield lambda: importlib.reload(config)
    monkeypatch.undo()
    importlib.reload(config)


def test_defaults():
    assert config.JOINT_VEL_COEFF == 5.0
    assert config.COLLISION_DIST_PEN == 0.025
    assert config.COLLISION_COEFF == 20.0
    assert config.COLLISION_GAP == 1
    assert config.COLLISION_CONTINUOUS is False
    assert config.POSE_POS_COEFF == config.POSE_ROT_COEFF == 10.0


def test_trace_level_registered():
    assert logging.getLevelName(config.TRACE) == "TRACE"
    assert hasattr(logging.getLogger("pnp_trajopt"), "trace")


def test_env_overrides(monkeypatch, reload_config):
    monkeypatch.setenv("PNP_TRAJOPT_JOINT_VEL_COEFF", "2.5")
    monkeypatch.setenv("PNP_TRAJOPT_COLLISION_GAP", "3")
    monkeypatch.setenv("PNP_TRAJOPT_COLLISION_CONTINUOUS", "yes")
    cfg = reload_config()

    assert cfg.JOINT_VEL_COEFF == 2.5
    assert cfg.COLLISION_GAP == 3
    assert cfg.COLLISION_CONTINUOUS is True


def test_malformed_env_falls_back_to_default(monkeypatch, reload_config):
    monkeypatch.setenv("PNP_TRAJOPT_COLLISION_COEFF", "lots")
    monkeypatch.setenv("PNP_TRAJOPT_COLLISION_GAP", "1.5")
    monkeypatch.setenv("PNP_TRAJOPT_COLLISION_CONTINUOUS", "maybe")
    cfg = reload_config()

    assert cfg.COLLISION_COEFF == 20.0
    assert cfg.COLLISION_GAP == 1
    assert cfg.COLLISION_CONTINUOUS is False


def test_env_override_reaches_assembled_problem(monkeypatch, reload_config):
    monkeypatch.setenv("PNP_TRAJOPT_JOINT_VEL_COEFF", "2.5")
    monkeypatch.setenv("PNP_TRAJOPT_COLLISION_DIST_PEN", "0.04")
    reload_config()

    asm = ProblemAssembler(FakeEnvironment(), "manipulator", "tool0")
    problem = asm.generate_pick_problem(SE3(0.5, 0, 0.3), SE3(0.5, 0, 0.1), 3)

    assert all(t.coeffs == (2.5,) for t in problem.terms_of_kind(TermKind.JOINT_VELOCITY))
    (collision,) = problem.terms_of_kind(TermKind.COLLISION)
    assert all(m.dist_pen == 0.04 for m in collision.safety_margins)


def test_trace_env_var(monkeypatch, reload_config):
    monkeypatch.setenv("PNP_TRAJOPT_TRACE", "1")
    assert reload_config().TRACE_ENABLED is True
    monkeypatch.setenv("PNP_TRAJOPT_TRACE", "off")
    assert reload_config().TRACE_ENABLED is False


def test_term_trace_records_are_gated(monkeypatch, caplog):
    caplog.set_level(config.TRACE, logger="pnp_trajopt.terms")

    monkeypatch.setattr(config, "TRACE_ENABLED", False)
    collision_cost(0, 3, 0.025, 20.0)
    assert not [r for r in caplog.records if r.levelno == config.TRACE]

    monkeypatch.setattr(config, "TRACE_ENABLED", True)
    collision_cost(0, 3, 0.025, 20.0)
    traced = [r for r in caplog.records if r.levelno == config.TRACE]
    assert len(traced) == 1
    assert "collision" in traced[0].getMessage()


def test_tool_transforms():
    assert "NONE" in list_tools()
    np.testing.assert_allclose(get_tool_transform("NONE").A, np.eye(4))
    suction = get_tool_transform("SUCTION")
    assert isinstance(suction, SE3)
    np.testing.assert_allclose(suction.t, [0.0, 0.0, 0.110])
    with pytest.raises(ValueError):
        get_tool_transform("LASER")


def test_tool_transform_is_a_copy():
    get_tool_transform("SUCTION").A[2, 3] = 1.0
    np.testing.assert_allclose(get_tool_transform("SUCTION").t, [0.0, 0.0, 0.110])
