"""
Tests for the roboticstoolbox-backed environment adapter.
"""

import numpy as np
import pytest
from spatialmath import SE3

from pnp_trajopt.assembler import ProblemAssembler
from pnp_trajopt.environment import RoboticsToolboxEnvironment
from pnp_trajopt.protocol.types import TermKind
from pnp_trajopt.utils.errors import KinematicsQueryError

rtb = pytest.importorskip("roboticstoolbox")

Q_READY = np.array([0.0, -0.3, 0.0, -2.2, 0.0, 2.0, np.pi / 4])


@pytest.fixture
def panda():
    return rtb.models.DH.Panda()


@pytest.fixture
def panda_env(panda):
    return RoboticsToolboxEnvironment(panda, q=Q_READY, manipulator_name="panda_arm")


def test_manipulator_lookup(panda_env):
    kin = panda_env.get_manipulator("panda_arm")
    assert kin is not None
    assert kin.get_joint_names() == [f"joint{j}" for j in range(1, 8)]
    assert panda_env.get_manipulator("other_arm") is None


def test_current_joint_values_are_a_copy(panda_env):
    q = panda_env.get_current_joint_values("panda_arm")
    np.testing.assert_allclose(q, Q_READY)
    q[0] = 1.0
    np.testing.assert_allclose(panda_env.get_current_joint_values(), Q_READY)


def test_unknown_manipulator_joint_values(panda_env):
    with pytest.raises(KinematicsQueryError):
        panda_env.get_current_joint_values("other_arm")


def test_forward_kinematics_matches_fkine(panda, panda_env):
    kin = panda_env.get_manipulator("panda_arm")
    base = panda_env.get_link_transform(kin.get_base_link_name())
    T = kin.calc_fwd_kin(base, Q_READY, "tool0")
    np.testing.assert_allclose(T.A, panda.fkine(Q_READY).A, atol=1e-12)


def test_forward_kinematics_from_another_base(panda, panda_env):
    kin = panda_env.get_manipulator("panda_arm")
    shifted = SE3(1.0, 0.0, 0.5)
    T = kin.calc_fwd_kin(shifted, Q_READY, "tool0")
    np.testing.assert_allclose(T.A, (shifted * panda.fkine(Q_READY)).A, atol=1e-12)


def test_forward_kinematics_failures(panda_env):
    kin = panda_env.get_manipulator("panda_arm")
    with pytest.raises(KinematicsQueryError):
        kin.calc_fwd_kin(SE3(), Q_READY, "no_such_link")
    with pytest.raises(KinematicsQueryError):
        kin.calc_fwd_kin(SE3(), Q_READY[:3], "tool0")
    with pytest.raises(KinematicsQueryError):
        panda_env.get_link_transform("no_such_link")


def test_mismatched_construction_is_rejected(panda):
    with pytest.raises(ValueError):
        RoboticsToolboxEnvironment(panda, q=[0.0, 0.1])
    with pytest.raises(ValueError):
        RoboticsToolboxEnvironment(panda, q=Q_READY, joint_names=["a", "b"])


def test_place_problem_on_panda(panda, panda_env):
    asm = ProblemAssembler(panda_env, "panda_arm", "tool0", pick_object="box")
    retreat = panda.fkine(Q_READY) * SE3(0, 0, -0.1)
    approach = SE3(0.5, -0.2, 0.4) * SE3.Rx(np.pi)
    final = SE3(0.5, -0.2, 0.25) * SE3.Rx(np.pi)

    problem = asm.generate_place_problem(retreat, approach, final, 5)

    assert problem.n_steps == 15
    assert len(problem.terms_of_kind(TermKind.JOINT_VELOCITY)) == 7
    first = problem.terms_of_kind(TermKind.POSE)[0]
    np.testing.assert_allclose(first.pose.A, panda.fkine(Q_READY).A, atol=1e-12)
    assert problem.seed_trajectory().shape == (15, 7)
