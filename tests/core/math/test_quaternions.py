"""Tests for quaternion operations."""

import numpy as np
import pytest
from scipy.spatial.transform import Rotation

from sfmcost.core.math.quaternions import (
    axis_angle_to_quat,
    quat_conjugate,
    quat_from_axis_angle,
    quat_identity,
    quat_multiply,
    quat_normalize,
    quat_rotate_point,
    quat_to_axis_angle,
    quat_to_matrix,
    skew_symmetric,
)


def random_unit_quaternions(n, seed=0):
    rng = np.random.default_rng(seed)
    return [quat_normalize(q) for q in rng.normal(size=(n, 4))]


def rotation_angle_between(q1, q2):
    """Angle of the rotation taking q2 to q1; immune to quaternion sign."""
    dq = quat_normalize(quat_multiply(quat_conjugate(q1), q2))
    return np.linalg.norm(quat_to_axis_angle(dq))


class TestQuaternions:
    """Test quaternion operations."""

    def test_quat_normalize(self):
        """Test quaternion normalization."""
        q = np.array([2.0, 3.0, 4.0, 5.0])
        q_norm = quat_normalize(q)

        assert abs(np.linalg.norm(q_norm) - 1.0) < 1e-10
        np.testing.assert_allclose(q_norm * np.linalg.norm(q), q)

    def test_quat_normalize_zero_propagates_nan(self):
        """Zero quaternion is degenerate and yields NaN instead of raising."""
        q_norm = quat_normalize(np.zeros(4))

        assert q_norm.shape == (4,)
        assert np.all(np.isnan(q_norm))

    def test_quat_normalize_accepts_integers(self):
        """Integer input is promoted to floating point."""
        q_norm = quat_normalize([0, 0, 0, 2])

        np.testing.assert_allclose(q_norm, [0.0, 0.0, 0.0, 1.0])

    def test_compose_with_inverse_is_identity(self):
        """q * conj(q) is the identity for unit quaternions, up to sign."""
        for q in random_unit_quaternions(20):
            result = quat_multiply(q, quat_conjugate(q))
            if result[0] < 0:
                result = -result
            np.testing.assert_allclose(result, quat_identity(), atol=1e-12)

            result = quat_multiply(quat_conjugate(q), q)
            np.testing.assert_allclose(np.abs(result), quat_identity(), atol=1e-12)

    def test_quat_multiply_identity(self):
        """Test quaternion multiplication with identity."""
        q = np.array([0.5, 0.5, 0.5, 0.5])
        q_id = quat_identity()

        np.testing.assert_allclose(quat_multiply(q, q_id), q, atol=1e-10)
        np.testing.assert_allclose(quat_multiply(q_id, q), q, atol=1e-10)

    def test_compose_applies_right_operand_first(self):
        """Rotating by q1 * q2 equals rotating by q2 then by q1."""
        q1, q2 = random_unit_quaternions(2, seed=3)
        point = np.array([0.3, -1.2, 2.5])

        composed = quat_rotate_point(quat_multiply(q1, q2), point)
        sequential = quat_rotate_point(q1, quat_rotate_point(q2, point))

        np.testing.assert_allclose(composed, sequential, atol=1e-12)

    def test_quat_conjugate(self):
        """Test quaternion conjugate."""
        q = np.array([1, 2, 3, 4])
        np.testing.assert_allclose(quat_conjugate(q), [1, -2, -3, -4])

    def test_rotate_point_matches_matrix(self):
        """Point rotation agrees with the rotation matrix."""
        point = np.array([1.0, 2.0, 3.0])
        for q in random_unit_quaternions(10, seed=1):
            np.testing.assert_allclose(
                quat_rotate_point(q, point), quat_to_matrix(q) @ point, atol=1e-12
            )

    def test_rotate_point_matches_scipy(self):
        """Conventions agree with scipy's scalar-last quaternions."""
        point = np.array([-0.5, 0.7, 4.0])
        for q in random_unit_quaternions(10, seed=2):
            reference = Rotation.from_quat([q[1], q[2], q[3], q[0]])
            np.testing.assert_allclose(
                quat_rotate_point(q, point), reference.apply(point), atol=1e-12
            )

    def test_quat_to_matrix_identity(self):
        """Test quaternion to matrix for identity rotation."""
        np.testing.assert_allclose(quat_to_matrix(quat_identity()), np.eye(3), atol=1e-10)

    def test_quat_to_matrix_90deg_x(self):
        """Test quaternion to matrix for 90 degree rotation around X."""
        q = np.array([np.sqrt(2) / 2, np.sqrt(2) / 2, 0.0, 0.0])
        expected = np.array([[1, 0, 0], [0, 0, -1], [0, 1, 0]])

        np.testing.assert_allclose(quat_to_matrix(q), expected, atol=1e-10)

    def test_quat_to_matrix_scale_invariant(self):
        """Non-unit quaternions give the same proper rotation."""
        q = np.array([1.0, 2.0, 3.0, 4.0])
        R = quat_to_matrix(q)

        np.testing.assert_allclose(R, quat_to_matrix(quat_normalize(q)), atol=1e-12)
        assert abs(np.linalg.det(R) - 1.0) < 1e-10
        np.testing.assert_allclose(R @ R.T, np.eye(3), atol=1e-10)

    def test_quat_from_axis_angle_90deg(self):
        """Test quaternion from axis-angle for 90 degree rotation."""
        q = quat_from_axis_angle(np.array([1, 0, 0]), np.pi / 2)

        expected = np.array([np.sqrt(2) / 2, np.sqrt(2) / 2, 0.0, 0.0])
        np.testing.assert_allclose(q, expected, atol=1e-10)

    def test_quat_from_axis_angle_zero_axis(self):
        """Test quaternion from zero axis."""
        q = quat_from_axis_angle(np.zeros(3), 1.0)

        np.testing.assert_allclose(q, quat_identity(), atol=1e-10)


class TestAxisAngle:
    """Test rotation vector conversions."""

    def test_identity_is_zero_vector(self):
        np.testing.assert_allclose(quat_to_axis_angle(quat_identity()), np.zeros(3))

    def test_known_rotation(self):
        """90 degrees about z."""
        q = quat_from_axis_angle(np.array([0, 0, 1]), np.pi / 2)

        np.testing.assert_allclose(quat_to_axis_angle(q), [0, 0, np.pi / 2], atol=1e-12)

    def test_sign_ambiguity(self):
        """q and -q give the same rotation vector."""
        for q in random_unit_quaternions(10, seed=4):
            np.testing.assert_allclose(
                quat_to_axis_angle(q), quat_to_axis_angle(-q), atol=1e-12
            )

    def test_angle_in_range(self):
        """Returned angle never exceeds pi."""
        for q in random_unit_quaternions(50, seed=5):
            assert np.linalg.norm(quat_to_axis_angle(q)) <= np.pi + 1e-12

    def test_matches_scipy_rotvec(self):
        for q in random_unit_quaternions(10, seed=6):
            reference = Rotation.from_quat([q[1], q[2], q[3], q[0]]).as_rotvec()
            np.testing.assert_allclose(quat_to_axis_angle(q), reference, atol=1e-10)

    def test_inverse_of_axis_angle_to_quat(self):
        rvec = np.array([0.1, -0.4, 0.25])

        np.testing.assert_allclose(quat_to_axis_angle(axis_angle_to_quat(rvec)), rvec, atol=1e-12)
        np.testing.assert_allclose(axis_angle_to_quat(np.zeros(3)), quat_identity())

    def test_rotation_angle_between_ignores_sign(self):
        q = random_unit_quaternions(1, seed=7)[0]

        assert rotation_angle_between(q, -q) < 1e-12


class TestSkewSymmetric:
    """Test cross-product matrix."""

    def test_matches_cross_product(self):
        a = np.array([1.0, -2.0, 0.5])
        b = np.array([0.3, 0.2, -1.0])

        np.testing.assert_allclose(skew_symmetric(a) @ b, np.cross(a, b), atol=1e-12)
        np.testing.assert_allclose(skew_symmetric(a).T, -skew_symmetric(a))


class TestGenericScalars:
    """Rotation algebra runs over non-float scalar types."""

    def test_axis_angle_derivative(self, dual):
        """Derivative of the rotation vector w.r.t. the x component of q."""
        q = quat_normalize(np.array([0.9, 0.2, -0.1, 0.3]))
        h = 1e-6

        lifted = np.array([dual(q[0]), dual(q[1], 1.0), dual(q[2]), dual(q[3])], dtype=object)
        result = quat_to_axis_angle(lifted)

        q_plus = q.copy()
        q_minus = q.copy()
        q_plus[1] += h
        q_minus[1] -= h
        expected = (quat_to_axis_angle(q_plus) - quat_to_axis_angle(q_minus)) / (2 * h)

        np.testing.assert_allclose([r.a for r in result], quat_to_axis_angle(q), atol=1e-12)
        np.testing.assert_allclose([r.v for r in result], expected, atol=1e-6)

    def test_normalize_dual(self, dual):
        lifted = np.array([dual(3.0, 1.0), dual(0.0), dual(4.0), dual(0.0)], dtype=object)
        result = quat_normalize(lifted)

        np.testing.assert_allclose([r.a for r in result], [0.6, 0.0, 0.8, 0.0])
        # d(w / |q|)/dw at (3, 0, 4, 0) = (|q|^2 - w^2) / |q|^3
        assert abs(result[0].v - 16.0 / 125.0) < 1e-12


class TestInvalidInput:
    """Test error handling for invalid input shapes."""

    def test_invalid_input_shapes(self):
        with pytest.raises(ValueError):
            quat_normalize(np.array([1, 2, 3]))

        with pytest.raises(ValueError):
            quat_multiply(np.array([1, 0, 0, 0]), np.array([1, 0, 0]))

        with pytest.raises(ValueError):
            quat_rotate_point(quat_identity(), np.array([1, 2]))

        with pytest.raises(ValueError):
            quat_from_axis_angle(np.array([1, 2]), 1.0)

        with pytest.raises(ValueError):
            quat_to_matrix(np.array([1, 2, 3]))
