"""Quaternion operations for 3D rotations.

Quaternions are stored as ``[w, x, y, z]``. Every function here is written
against plain arithmetic so it can be evaluated over any number-like scalar:
floats, numpy float64, or objects that provide ``sqrt``/``arctan2``/``sin``/
``cos`` methods (numpy ufuncs dispatch to those for object operands, which is
how dual-number types plug in).
"""

import numpy as np


def _as_vector(v, size: int, name: str) -> np.ndarray:
    v = np.asarray(v)
    if v.shape != (size,):
        raise ValueError(f"{name} must be {size}-element vector, got shape {v.shape}")
    if v.dtype.kind in "biu":
        v = v.astype(np.float64)
    return v


def quat_identity() -> np.ndarray:
    """Identity rotation."""
    return np.array([1.0, 0.0, 0.0, 0.0])


def quat_normalize(q) -> np.ndarray:
    """Normalize quaternion to unit length.

    A quaternion with exactly zero norm is a degenerate rotation. Instead of
    raising, the result is all NaN so the degeneracy propagates through the
    residual to the optimizer.
    """
    q = _as_vector(q, 4, "Quaternion")

    norm = np.sqrt(q[0] * q[0] + q[1] * q[1] + q[2] * q[2] + q[3] * q[3])
    if norm == 0.0:
        return q * np.nan

    return q / norm


def quat_multiply(q1, q2) -> np.ndarray:
    """Hamilton product ``q1 * q2``.

    As a rotation this applies ``q2`` first and then ``q1``.
    """
    q1 = _as_vector(q1, 4, "Quaternion")
    q2 = _as_vector(q2, 4, "Quaternion")

    w1, x1, y1, z1 = q1
    w2, x2, y2, z2 = q2

    return np.array([
        w1*w2 - x1*x2 - y1*y2 - z1*z2,
        w1*x2 + x1*w2 + y1*z2 - z1*y2,
        w1*y2 - x1*z2 + y1*w2 + z1*x2,
        w1*z2 + x1*y2 - y1*x2 + z1*w2
    ])


def quat_conjugate(q) -> np.ndarray:
    """Return quaternion conjugate.

    The conjugate is the inverse rotation only for unit quaternions.
    """
    q = _as_vector(q, 4, "Quaternion")

    return np.array([q[0], -q[1], -q[2], -q[3]])


def quat_rotate_point(q, point) -> np.ndarray:
    """Rotate a 3D point by a unit quaternion.

    Args:
        q: Unit quaternion [w, x, y, z]
        point: 3-element point

    Returns:
        Rotated 3-element point
    """
    q = _as_vector(q, 4, "Quaternion")
    point = _as_vector(point, 3, "Point")

    t2 = q[0] * q[1]
    t3 = q[0] * q[2]
    t4 = q[0] * q[3]
    t5 = -q[1] * q[1]
    t6 = q[1] * q[2]
    t7 = q[1] * q[3]
    t8 = -q[2] * q[2]
    t9 = q[2] * q[3]
    t1 = -q[3] * q[3]

    return np.array([
        2 * ((t8 + t1) * point[0] + (t6 - t4) * point[1] + (t3 + t7) * point[2]) + point[0],
        2 * ((t4 + t6) * point[0] + (t5 + t1) * point[1] + (t9 - t2) * point[2]) + point[1],
        2 * ((t7 - t3) * point[0] + (t2 + t9) * point[1] + (t5 + t8) * point[2]) + point[2]
    ])


def quat_to_axis_angle(q) -> np.ndarray:
    """Convert a unit quaternion to a rotation vector (axis * angle).

    The returned angle lies in [-pi, pi]: for ``w < 0`` the equivalent
    rotation of ``-q`` is used, so ``q`` and ``-q`` map to the same vector.
    Near the identity the limit ``2 * [x, y, z]`` is used, which keeps the
    expression differentiable at zero rotation.
    """
    q = _as_vector(q, 4, "Quaternion")

    q1, q2, q3 = q[1], q[2], q[3]
    sin_squared_theta = q1 * q1 + q2 * q2 + q3 * q3

    if sin_squared_theta > 0.0:
        sin_theta = np.sqrt(sin_squared_theta)
        cos_theta = q[0]

        if cos_theta < 0.0:
            two_theta = 2.0 * np.arctan2(-sin_theta, -cos_theta)
        else:
            two_theta = 2.0 * np.arctan2(sin_theta, cos_theta)
        k = two_theta / sin_theta
    else:
        k = 2.0

    return np.array([q1 * k, q2 * k, q3 * k])


def axis_angle_to_quat(rvec) -> np.ndarray:
    """Convert a rotation vector (axis * angle) to a unit quaternion."""
    rvec = _as_vector(rvec, 3, "Rotation vector")

    theta_squared = rvec[0] * rvec[0] + rvec[1] * rvec[1] + rvec[2] * rvec[2]

    if theta_squared > 0.0:
        theta = np.sqrt(theta_squared)
        half_theta = theta * 0.5
        k = np.sin(half_theta) / theta
        w = np.cos(half_theta)
    else:
        k = 0.5
        w = 1.0

    return np.array([w, rvec[0] * k, rvec[1] * k, rvec[2] * k])


def quat_from_axis_angle(axis: np.ndarray, angle: float) -> np.ndarray:
    """Create quaternion from axis-angle representation.

    Args:
        axis: 3D vector representing rotation axis (normalized internally)
        angle: Rotation angle in radians

    Returns:
        Unit quaternion [w, x, y, z]
    """
    axis = np.asarray(axis, dtype=np.float64)
    if axis.shape != (3,):
        raise ValueError(f"Axis must be 3-element vector, got shape {axis.shape}")

    axis_norm = np.linalg.norm(axis)
    if axis_norm < 1e-12:
        return quat_identity()

    axis = axis / axis_norm
    half_angle = angle / 2
    sin_half = np.sin(half_angle)
    cos_half = np.cos(half_angle)

    return np.array([cos_half, sin_half * axis[0], sin_half * axis[1], sin_half * axis[2]])


def quat_to_matrix(q) -> np.ndarray:
    """Convert quaternion to rotation matrix.

    The quaternion does not need to be unit length: the matrix is scaled by
    ``1 / |q|^2`` so any non-zero quaternion yields a proper rotation.

    Args:
        q: Quaternion [w, x, y, z]

    Returns:
        3x3 rotation matrix
    """
    q = _as_vector(q, 4, "Quaternion")

    aa = q[0] * q[0]
    ab = q[0] * q[1]
    ac = q[0] * q[2]
    ad = q[0] * q[3]
    bb = q[1] * q[1]
    bc = q[1] * q[2]
    bd = q[1] * q[3]
    cc = q[2] * q[2]
    cd = q[2] * q[3]
    dd = q[3] * q[3]

    scale = 1.0 / (aa + bb + cc + dd)

    return np.array([
        [(aa + bb - cc - dd) * scale, 2 * (bc - ad) * scale, 2 * (ac + bd) * scale],
        [2 * (ad + bc) * scale, (aa - bb + cc - dd) * scale, 2 * (cd - ab) * scale],
        [2 * (bd - ac) * scale, 2 * (ab + cd) * scale, (aa - bb - cc + dd) * scale]
    ])


def skew_symmetric(v) -> np.ndarray:
    """Create skew-symmetric cross-product matrix from 3D vector."""
    v = _as_vector(v, 3, "v")

    return np.array([
        [0.0, -v[2], v[1]],
        [v[2], 0.0, -v[0]],
        [-v[1], v[0], 0.0]
    ])
