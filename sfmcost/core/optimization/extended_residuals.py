"""Residual functors for camera rigs and two-view geometry."""

from typing import List, Type

import numpy as np

from ..math.camera import CameraModel
from ..math.quaternions import quat_multiply, quat_rotate_point, quat_to_matrix, skew_symmetric
from .residuals import ResidualFunctor, constant_vector, project_to_image


class RigProjectionResidual(ResidualFunctor):
    """Reprojection residual for a camera mounted in a rigid multi-camera rig.

    Parameter blocks: ``rig_qvec`` (4), ``rig_tvec`` (3), ``rel_qvec`` (4),
    ``rel_tvec`` (3), ``point3D`` (3), ``camera_params``
    (``camera_model.num_params``).

    The point is first transformed into the rig frame and then into the frame
    of the camera within the rig, i.e. the camera pose is
    ``q = rel_q * rig_q`` and ``t = rel_q.rotate(rig_t) + rel_t``. The residual
    is the raw pixel difference.
    """

    def __init__(self, camera_model: Type[CameraModel], point2D):
        self.camera_model = camera_model
        self.point2D = constant_vector(point2D, 2, "point2D")

    def parameter_block_sizes(self) -> List[int]:
        return [4, 3, 4, 3, 3, self.camera_model.num_params]

    def residual_dimension(self) -> int:
        return 2

    def evaluate(self, rig_qvec, rig_tvec, rel_qvec, rel_tvec, point3D, camera_params) -> np.ndarray:
        qvec = quat_multiply(rel_qvec, rig_qvec)
        tvec = quat_rotate_point(rel_qvec, rig_tvec) + rel_tvec

        x, y = project_to_image(self.camera_model, qvec, tvec, point3D, camera_params)

        return np.array([x - self.point2D[0], y - self.point2D[1]])


class RelativePoseResidual(ResidualFunctor):
    """Squared Sampson error of a correspondence under a two-view model.

    The first camera sits at the origin with identity rotation. The second is
    parameterized by ``qvec`` (4) and ``tvec`` (3), where ``tvec`` is expected
    to stay on the unit sphere through the optimizer's parameterization.
    """

    def __init__(self, x1, x2):
        """Initialize relative pose residual.

        Args:
            x1: Normalized image coordinates in the first view
            x2: Normalized image coordinates in the second view
        """
        x1 = constant_vector(x1, 2, "x1")
        x2 = constant_vector(x2, 2, "x2")

        self.x1_h = constant_vector([x1[0], x1[1], 1.0], 3, "x1_h")
        self.x2_h = constant_vector([x2[0], x2[1], 1.0], 3, "x2_h")

    def parameter_block_sizes(self) -> List[int]:
        return [4, 3]

    def residual_dimension(self) -> int:
        return 1

    def essential_matrix(self, qvec, tvec) -> np.ndarray:
        """Essential matrix ``[t]x R`` of the relative pose."""
        return skew_symmetric(tvec) @ quat_to_matrix(qvec)

    def evaluate(self, qvec, tvec) -> np.ndarray:
        E = self.essential_matrix(qvec, tvec)

        Ex1 = E @ self.x1_h
        Etx2 = E.T @ self.x2_h
        x2tEx1 = self.x2_h @ Ex1

        denominator = Ex1[0] * Ex1[0] + Ex1[1] * Ex1[1] + Etx2[0] * Etx2[0] + Etx2[1] * Etx2[1]

        return np.array([x2tEx1 * x2tEx1 / denominator])
