"""Residual functors for pose and reprojection measurements."""

import logging
from abc import ABC, abstractmethod
from typing import List, Type

import numpy as np
from scipy.linalg import cholesky

from ..math.camera import CameraModel
from ..math.quaternions import (
    quat_conjugate,
    quat_multiply,
    quat_normalize,
    quat_rotate_point,
    quat_to_axis_angle,
)

logger = logging.getLogger(__name__)

# Standard deviation of pixel observations, assumed independent per axis.
DEFAULT_PIXEL_SIGMA = 5.0


def constant_vector(values, size: int, name: str) -> np.ndarray:
    """Copy a measurement into a read-only float64 vector."""
    vec = np.array(values, dtype=np.float64)
    if vec.shape != (size,):
        raise ValueError(f"{name} must be {size}-element vector, got shape {vec.shape}")
    vec.setflags(write=False)
    return vec


def sqrt_information(covariance) -> np.ndarray:
    """Square root information matrix of a covariance.

    Returns the upper Cholesky factor ``U`` of ``inv(covariance)`` so that
    ``U.T @ U == inv(covariance)``. Raises ``numpy.linalg.LinAlgError`` when the
    covariance is singular or not positive definite.
    """
    covariance = np.asarray(covariance, dtype=np.float64)
    if covariance.ndim != 2 or covariance.shape[0] != covariance.shape[1]:
        raise ValueError(f"Covariance must be a square matrix, got shape {covariance.shape}")

    information = np.linalg.inv(covariance)
    upper = cholesky(information, lower=False)
    upper.setflags(write=False)
    return upper


def project_to_image(camera_model: Type[CameraModel], qvec, tvec, point3D, camera_params):
    """Project a world point into pixel coordinates of a camera.

    The point is rotated and translated into the camera frame and divided by
    its depth. Points at zero depth yield non-finite values and points behind
    the camera project with flipped sign; neither is guarded here.
    """
    projection = quat_rotate_point(qvec, point3D)
    x = projection[0] + tvec[0]
    y = projection[1] + tvec[1]
    z = projection[2] + tvec[2]

    return camera_model.world_to_image(camera_params, x / z, y / z)


class ResidualFunctor(ABC):
    """Base class for residual functors.

    A functor captures its measurement at construction and evaluates as a
    pure function of the parameter blocks supplied by the optimizer. It keeps
    no state between evaluations, so one instance can be evaluated from many
    threads at once.
    """

    @abstractmethod
    def parameter_block_sizes(self) -> List[int]:
        """Get sizes of the parameter blocks, in call order."""
        pass

    @abstractmethod
    def residual_dimension(self) -> int:
        """Get residual dimension."""
        pass

    @abstractmethod
    def evaluate(self, *parameters) -> np.ndarray:
        """Compute the residual from already validated parameter blocks."""
        pass

    def __call__(self, *parameters) -> np.ndarray:
        """Validate parameter blocks and compute the residual."""
        block_sizes = self.parameter_block_sizes()
        if len(parameters) != len(block_sizes):
            raise ValueError(
                f"{type(self).__name__} expects {len(block_sizes)} parameter blocks, "
                f"got {len(parameters)}"
            )

        blocks = []
        for index, (block, size) in enumerate(zip(parameters, block_sizes)):
            block = np.asarray(block)
            if block.shape != (size,):
                raise ValueError(
                    f"{type(self).__name__}: parameter block {index} must have shape ({size},), "
                    f"got {block.shape}"
                )
            if block.dtype.kind in "biu":
                block = block.astype(np.float64)
            blocks.append(block)

        return self.evaluate(*blocks)


class PoseMeasurementResidual(ResidualFunctor):
    """Residual between an estimated pose and a measured pose.

    Parameter blocks: ``qvec`` (4), ``tvec`` (3). The 6-vector residual is the
    translation error followed by the rotation error as a rotation vector,
    whitened with the square root information of the measurement covariance.
    """

    def __init__(self, qvec, tvec, covariance):
        """Initialize pose measurement residual.

        Args:
            qvec: Measured rotation quaternion [w, x, y, z]
            tvec: Measured translation
            covariance: 6x6 covariance of [translation, rotation vector]
        """
        self.qvec = constant_vector(qvec, 4, "qvec")
        self.tvec = constant_vector(tvec, 3, "tvec")

        covariance = np.asarray(covariance, dtype=np.float64)
        if covariance.shape != (6, 6):
            raise ValueError(f"Covariance must be 6x6, got shape {covariance.shape}")
        self.sqrt_information = sqrt_information(covariance)

        logger.debug(f"Created pose measurement residual at t={self.tvec.tolist()}")

    def parameter_block_sizes(self) -> List[int]:
        return [4, 3]

    def residual_dimension(self) -> int:
        return 6

    def evaluate(self, qvec, tvec) -> np.ndarray:
        # Conjugate is the inverse for unit quaternions.
        dq = quat_normalize(quat_multiply(quat_conjugate(qvec), self.qvec))
        rotation_error = quat_to_axis_angle(dq)

        translation_error = tvec - self.tvec

        residual = np.concatenate([translation_error, rotation_error])
        return self.sqrt_information @ residual


class PoseTranslationResidual(ResidualFunctor):
    """Residual between an estimated and a measured camera translation.

    Parameter block: ``tvec`` (3). Accepts either a 3x3 translation covariance
    or a full 6x6 pose covariance, of which the translation block is used.
    """

    def __init__(self, tvec, covariance):
        self.tvec = constant_vector(tvec, 3, "tvec")

        covariance = np.asarray(covariance, dtype=np.float64)
        if covariance.shape == (6, 6):
            covariance = covariance[:3, :3]
        elif covariance.shape != (3, 3):
            raise ValueError(f"Covariance must be 3x3 or 6x6, got shape {covariance.shape}")
        self.sqrt_information = sqrt_information(covariance)

        logger.debug(f"Created pose translation residual at t={self.tvec.tolist()}")

    def parameter_block_sizes(self) -> List[int]:
        return [3]

    def residual_dimension(self) -> int:
        return 3

    def evaluate(self, tvec) -> np.ndarray:
        return self.sqrt_information @ (tvec - self.tvec)


class ProjectionResidual(ResidualFunctor):
    """Reprojection residual with free pose, point and intrinsics.

    Parameter blocks: ``qvec`` (4), ``tvec`` (3), ``point3D`` (3),
    ``camera_params`` (``camera_model.num_params``). The pixel error is
    divided by the observation standard deviation.
    """

    def __init__(
        self,
        camera_model: Type[CameraModel],
        point2D,
        sigma: float = DEFAULT_PIXEL_SIGMA
    ):
        """Initialize reprojection residual.

        Args:
            camera_model: Camera model used to map normalized coordinates to pixels
            point2D: Observed pixel coordinates [x, y]
            sigma: Pixel standard deviation
        """
        if not np.isfinite(sigma) or sigma <= 0:
            raise ValueError("sigma must be positive and finite")

        self.camera_model = camera_model
        self.point2D = constant_vector(point2D, 2, "point2D")
        self.sigma = float(sigma)

    def parameter_block_sizes(self) -> List[int]:
        return [4, 3, 3, self.camera_model.num_params]

    def residual_dimension(self) -> int:
        return 2

    def evaluate(self, qvec, tvec, point3D, camera_params) -> np.ndarray:
        x, y = project_to_image(self.camera_model, qvec, tvec, point3D, camera_params)

        return np.array([
            (x - self.point2D[0]) / self.sigma,
            (y - self.point2D[1]) / self.sigma
        ])


class FixedPoseProjectionResidual(ResidualFunctor):
    """Reprojection residual for a camera whose pose is held constant.

    Parameter blocks: ``point3D`` (3), ``camera_params``
    (``camera_model.num_params``). The residual is the raw pixel difference.
    """

    def __init__(self, camera_model: Type[CameraModel], qvec, tvec, point2D):
        self.camera_model = camera_model
        self.qvec = constant_vector(qvec, 4, "qvec")
        self.tvec = constant_vector(tvec, 3, "tvec")
        self.point2D = constant_vector(point2D, 2, "point2D")

    def parameter_block_sizes(self) -> List[int]:
        return [3, self.camera_model.num_params]

    def residual_dimension(self) -> int:
        return 2

    def evaluate(self, point3D, camera_params) -> np.ndarray:
        x, y = project_to_image(self.camera_model, self.qvec, self.tvec, point3D, camera_params)

        return np.array([x - self.point2D[0], y - self.point2D[1]])
