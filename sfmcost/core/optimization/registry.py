"""Registry that builds residual functors by type name or from measurements."""

import logging
from dataclasses import dataclass
from typing import List, Union

import numpy as np

from ..math.camera import camera_model_from_name
from ..models.measurements import (
    FixedPoseObservation,
    ImageObservation,
    PoseMeasurement,
    TranslationMeasurement,
    TwoViewCorrespondence,
)
from .extended_residuals import RelativePoseResidual, RigProjectionResidual
from .residuals import (
    DEFAULT_PIXEL_SIGMA,
    FixedPoseProjectionResidual,
    PoseMeasurementResidual,
    PoseTranslationResidual,
    ProjectionResidual,
    ResidualFunctor,
)

logger = logging.getLogger(__name__)

Measurement = Union[
    PoseMeasurement,
    TranslationMeasurement,
    ImageObservation,
    FixedPoseObservation,
    TwoViewCorrespondence,
]


@dataclass
class ResidualOptions:
    """Options used when building residuals from measurements."""

    pixel_sigma: float = DEFAULT_PIXEL_SIGMA
    camera_model: str = "SIMPLE_RADIAL"

    def __post_init__(self):
        if not np.isfinite(self.pixel_sigma) or self.pixel_sigma <= 0:
            raise ValueError("pixel_sigma must be positive and finite")
        # Fail early on unknown camera model names.
        camera_model_from_name(self.camera_model)


class ResidualRegistry:
    """Registry for residual functor types."""

    _residual_types = {
        "pose_measurement": PoseMeasurementResidual,
        "pose_translation": PoseTranslationResidual,
        "projection": ProjectionResidual,
        "fixed_pose_projection": FixedPoseProjectionResidual,
        "rig_projection": RigProjectionResidual,
        "relative_pose": RelativePoseResidual,
    }

    @classmethod
    def get_residual_class(cls, residual_type: str):
        """Get residual class by type string."""
        if residual_type not in cls._residual_types:
            raise ValueError(f"Unknown residual type: {residual_type}")
        return cls._residual_types[residual_type]

    @classmethod
    def list_residual_types(cls) -> List[str]:
        """List all available residual types."""
        return list(cls._residual_types.keys())

    @classmethod
    def create_residual(cls, residual_type: str, **kwargs) -> ResidualFunctor:
        """Create residual functor of specified type."""
        residual_class = cls.get_residual_class(residual_type)
        logger.debug(f"Creating {residual_type} residual")
        return residual_class(**kwargs)

    @classmethod
    def from_measurement(
        cls,
        measurement: Measurement,
        options: ResidualOptions = None
    ) -> ResidualFunctor:
        """Create the residual functor matching a measurement record.

        Args:
            measurement: Validated measurement record
            options: Camera model and pixel noise used for image observations

        Returns:
            Residual functor for the measurement
        """
        options = options or ResidualOptions()

        if isinstance(measurement, PoseMeasurement):
            return cls.create_residual(
                "pose_measurement",
                qvec=measurement.qvec,
                tvec=measurement.tvec,
                covariance=measurement.covariance_matrix()
            )

        if isinstance(measurement, TranslationMeasurement):
            return cls.create_residual(
                "pose_translation",
                tvec=measurement.tvec,
                covariance=measurement.covariance_matrix()
            )

        camera_model = camera_model_from_name(options.camera_model)

        if isinstance(measurement, ImageObservation):
            if measurement.rig:
                return cls.create_residual(
                    "rig_projection",
                    camera_model=camera_model,
                    point2D=measurement.xy
                )
            sigma = measurement.sigma if measurement.sigma is not None else options.pixel_sigma
            return cls.create_residual(
                "projection",
                camera_model=camera_model,
                point2D=measurement.xy,
                sigma=sigma
            )

        if isinstance(measurement, FixedPoseObservation):
            return cls.create_residual(
                "fixed_pose_projection",
                camera_model=camera_model,
                qvec=measurement.qvec,
                tvec=measurement.tvec,
                point2D=measurement.xy
            )

        if isinstance(measurement, TwoViewCorrespondence):
            return cls.create_residual("relative_pose", x1=measurement.x1, x2=measurement.x2)

        raise ValueError(f"Unsupported measurement type: {type(measurement).__name__}")
