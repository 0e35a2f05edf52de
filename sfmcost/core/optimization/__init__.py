"""Residual functors."""

from .residuals import (
    DEFAULT_PIXEL_SIGMA,
    FixedPoseProjectionResidual,
    PoseMeasurementResidual,
    PoseTranslationResidual,
    ProjectionResidual,
    ResidualFunctor,
)
from .extended_residuals import RelativePoseResidual, RigProjectionResidual
from .registry import ResidualOptions, ResidualRegistry

__all__ = [
    "DEFAULT_PIXEL_SIGMA",
    "FixedPoseProjectionResidual",
    "PoseMeasurementResidual",
    "PoseTranslationResidual",
    "ProjectionResidual",
    "ResidualFunctor",
    "RelativePoseResidual",
    "RigProjectionResidual",
    "ResidualOptions",
    "ResidualRegistry",
]
