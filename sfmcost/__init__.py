"""sfmcost - residual models for Structure-from-Motion refinement

Pure residual functors for bundle adjustment, rig calibration, pose priors and
two-view relative pose refinement, meant to be driven by an external
nonlinear least-squares optimizer.
"""

__version__ = "0.1.0"

# Rotation algebra and camera models
from .core.math.quaternions import (
    quat_conjugate,
    quat_multiply,
    quat_normalize,
    quat_rotate_point,
    quat_to_axis_angle,
    quat_to_matrix,
)
from .core.math.camera import CameraModel, camera_model_from_name

# Measurements
from .core.models.measurements import (
    FixedPoseObservation,
    ImageObservation,
    PoseMeasurement,
    TranslationMeasurement,
    TwoViewCorrespondence,
)

# Residuals
from .core.optimization.residuals import (
    FixedPoseProjectionResidual,
    PoseMeasurementResidual,
    PoseTranslationResidual,
    ProjectionResidual,
    ResidualFunctor,
)
from .core.optimization.extended_residuals import RelativePoseResidual, RigProjectionResidual
from .core.optimization.registry import ResidualOptions, ResidualRegistry

__all__ = [
    # Version
    "__version__",
    # Rotation algebra
    "quat_conjugate",
    "quat_multiply",
    "quat_normalize",
    "quat_rotate_point",
    "quat_to_axis_angle",
    "quat_to_matrix",
    # Camera models
    "CameraModel",
    "camera_model_from_name",
    # Measurements
    "PoseMeasurement",
    "TranslationMeasurement",
    "ImageObservation",
    "FixedPoseObservation",
    "TwoViewCorrespondence",
    # Residuals
    "ResidualFunctor",
    "PoseMeasurementResidual",
    "PoseTranslationResidual",
    "ProjectionResidual",
    "FixedPoseProjectionResidual",
    "RigProjectionResidual",
    "RelativePoseResidual",
    # Construction
    "ResidualOptions",
    "ResidualRegistry",
]
