"""Math primitives for sfmcost."""

from .quaternions import (
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
from .camera import (
    CAMERA_MODELS,
    CameraModel,
    PinholeCameraModel,
    RadialCameraModel,
    SimplePinholeCameraModel,
    SimpleRadialCameraModel,
    camera_model_from_name,
)

__all__ = [
    "axis_angle_to_quat",
    "quat_conjugate",
    "quat_from_axis_angle",
    "quat_identity",
    "quat_multiply",
    "quat_normalize",
    "quat_rotate_point",
    "quat_to_axis_angle",
    "quat_to_matrix",
    "skew_symmetric",
    "CAMERA_MODELS",
    "CameraModel",
    "PinholeCameraModel",
    "RadialCameraModel",
    "SimplePinholeCameraModel",
    "SimpleRadialCameraModel",
    "camera_model_from_name",
]
