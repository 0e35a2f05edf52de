"""Camera projection models.

Residuals consume a camera model only through ``world_to_image``, which maps
normalized image-plane coordinates ``(u, v)`` (already divided by depth) to
pixel coordinates using an intrinsics vector of ``num_params`` entries. The
mapping is written with plain arithmetic so it can run over generic scalars.
"""

from abc import ABC, abstractmethod
from typing import Dict, Tuple, Type

import numpy as np


class CameraModel(ABC):
    """Interface of a camera projection model."""

    model_name: str = ""
    num_params: int = 0
    param_names: Tuple[str, ...] = ()

    @classmethod
    @abstractmethod
    def world_to_image(cls, params, u, v) -> Tuple:
        """Map normalized coordinates to pixel coordinates.

        Args:
            params: Intrinsics vector of length ``num_params``
            u: Normalized x coordinate
            v: Normalized y coordinate

        Returns:
            Tuple of pixel coordinates (x, y)
        """
        pass

    @classmethod
    @abstractmethod
    def image_to_world(cls, params, x: float, y: float) -> Tuple[float, float]:
        """Map pixel coordinates back to normalized coordinates."""
        pass

    @classmethod
    def check_params(cls, params) -> np.ndarray:
        """Validate intrinsics vector length.

        Residual evaluation checks block shapes itself; this guards the
        pixel to normalized conversion used when preparing measurements.
        """
        params = np.asarray(params)
        if params.shape != (cls.num_params,):
            raise ValueError(
                f"{cls.model_name} expects {cls.num_params} parameters, got shape {params.shape}"
            )
        return params


class SimplePinholeCameraModel(CameraModel):
    """Pinhole camera with a single focal length."""

    model_name = "SIMPLE_PINHOLE"
    num_params = 3
    param_names = ("f", "cx", "cy")

    @classmethod
    def world_to_image(cls, params, u, v):
        f, c1, c2 = params[0], params[1], params[2]
        return f * u + c1, f * v + c2

    @classmethod
    def image_to_world(cls, params, x, y):
        f, c1, c2 = cls.check_params(params)
        return (x - c1) / f, (y - c2) / f


class PinholeCameraModel(CameraModel):
    """Pinhole camera with separate focal lengths per axis."""

    model_name = "PINHOLE"
    num_params = 4
    param_names = ("fx", "fy", "cx", "cy")

    @classmethod
    def world_to_image(cls, params, u, v):
        f1, f2, c1, c2 = params[0], params[1], params[2], params[3]
        return f1 * u + c1, f2 * v + c2

    @classmethod
    def image_to_world(cls, params, x, y):
        f1, f2, c1, c2 = cls.check_params(params)
        return (x - c1) / f1, (y - c2) / f2


def _undistort_radial(distort, u: float, v: float, max_iterations: int = 100, eps: float = 1e-12):
    """Invert a radial distortion by fixed-point iteration."""
    x_target, y_target = u, v
    for _ in range(max_iterations):
        du, dv = distort(u, v)
        u_next = x_target - du
        v_next = y_target - dv
        if abs(u_next - u) < eps and abs(v_next - v) < eps:
            return u_next, v_next
        u, v = u_next, v_next
    return u, v


class SimpleRadialCameraModel(CameraModel):
    """Single focal length with one radial distortion coefficient."""

    model_name = "SIMPLE_RADIAL"
    num_params = 4
    param_names = ("f", "cx", "cy", "k")

    @classmethod
    def distortion(cls, k, u, v):
        """Distortion offsets (du, dv) at normalized coordinates."""
        radial = k * (u * u + v * v)
        return u * radial, v * radial

    @classmethod
    def world_to_image(cls, params, u, v):
        f, c1, c2, k = params[0], params[1], params[2], params[3]

        du, dv = cls.distortion(k, u, v)
        x = u + du
        y = v + dv

        return f * x + c1, f * y + c2

    @classmethod
    def image_to_world(cls, params, x, y):
        f, c1, c2, k = (float(p) for p in cls.check_params(params))
        u = (x - c1) / f
        v = (y - c2) / f
        return _undistort_radial(lambda a, b: cls.distortion(k, a, b), u, v)


class RadialCameraModel(CameraModel):
    """Single focal length with two radial distortion coefficients."""

    model_name = "RADIAL"
    num_params = 5
    param_names = ("f", "cx", "cy", "k1", "k2")

    @classmethod
    def distortion(cls, k1, k2, u, v):
        """Distortion offsets (du, dv) at normalized coordinates."""
        r2 = u * u + v * v
        radial = k1 * r2 + k2 * r2 * r2
        return u * radial, v * radial

    @classmethod
    def world_to_image(cls, params, u, v):
        f, c1, c2, k1, k2 = params[0], params[1], params[2], params[3], params[4]

        du, dv = cls.distortion(k1, k2, u, v)
        x = u + du
        y = v + dv

        return f * x + c1, f * y + c2

    @classmethod
    def image_to_world(cls, params, x, y):
        f, c1, c2, k1, k2 = (float(p) for p in cls.check_params(params))
        u = (x - c1) / f
        v = (y - c2) / f
        return _undistort_radial(lambda a, b: cls.distortion(k1, k2, a, b), u, v)


CAMERA_MODELS: Dict[str, Type[CameraModel]] = {
    model.model_name: model
    for model in (
        SimplePinholeCameraModel,
        PinholeCameraModel,
        SimpleRadialCameraModel,
        RadialCameraModel,
    )
}


def camera_model_from_name(name: str) -> Type[CameraModel]:
    """Get camera model class by name."""
    if name not in CAMERA_MODELS:
        raise ValueError(f"Unknown camera model: {name}")
    return CAMERA_MODELS[name]
