"""Measurement records validated before residuals are built from them."""

from typing import List, Literal, Optional

import numpy as np
from pydantic import BaseModel, Field, field_validator, model_validator


def _check_covariance(v: List[List[float]], allowed_sizes) -> List[List[float]]:
    cov = np.asarray(v, dtype=np.float64)
    if cov.ndim != 2 or cov.shape[0] != cov.shape[1] or cov.shape[0] not in allowed_sizes:
        sizes = " or ".join(f"{n}x{n}" for n in allowed_sizes)
        raise ValueError(f"covariance must be {sizes}, got shape {cov.shape}")
    if not np.all(np.isfinite(cov)):
        raise ValueError("covariance must be finite")
    if not np.allclose(cov, cov.T):
        raise ValueError("covariance must be symmetric")
    try:
        np.linalg.cholesky(cov)
    except np.linalg.LinAlgError:
        raise ValueError("covariance must be positive definite")
    return v


def _check_qvec(v: List[float]) -> List[float]:
    if np.linalg.norm(v) < 1e-12:
        raise ValueError("qvec must have non-zero norm")
    return v


class PoseMeasurement(BaseModel):
    """Direct measurement of a camera pose, e.g. from GPS/IMU."""

    type: Literal["pose"] = "pose"
    qvec: List[float] = Field(
        description="Measured rotation quaternion [w, x, y, z]",
        min_length=4,
        max_length=4
    )
    tvec: List[float] = Field(
        description="Measured translation [x, y, z]",
        min_length=3,
        max_length=3
    )
    covariance: List[List[float]] = Field(
        description="6x6 covariance of [translation, rotation vector]"
    )

    @field_validator('qvec')
    @classmethod
    def validate_qvec(cls, v):
        return _check_qvec(v)

    @field_validator('covariance')
    @classmethod
    def validate_covariance(cls, v):
        return _check_covariance(v, (6,))

    def covariance_matrix(self) -> np.ndarray:
        return np.array(self.covariance)


class TranslationMeasurement(BaseModel):
    """Measurement of a camera translation only."""

    type: Literal["translation"] = "translation"
    tvec: List[float] = Field(
        description="Measured translation [x, y, z]",
        min_length=3,
        max_length=3
    )
    covariance: List[List[float]] = Field(
        description="3x3 translation covariance, or 6x6 pose covariance"
    )

    @field_validator('covariance')
    @classmethod
    def validate_covariance(cls, v):
        return _check_covariance(v, (3, 6))

    def covariance_matrix(self) -> np.ndarray:
        return np.array(self.covariance)


class ImageObservation(BaseModel):
    """Observation of a 3D point in an image with a free camera pose."""

    type: Literal["image_point"] = "image_point"
    xy: List[float] = Field(
        description="Observed pixel coordinates [x, y]",
        min_length=2,
        max_length=2
    )
    sigma: Optional[float] = Field(
        default=None,
        gt=0,
        allow_inf_nan=False,
        description="Pixel standard deviation (defaults to the configured value)"
    )
    rig: bool = Field(
        default=False,
        description="Observation made by a camera inside a rig (raw pixel residual, no sigma)"
    )

    @model_validator(mode='after')
    def validate_rig_sigma(self):
        if self.rig and self.sigma is not None:
            raise ValueError("sigma cannot be set on a rig observation")
        return self


class FixedPoseObservation(BaseModel):
    """Observation of a 3D point by a camera with a known, fixed pose."""

    type: Literal["fixed_pose_image_point"] = "fixed_pose_image_point"
    qvec: List[float] = Field(min_length=4, max_length=4, description="Camera rotation [w, x, y, z]")
    tvec: List[float] = Field(min_length=3, max_length=3, description="Camera translation")
    xy: List[float] = Field(min_length=2, max_length=2, description="Observed pixel coordinates")

    @field_validator('qvec')
    @classmethod
    def validate_qvec(cls, v):
        return _check_qvec(v)


class TwoViewCorrespondence(BaseModel):
    """Correspondence of normalized image coordinates between two views."""

    type: Literal["two_view"] = "two_view"
    x1: List[float] = Field(min_length=2, max_length=2, description="Normalized coordinates in view 1")
    x2: List[float] = Field(min_length=2, max_length=2, description="Normalized coordinates in view 2")
