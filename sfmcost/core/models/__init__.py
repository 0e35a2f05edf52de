"""Measurement models."""

from .measurements import (
    FixedPoseObservation,
    ImageObservation,
    PoseMeasurement,
    TranslationMeasurement,
    TwoViewCorrespondence,
)

__all__ = [
    "FixedPoseObservation",
    "ImageObservation",
    "PoseMeasurement",
    "TranslationMeasurement",
    "TwoViewCorrespondence",
]
