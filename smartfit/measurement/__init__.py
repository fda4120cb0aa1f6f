"""Body measurement estimation from pose landmarks."""

from smartfit.measurement.calibration import calibration_candidate, derive_pixel_to_cm
from smartfit.measurement.estimator import estimate, fallback_measurements
from smartfit.measurement.formatting import export_measurements, format_measurement
from smartfit.measurement.framing import check_pose_fit
from smartfit.measurement.keypoints import distance, get_keypoint
from smartfit.measurement.types import (
    EstimatorConfig,
    Frame,
    Measurement,
    MeasurementSet,
    MeasurementValue,
)

__all__ = [
    "calibration_candidate",
    "derive_pixel_to_cm",
    "estimate",
    "fallback_measurements",
    "export_measurements",
    "format_measurement",
    "check_pose_fit",
    "distance",
    "get_keypoint",
    "EstimatorConfig",
    "Frame",
    "Measurement",
    "MeasurementSet",
    "MeasurementValue",
]
