"""Body measurement estimation from 2D pose landmarks."""

import logging
from typing import Dict, List, Optional, Tuple

from smartfit.measurement.calibration import derive_pixel_to_cm
from smartfit.measurement.keypoints import distance, get_keypoint, round_half_up
from smartfit.measurement.types import (
    EstimatorConfig,
    Frame,
    Measurement,
    MeasurementSet,
    MeasurementValue,
)
from smartfit.pose.base import KeypointData, PoseResult

logger = logging.getLogger(__name__)

# Image-proportion fallbacks: (frame dimension, ratio)
WIDTH_FALLBACK_RATIOS = {
    Measurement.SHOULDER_WIDTH: 0.18,
    Measurement.CHEST: 0.15,
    Measurement.WAIST: 0.12,
    Measurement.HIPS: 0.14,
}
HEIGHT_FALLBACK_RATIOS = {
    Measurement.ARM_LENGTH: 0.25,
    Measurement.LEG_LENGTH: 0.35,
}

# Width multipliers applied to the shoulder or hip distance
CHEST_SHOULDER_RATIO = 1.15
WAIST_HIP_RATIO = 0.85
HIPS_HIP_RATIO = 1.10

# Offsets used when the nose or ankles are not visible
SHOULDER_TO_HEAD_OFFSET_PX = 20
KNEE_TO_FLOOR_OFFSET_PX = 50

ARM_SIDES = [("left_shoulder", "left_wrist"), ("right_shoulder", "right_wrist")]
LEG_SIDES = [("left_hip", "left_ankle"), ("right_hip", "right_ankle")]


def fallback_value(
    measurement: Measurement,
    frame: Frame,
    config: Optional[EstimatorConfig] = None,
) -> MeasurementValue:
    """Image-proportion estimate for a measurement, flagged as a fallback."""
    config = config or EstimatorConfig()

    if measurement == Measurement.HEIGHT:
        cm = frame.height * config.height_fallback_ratio
    elif measurement in WIDTH_FALLBACK_RATIOS:
        cm = frame.width * WIDTH_FALLBACK_RATIOS[measurement]
    else:
        cm = frame.height * HEIGHT_FALLBACK_RATIOS[measurement]

    return MeasurementValue(centimeters=round_half_up(cm), is_estimated_fallback=True)


def fallback_measurements(
    frame: Frame,
    config: Optional[EstimatorConfig] = None,
) -> MeasurementSet:
    """Image-proportion estimates for every measurement."""
    return MeasurementSet(
        values={m: fallback_value(m, frame, config) for m in Measurement}
    )


class _PoseGeometry:
    """Usable keypoints of one pose and the scale to convert them to cm."""

    def __init__(self, pose: PoseResult, pixel_to_cm: float, min_score: float):
        self.pose = pose
        self.pixel_to_cm = pixel_to_cm
        self.min_score = min_score
        self._cache: Dict[str, Optional[KeypointData]] = {}

    def get(self, name: str) -> Optional[KeypointData]:
        if name not in self._cache:
            self._cache[name] = get_keypoint(self.pose, name, self.min_score)
        return self._cache[name]

    def has(self, *names: str) -> bool:
        return all(self.get(name) is not None for name in names)

    def span(self, start: str, end: str) -> Optional[float]:
        return distance(self.get(start), self.get(end))

    def mean_span(self, sides: List[Tuple[str, str]]) -> Optional[float]:
        """Average length over the sides where both endpoints are usable."""
        lengths = [self.span(start, end) for start, end in sides]
        lengths = [length for length in lengths if length is not None]
        if not lengths:
            return None
        return sum(lengths) / len(lengths)

    def top_y(self) -> Optional[float]:
        nose = self.get("nose")
        if nose is not None:
            return nose.y
        if self.has("left_shoulder", "right_shoulder"):
            mid_y = (self.get("left_shoulder").y + self.get("right_shoulder").y) / 2
            return mid_y - SHOULDER_TO_HEAD_OFFSET_PX
        return None

    def bottom_y(self) -> Optional[float]:
        if self.has("left_ankle", "right_ankle"):
            return max(self.get("left_ankle").y, self.get("right_ankle").y)
        if self.has("left_knee", "right_knee"):
            return max(self.get("left_knee").y, self.get("right_knee").y) + KNEE_TO_FLOOR_OFFSET_PX
        return None

    def to_cm(self, pixels: float) -> MeasurementValue:
        return MeasurementValue(centimeters=round_half_up(pixels * self.pixel_to_cm))


def _measure(geometry: _PoseGeometry, measurement: Measurement) -> Optional[MeasurementValue]:
    """Measure from landmarks, or None if the required landmarks are missing."""
    if measurement == Measurement.HEIGHT:
        top, bottom = geometry.top_y(), geometry.bottom_y()
        if top is None or bottom is None:
            return None
        return geometry.to_cm(bottom - top)

    if measurement == Measurement.SHOULDER_WIDTH:
        width = geometry.span("left_shoulder", "right_shoulder")
        return geometry.to_cm(width) if width is not None else None

    if measurement == Measurement.CHEST:
        # Requires a full torso even though only the shoulders are measured
        if not geometry.has("left_shoulder", "right_shoulder", "left_hip", "right_hip"):
            return None
        return geometry.to_cm(geometry.span("left_shoulder", "right_shoulder") * CHEST_SHOULDER_RATIO)

    if measurement in (Measurement.WAIST, Measurement.HIPS):
        width = geometry.span("left_hip", "right_hip")
        if width is None:
            return None
        ratio = WAIST_HIP_RATIO if measurement == Measurement.WAIST else HIPS_HIP_RATIO
        return geometry.to_cm(width * ratio)

    sides = ARM_SIDES if measurement == Measurement.ARM_LENGTH else LEG_SIDES
    length = geometry.mean_span(sides)
    return geometry.to_cm(length) if length is not None else None


def estimate(
    frame: Frame,
    pose: Optional[PoseResult] = None,
    config: Optional[EstimatorConfig] = None,
) -> MeasurementSet:
    """
    Estimate body measurements for one image.

    Each measurement uses detected landmarks when the ones it needs are
    usable, and otherwise falls back to a fixed proportion of the frame
    width or height. All linear measurements share one cm-per-pixel scale
    derived from the torso. Never raises for missing anatomy.

    Args:
        frame: Image dimensions.
        pose: Detected pose, or None if no person was detected.
        config: Estimator constants.

    Returns:
        MeasurementSet with every measurement present.
    """
    config = config or EstimatorConfig()

    if pose is None or pose.is_empty:
        logger.debug("No pose available, using image-proportion estimates")
        return fallback_measurements(frame, config)

    pixel_to_cm = derive_pixel_to_cm(pose, config)
    geometry = _PoseGeometry(pose, pixel_to_cm, config.min_keypoint_score)

    values = {}
    for measurement in Measurement:
        value = _measure(geometry, measurement)
        if value is None:
            logger.debug(f"{measurement.value}: landmarks missing, using fallback")
            value = fallback_value(measurement, frame, config)
        values[measurement] = value

    result = MeasurementSet(values=values)
    logger.debug(
        f"Estimated measurements at {pixel_to_cm:.4f} cm/px, "
        f"{result.fallback_count} fallback(s)"
    )
    return result
