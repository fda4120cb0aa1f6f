"""Pixel to centimeter calibration from torso proportions."""

import logging
from typing import Optional

from smartfit.measurement.keypoints import get_keypoint
from smartfit.measurement.types import EstimatorConfig
from smartfit.pose.base import PoseResult

logger = logging.getLogger(__name__)


def calibration_candidate(
    shoulder_to_hip_pixels: float,
    config: Optional[EstimatorConfig] = None,
) -> float:
    """
    Convert a vertical shoulder-to-hip span into a cm-per-pixel scale.

    Args:
        shoulder_to_hip_pixels: Vertical torso span in pixels.
        config: Estimator constants.

    Returns:
        The calibrated scale if it falls inside the accepted band,
        otherwise the default scale.
    """
    config = config or EstimatorConfig()

    if shoulder_to_hip_pixels <= 0:
        logger.debug("Degenerate torso span, using default scale")
        return config.default_pixel_to_cm

    candidate = config.reference_torso_cm / shoulder_to_hip_pixels
    if config.min_pixel_to_cm < candidate < config.max_pixel_to_cm:
        return candidate

    logger.debug(
        f"Rejected calibration {candidate:.4f} cm/px "
        f"(torso span {shoulder_to_hip_pixels:.1f} px), using default"
    )
    return config.default_pixel_to_cm


def derive_pixel_to_cm(
    pose: Optional[PoseResult],
    config: Optional[EstimatorConfig] = None,
) -> float:
    """
    Derive the cm-per-pixel scale for one image.

    Uses the vertical distance between the left shoulder and the left hip,
    assumed to be reference_torso_cm in reality. Horizontal offset is ignored.

    Args:
        pose: Detected pose, or None.
        config: Estimator constants.

    Returns:
        Scale applied to every linear measurement of the image.
    """
    config = config or EstimatorConfig()

    shoulder = get_keypoint(pose, "left_shoulder", config.min_keypoint_score)
    hip = get_keypoint(pose, "left_hip", config.min_keypoint_score)
    if shoulder is None or hip is None:
        return config.default_pixel_to_cm

    return calibration_candidate(abs(hip.y - shoulder.y), config)
