"""Check whether a detected person stands inside the capture guide."""

import logging
from typing import Optional

from smartfit.measurement.keypoints import get_keypoint
from smartfit.measurement.types import Frame
from smartfit.pose.base import MIN_KEYPOINT_SCORE, PoseResult

logger = logging.getLogger(__name__)

# Guide outline as a fraction of the frame, centered
GUIDE_WIDTH_RATIO = 0.75
GUIDE_HEIGHT_RATIO = 0.85
# Tolerance around the guide, as a fraction of the guide width
GUIDE_MARGIN_RATIO = 0.1
# Fraction of usable points that must lie inside the guide
MIN_FIT_FRACTION = 0.7

FRAMING_KEYPOINTS = [
    "nose",
    "left_shoulder",
    "right_shoulder",
    "left_hip",
    "right_hip",
    "left_ankle",
    "right_ankle",
]


def check_pose_fit(
    pose: Optional[PoseResult],
    frame: Frame,
    min_score: float = MIN_KEYPOINT_SCORE,
) -> bool:
    """
    Check whether the body is centered within the capture guide.

    The guide is a centered box covering 75% of the frame width and 85% of
    its height, widened on every side by 10% of the guide width.

    Args:
        pose: Detected pose, or None.
        frame: Image dimensions.
        min_score: Keypoints at or below this score are ignored.

    Returns:
        True if at least 70% of the usable framing keypoints are inside the guide.
    """
    if pose is None or pose.is_empty:
        return False

    guide_width = frame.width * GUIDE_WIDTH_RATIO
    guide_height = frame.height * GUIDE_HEIGHT_RATIO
    guide_left = (frame.width - guide_width) / 2
    guide_right = guide_left + guide_width
    guide_top = (frame.height - guide_height) / 2
    guide_bottom = guide_top + guide_height
    margin = guide_width * GUIDE_MARGIN_RATIO

    total_points = 0
    points_in_bounds = 0
    for name in FRAMING_KEYPOINTS:
        kp = get_keypoint(pose, name, min_score)
        if kp is None:
            continue
        total_points += 1
        if (guide_left - margin <= kp.x <= guide_right + margin
                and guide_top - margin <= kp.y <= guide_bottom + margin):
            points_in_bounds += 1

    if total_points == 0:
        return False

    fits = points_in_bounds / total_points >= MIN_FIT_FRACTION
    logger.debug(f"Framing check: {points_in_bounds}/{total_points} points in guide, fits={fits}")
    return fits
