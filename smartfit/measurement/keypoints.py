"""Keypoint lookup and pixel geometry helpers."""

import math
from typing import Optional

from smartfit.pose.base import MIN_KEYPOINT_SCORE, KeypointData, PoseResult


def get_keypoint(
    pose: Optional[PoseResult],
    name: str,
    min_score: float = MIN_KEYPOINT_SCORE,
) -> Optional[KeypointData]:
    """
    Get a usable keypoint by name.

    Args:
        pose: Pose result to search, or None.
        name: Keypoint name (e.g., "left_shoulder").
        min_score: The keypoint must score strictly above this.

    Returns:
        The keypoint, or None if it is missing or low-confidence.
    """
    if pose is None:
        return None
    for kp in pose.keypoints:
        if kp.name == name and kp.is_usable(min_score):
            return kp
    return None


def distance(a: Optional[KeypointData], b: Optional[KeypointData]) -> Optional[float]:
    """Euclidean pixel distance between two keypoints, or None if either is absent."""
    if a is None or b is None:
        return None
    return math.hypot(b.x - a.x, b.y - a.y)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with halves rounded towards +infinity."""
    return int(math.floor(value + 0.5))
