"""Pose estimation module with pluggable backends."""

from smartfit.pose.base import (
    MIN_KEYPOINT_SCORE,
    STANDARD_KEYPOINTS,
    KeypointData,
    PoseBackend,
    PoseResult,
)
from smartfit.pose.mediapipe_backend import MediaPipeBackend

__all__ = [
    "MIN_KEYPOINT_SCORE",
    "STANDARD_KEYPOINTS",
    "KeypointData",
    "PoseBackend",
    "PoseResult",
    "MediaPipeBackend",
]
