"""Abstract base class and data types for pose estimation backends."""

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

import numpy as np

logger = logging.getLogger(__name__)

# Keypoints at or below this detection score are treated as absent
MIN_KEYPOINT_SCORE = 0.3

# Landmarks used by the measurement estimator
STANDARD_KEYPOINTS = [
    "nose",
    "left_shoulder",
    "right_shoulder",
    "left_elbow",
    "right_elbow",
    "left_wrist",
    "right_wrist",
    "left_hip",
    "right_hip",
    "left_knee",
    "right_knee",
    "left_ankle",
    "right_ankle",
]


@dataclass(frozen=True)
class KeypointData:
    """
    Data for a single keypoint/landmark.

    Attributes:
        name: Name of the keypoint (e.g., "left_shoulder").
        x: X coordinate in image pixels (origin top-left).
        y: Y coordinate in image pixels (origin top-left).
        score: Detection confidence (0-1).
    """
    name: str
    x: float
    y: float
    score: float = 1.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format for serialization."""
        return {
            "name": self.name,
            "x": self.x,
            "y": self.y,
            "score": self.score,
        }

    def is_usable(self, min_score: float = MIN_KEYPOINT_SCORE) -> bool:
        """Whether the keypoint is confident enough and has finite coordinates."""
        return self.score > min_score and math.isfinite(self.x) and math.isfinite(self.y)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "KeypointData":
        """
        Create a keypoint from a dictionary.

        Accepts either a "score" or a "confidence" key for the detection
        confidence; a missing score is treated as 0 (unusable).
        """
        score = data.get("score", data.get("confidence", 0.0))
        return cls(
            name=str(data["name"]),
            x=float(data["x"]),
            y=float(data["y"]),
            score=float(score) if score is not None else 0.0,
        )


@dataclass
class PoseResult:
    """
    Result of pose estimation for a single image.

    Holds the landmarks of at most one person. Any subset of the
    standard keypoints may be missing.

    Attributes:
        keypoints: List of detected keypoints.
        model_name: Name of the model that produced this result.
        raw_output: Optional raw model output for debugging.
    """
    keypoints: List[KeypointData] = field(default_factory=list)
    model_name: str = ""
    raw_output: Optional[Any] = None

    def __len__(self) -> int:
        return len(self.keypoints)

    @property
    def is_empty(self) -> bool:
        """Whether the result holds no keypoints at all."""
        return not self.keypoints

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format."""
        return {
            "keypoints": [kp.to_dict() for kp in self.keypoints],
            "model_name": self.model_name,
        }

    @classmethod
    def from_dict(cls, data: Union[Dict[str, Any], List[Dict[str, Any]]]) -> "PoseResult":
        """
        Create a pose result from a serialized detector result.

        Accepts a single pose:
            {"keypoints": [{"name": "nose", "x": 320, "y": 80, "score": 0.9}, ...]}
        or a list of poses as returned by multi-pose APIs such as
        MoveNet estimatePoses(), in which case the first pose is used and
        an empty list gives an empty result.

        Entries without a name are skipped.
        """
        if isinstance(data, list):
            if not data:
                return cls()
            data = data[0]

        keypoints = [
            KeypointData.from_dict(kp)
            for kp in data.get("keypoints") or []
            if kp and kp.get("name")
        ]
        return cls(keypoints=keypoints, model_name=data.get("model_name", ""))


class PoseBackend(ABC):
    """
    Abstract base class for pose estimation backends.

    All pose estimation implementations should inherit from this class
    and implement the required abstract methods.
    """

    STANDARD_KEYPOINTS = STANDARD_KEYPOINTS

    def __init__(self, min_detection_confidence: float = 0.5):
        """
        Initialize the pose backend.

        Args:
            min_detection_confidence: Minimum confidence for pose detection.
        """
        self.min_detection_confidence = min_detection_confidence
        self._is_initialized = False

    @property
    @abstractmethod
    def name(self) -> str:
        """Name of the pose estimation backend."""
        pass

    @property
    @abstractmethod
    def keypoint_names(self) -> List[str]:
        """List of keypoint names produced by this backend."""
        pass

    @abstractmethod
    def initialize(self) -> None:
        """
        Initialize the pose estimation model.

        This should be called before processing any images.
        """
        pass

    @abstractmethod
    def process_image(self, image: np.ndarray) -> Optional[PoseResult]:
        """
        Detect the pose of a single person in an image.

        Args:
            image: Input image (BGR format from OpenCV).

        Returns:
            PoseResult with standard keypoints, or None if no person was found.
        """
        pass

    def cleanup(self) -> None:
        """
        Clean up resources.

        Override this method to release any resources held by the backend.
        """
        self._is_initialized = False

    def __enter__(self):
        """Context manager entry."""
        self.initialize()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.cleanup()
        return False

    def map_to_standard_keypoints(
        self,
        keypoints: List[KeypointData],
    ) -> List[KeypointData]:
        """
        Keep only the keypoints the measurement estimator knows about.

        Override this method to provide a custom name mapping.

        Args:
            keypoints: List of backend-specific keypoints.

        Returns:
            List of keypoints with standardized names.
        """
        return [kp for kp in keypoints if kp.name in self.STANDARD_KEYPOINTS]
