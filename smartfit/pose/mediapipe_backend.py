"""MediaPipe Pose estimation backend using the new Tasks API."""

import logging
from pathlib import Path
from typing import List, Optional

import numpy as np

from smartfit.pose.base import KeypointData, PoseBackend, PoseResult

logger = logging.getLogger(__name__)

MODEL_URLS = {
    0: "https://storage.googleapis.com/mediapipe-models/pose_landmarker/pose_landmarker_lite/float16/1/pose_landmarker_lite.task",
    1: "https://storage.googleapis.com/mediapipe-models/pose_landmarker/pose_landmarker_full/float16/1/pose_landmarker_full.task",
    2: "https://storage.googleapis.com/mediapipe-models/pose_landmarker/pose_landmarker_heavy/float16/1/pose_landmarker_heavy.task",
}

MODEL_NAMES = {
    0: "pose_landmarker_lite.task",
    1: "pose_landmarker_full.task",
    2: "pose_landmarker_heavy.task",
}


class MediaPipeBackend(PoseBackend):
    """
    MediaPipe Pose estimation backend using the Tasks API.

    Uses Google's MediaPipe Pose Landmarker which provides 33 body landmarks;
    only the standard keypoints are kept. Landmark visibility is used as
    the keypoint score.
    """

    # MediaPipe Pose Landmarker landmark names (33 landmarks)
    MEDIAPIPE_LANDMARKS = [
        "nose",
        "left_eye_inner",
        "left_eye",
        "left_eye_outer",
        "right_eye_inner",
        "right_eye",
        "right_eye_outer",
        "left_ear",
        "right_ear",
        "mouth_left",
        "mouth_right",
        "left_shoulder",
        "right_shoulder",
        "left_elbow",
        "right_elbow",
        "left_wrist",
        "right_wrist",
        "left_pinky",
        "right_pinky",
        "left_index",
        "right_index",
        "left_thumb",
        "right_thumb",
        "left_hip",
        "right_hip",
        "left_knee",
        "right_knee",
        "left_ankle",
        "right_ankle",
        "left_heel",
        "right_heel",
        "left_foot_index",
        "right_foot_index",
    ]

    def __init__(
        self,
        min_detection_confidence: float = 0.5,
        model_complexity: int = 1,
        model_dir: Optional[str] = None,
    ):
        """
        Initialize the MediaPipe backend.

        Args:
            min_detection_confidence: Minimum confidence for pose detection.
            model_complexity: Model complexity (0=lite, 1=full, 2=heavy).
            model_dir: Directory for the downloaded model (defaults to ~/.cache/mediapipe).
        """
        super().__init__(min_detection_confidence)
        self.model_complexity = model_complexity
        self.model_dir = Path(model_dir) if model_dir else Path.home() / ".cache" / "mediapipe"
        self._landmarker = None
        self._mp = None

    @property
    def name(self) -> str:
        """Name of the pose estimation backend."""
        return "mediapipe"

    @property
    def keypoint_names(self) -> List[str]:
        """List of keypoint names produced by this backend."""
        return [name for name in self.MEDIAPIPE_LANDMARKS if name in self.STANDARD_KEYPOINTS]

    def initialize(self) -> None:
        """Initialize the MediaPipe Pose Landmarker."""
        if self._is_initialized:
            return

        try:
            import mediapipe as mp
            from mediapipe.tasks import python
            from mediapipe.tasks.python import vision
        except ImportError as e:
            raise ImportError(
                f"mediapipe package error: {e}. "
                "Install with: pip install mediapipe"
            )

        self._mp = mp
        model_path = self._get_model_path()

        # Single person, single image
        base_options = python.BaseOptions(model_asset_path=model_path)
        options = vision.PoseLandmarkerOptions(
            base_options=base_options,
            running_mode=vision.RunningMode.IMAGE,
            num_poses=1,
            min_pose_detection_confidence=self.min_detection_confidence,
            output_segmentation_masks=False,
        )

        try:
            self._landmarker = vision.PoseLandmarker.create_from_options(options)
        except Exception as e:
            logger.error(f"Failed to initialize MediaPipe: {e}")
            raise

        self._is_initialized = True
        logger.info("MediaPipe Pose Landmarker initialized successfully")

    def _get_model_path(self) -> str:
        """Download and return path to the pose landmarker model."""
        import urllib.request

        self.model_dir.mkdir(parents=True, exist_ok=True)

        model_name = MODEL_NAMES.get(self.model_complexity, MODEL_NAMES[1])
        model_path = self.model_dir / model_name

        if not model_path.exists():
            url = MODEL_URLS.get(self.model_complexity, MODEL_URLS[1])
            logger.info(f"Downloading MediaPipe model from {url}...")
            urllib.request.urlretrieve(url, model_path)
            logger.info(f"Model downloaded to {model_path}")

        return str(model_path)

    def process_image(self, image: np.ndarray) -> Optional[PoseResult]:
        """
        Detect the pose of a single person in an image.

        Args:
            image: Input image (BGR format from OpenCV).

        Returns:
            PoseResult with pixel-space keypoints, or None if no pose was found.
        """
        if not self._is_initialized:
            self.initialize()

        import cv2

        image_rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
        mp_image = self._mp.Image(
            image_format=self._mp.ImageFormat.SRGB,
            data=image_rgb,
        )

        detection_result = self._landmarker.detect(mp_image)

        if not detection_result.pose_landmarks:
            logger.debug("No pose detected in image")
            return None

        landmarks = detection_result.pose_landmarks[0]
        h, w = image.shape[:2]

        keypoints = []
        for idx, landmark in enumerate(landmarks):
            visibility = getattr(landmark, "visibility", None)
            keypoints.append(
                KeypointData(
                    name=self.MEDIAPIPE_LANDMARKS[idx],
                    x=landmark.x * w,  # Convert to pixel coordinates
                    y=landmark.y * h,
                    score=float(visibility) if visibility is not None else 1.0,
                )
            )

        return PoseResult(
            keypoints=self.map_to_standard_keypoints(keypoints),
            model_name=self.name,
            raw_output=detection_result,
        )

    def cleanup(self) -> None:
        """Clean up MediaPipe resources."""
        if self._landmarker is not None:
            self._landmarker.close()
            self._landmarker = None
        self._is_initialized = False
        logger.debug("MediaPipe Pose Landmarker resources cleaned up")
