"""Unit tests for pose data types and backends."""
from types import SimpleNamespace

import numpy as np
import pytest

from smartfit.pose.base import KeypointData, PoseBackend, PoseResult
from smartfit.pose.mediapipe_backend import MediaPipeBackend


class TestKeypointData:
    """Test KeypointData conversions."""

    def test_from_dict_score(self):
        """Test loading a detector keypoint with a score."""
        kp = KeypointData.from_dict({"name": "nose", "x": 1, "y": 2, "score": 0.8})
        assert kp == KeypointData("nose", 1.0, 2.0, 0.8)

    def test_from_dict_confidence_alias(self):
        """Test loading a keypoint that uses "confidence"."""
        kp = KeypointData.from_dict({"name": "nose", "x": 1, "y": 2, "confidence": 0.6})
        assert kp.score == 0.6

    def test_from_dict_missing_score_unusable(self):
        """Test that a keypoint without a score is not usable."""
        kp = KeypointData.from_dict({"name": "nose", "x": 1, "y": 2})
        assert not kp.is_usable()

    @pytest.mark.parametrize("x, y", [
        (float("nan"), 200),
        (200, float("nan")),
        (float("inf"), 200),
        (200, float("-inf")),
    ])
    def test_non_finite_coordinates_unusable(self, x, y):
        """Test that a confident keypoint with a non-finite coordinate is not usable."""
        assert not KeypointData("left_shoulder", x, y, 0.9).is_usable()


class TestPoseResult:
    """Test PoseResult loading."""

    def test_from_dict(self):
        """Test loading a serialized detector result."""
        pose = PoseResult.from_dict({
            "keypoints": [
                {"name": "nose", "x": 320, "y": 80, "score": 0.9},
                {"x": 1, "y": 1, "score": 0.9},
                None,
            ],
            "model_name": "movenet",
        })

        assert len(pose) == 1
        assert pose.model_name == "movenet"
        assert pose.keypoints[0] == KeypointData("nose", 320.0, 80.0, 0.9)

    def test_from_dict_without_keypoints(self):
        """Test that a result without keypoints is empty."""
        assert PoseResult.from_dict({}).is_empty

    def test_from_dict_list_uses_first_pose(self):
        """Test that a multi-pose list loads the first pose."""
        pose = PoseResult.from_dict([
            {"keypoints": [{"name": "nose", "x": 320, "y": 80, "score": 0.9}]},
            {"keypoints": [{"name": "nose", "x": 10, "y": 10, "score": 0.9}]},
        ])

        assert len(pose) == 1
        assert pose.keypoints[0].x == 320.0

    def test_from_dict_empty_list(self):
        """Test that an empty pose list gives an empty result."""
        assert PoseResult.from_dict([]).is_empty

    def test_round_trip(self, full_pose):
        """Test that to_dict output loads back."""
        assert PoseResult.from_dict(full_pose.to_dict()).keypoints == full_pose.keypoints


class TestPoseBackend:
    """Test shared backend behavior."""

    def test_map_to_standard_keypoints(self, fake_backend):
        """Test that non-standard landmarks are dropped."""
        backend = fake_backend()
        keypoints = [
            KeypointData("nose", 0, 0),
            KeypointData("left_eye_inner", 0, 0),
            KeypointData("left_heel", 0, 0),
        ]
        assert [kp.name for kp in backend.map_to_standard_keypoints(keypoints)] == ["nose"]

    def test_context_manager(self, fake_backend):
        """Test initialize and cleanup via the context manager."""
        with fake_backend() as backend:
            assert backend._is_initialized
        assert not backend._is_initialized


class FakeLandmarker:
    """Stands in for the MediaPipe PoseLandmarker."""

    def __init__(self, pose_landmarks):
        self.pose_landmarks = pose_landmarks
        self.images = []

    def detect(self, mp_image):
        self.images.append(mp_image)
        return SimpleNamespace(pose_landmarks=self.pose_landmarks)

    def close(self):
        pass


def fake_mediapipe():
    """Minimal stand-in for the mediapipe module's Image API."""
    return SimpleNamespace(
        Image=lambda image_format, data: SimpleNamespace(image_format=image_format, data=data),
        ImageFormat=SimpleNamespace(SRGB="srgb"),
    )


def make_landmarks(count=33):
    """Normalized landmarks where landmark i sits at ((i+1)/100, (i+1)/50)."""
    return [
        SimpleNamespace(x=(i + 1) / 100, y=(i + 1) / 50, visibility=0.5 + i / 100)
        for i in range(count)
    ]


@pytest.fixture
def mediapipe_backend():
    """Factory for a MediaPipe backend wired to a fake landmarker."""
    def _make(pose_landmarks):
        backend = MediaPipeBackend()
        backend._mp = fake_mediapipe()
        backend._landmarker = FakeLandmarker(pose_landmarks)
        backend._is_initialized = True
        return backend
    return _make


class TestMediaPipeBackend:
    """Test the MediaPipe backend without loading a model."""

    def test_keypoint_names_are_standard(self):
        """Test that only standard keypoints are reported."""
        backend = MediaPipeBackend()
        assert set(backend.keypoint_names) == set(PoseBackend.STANDARD_KEYPOINTS)

    def test_name(self):
        """Test the backend name."""
        assert MediaPipeBackend().name == "mediapipe"

    def test_cleanup_without_initialize(self):
        """Test that cleanup is safe before initialization."""
        backend = MediaPipeBackend(model_dir="/tmp/unused")
        backend.cleanup()
        assert not backend._is_initialized

    def test_process_image(self, mediapipe_backend):
        """Test conversion of normalized landmarks to pixel keypoints."""
        backend = mediapipe_backend([make_landmarks()])
        image = np.zeros((480, 640, 3), dtype=np.uint8)

        pose = backend.process_image(image)

        assert pose.model_name == "mediapipe"
        assert [kp.name for kp in pose.keypoints] == [
            name for name in MediaPipeBackend.MEDIAPIPE_LANDMARKS
            if name in PoseBackend.STANDARD_KEYPOINTS
        ]
        assert len(pose) == 13

        by_name = {kp.name: kp for kp in pose.keypoints}
        # left_shoulder is landmark 11
        assert by_name["left_shoulder"].x == pytest.approx(0.12 * 640)
        assert by_name["left_shoulder"].y == pytest.approx(0.24 * 480)
        assert by_name["left_shoulder"].score == pytest.approx(0.61)
        # nose is landmark 0
        assert by_name["nose"].x == pytest.approx(6.4)
        assert by_name["nose"].y == pytest.approx(9.6)
        assert by_name["nose"].score == pytest.approx(0.5)

    def test_process_image_passes_rgb(self, mediapipe_backend):
        """Test that the landmarker receives an RGB SRGB image."""
        backend = mediapipe_backend([make_landmarks()])
        image = np.zeros((4, 4, 3), dtype=np.uint8)
        image[..., 0] = 255  # blue in BGR

        backend.process_image(image)

        mp_image = backend._landmarker.images[0]
        assert mp_image.image_format == "srgb"
        assert mp_image.data[0, 0].tolist() == [0, 0, 255]

    def test_process_image_missing_visibility(self, mediapipe_backend):
        """Test that a landmark without visibility gets score 1.0."""
        landmarks = [SimpleNamespace(x=0.5, y=0.5, visibility=None) for _ in range(33)]
        backend = mediapipe_backend([landmarks])

        pose = backend.process_image(np.zeros((100, 200, 3), dtype=np.uint8))

        assert all(kp.score == 1.0 for kp in pose.keypoints)
        assert pose.keypoints[0].x == pytest.approx(100.0)

    def test_process_image_no_pose(self, mediapipe_backend):
        """Test that an image without a person gives None."""
        backend = mediapipe_backend([])
        assert backend.process_image(np.zeros((480, 640, 3), dtype=np.uint8)) is None
