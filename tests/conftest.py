"""Shared test fixtures for measurement tests."""
import pytest

from smartfit.measurement.types import Frame
from smartfit.pose.base import KeypointData, PoseBackend, PoseResult


def make_pose(points, score=0.9):
    """Build a PoseResult from {name: (x, y)} or {name: (x, y, score)}."""
    keypoints = []
    for name, values in points.items():
        if len(values) == 3:
            x, y, s = values
        else:
            (x, y), s = values, score
        keypoints.append(KeypointData(name=name, x=x, y=y, score=s))
    return PoseResult(keypoints=keypoints, model_name="test")


@pytest.fixture
def frame():
    """A 640x480 frame."""
    return Frame(width=640, height=480)


@pytest.fixture
def torso_pose():
    """Shoulders and hips only; torso span of 200px."""
    return make_pose({
        "left_shoulder": (100, 200),
        "right_shoulder": (200, 200),
        "left_hip": (110, 400),
        "right_hip": (190, 400),
    })


@pytest.fixture
def full_pose():
    """A standing person with every standard keypoint visible."""
    return make_pose({
        "nose": (320, 60),
        "left_shoulder": (270, 150),
        "right_shoulder": (370, 150),
        "left_elbow": (250, 250),
        "right_elbow": (390, 250),
        "left_wrist": (240, 340),
        "right_wrist": (400, 340),
        "left_hip": (285, 350),
        "right_hip": (355, 350),
        "left_knee": (285, 470),
        "right_knee": (355, 470),
        "left_ankle": (285, 590),
        "right_ankle": (355, 590),
    })


@pytest.fixture
def tall_frame():
    """A portrait frame large enough to contain full_pose."""
    return Frame(width=640, height=640)


@pytest.fixture
def pose_factory():
    """Factory building a PoseResult from {name: (x, y[, score])}."""
    return make_pose


class FakeBackend(PoseBackend):
    """Backend returning a preset pose for every image."""

    def __init__(self, pose=None):
        super().__init__()
        self.pose = pose
        self.calls = 0
        self.cleaned_up = False

    @property
    def name(self):
        return "fake"

    @property
    def keypoint_names(self):
        return list(self.STANDARD_KEYPOINTS)

    def initialize(self):
        self._is_initialized = True

    def process_image(self, image):
        self.calls += 1
        return self.pose

    def cleanup(self):
        super().cleanup()
        self.cleaned_up = True


@pytest.fixture
def fake_backend():
    """Factory for a backend that returns a fixed pose."""
    return FakeBackend
