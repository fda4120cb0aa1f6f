"""Unit tests for pixel to centimeter calibration."""
import pytest

from smartfit.measurement.calibration import calibration_candidate, derive_pixel_to_cm
from smartfit.measurement.types import EstimatorConfig


class TestCalibrationCandidate:
    """Test conversion of the torso span to a scale."""

    def test_accepted_candidate(self):
        """Test that 200px maps to 45/200 cm per pixel."""
        assert calibration_candidate(200) == pytest.approx(0.225)

    @pytest.mark.parametrize("span", [150, 100, 10])
    def test_too_large_candidate_rejected(self, span):
        """Test that a scale of 0.3 or more falls back to the default."""
        assert calibration_candidate(span) == 0.12

    @pytest.mark.parametrize("span", [900, 1000, 5000])
    def test_too_small_candidate_rejected(self, span):
        """Test that a scale of 0.05 or less falls back to the default."""
        assert calibration_candidate(span) == 0.12

    def test_zero_span_uses_default(self):
        """Test that a degenerate span does not divide by zero."""
        assert calibration_candidate(0) == 0.12

    def test_monotonic_decreasing(self):
        """Test that a larger torso in pixels gives fewer cm per pixel."""
        spans = [160, 200, 300, 450, 600, 850]
        factors = [calibration_candidate(s) for s in spans]

        assert factors == sorted(factors, reverse=True)
        assert len(set(factors)) == len(factors)

    def test_custom_config(self):
        """Test that the reference span and default come from config."""
        config = EstimatorConfig(reference_torso_cm=50.0, default_pixel_to_cm=0.1)

        assert calibration_candidate(250, config) == pytest.approx(0.2)
        assert calibration_candidate(50, config) == 0.1


class TestDerivePixelToCm:
    """Test calibration from a detected pose."""

    def test_uses_left_torso(self, torso_pose):
        """Test calibration from left shoulder and left hip."""
        assert derive_pixel_to_cm(torso_pose) == pytest.approx(0.225)

    def test_ignores_horizontal_offset(self, pose_factory):
        """Test that only the vertical span is used."""
        pose = pose_factory({"left_shoulder": (0, 100), "left_hip": (500, 300)})
        assert derive_pixel_to_cm(pose) == pytest.approx(0.225)

    def test_hip_above_shoulder(self, pose_factory):
        """Test that the absolute vertical span is used."""
        pose = pose_factory({"left_shoulder": (0, 300), "left_hip": (0, 100)})
        assert derive_pixel_to_cm(pose) == pytest.approx(0.225)

    def test_right_side_alone_not_used(self, pose_factory):
        """Test that only the left torso calibrates."""
        pose = pose_factory({"right_shoulder": (0, 100), "right_hip": (0, 300)})
        assert derive_pixel_to_cm(pose) == 0.12

    def test_low_confidence_hip_uses_default(self, pose_factory):
        """Test that an unusable anchor disables calibration."""
        pose = pose_factory({"left_shoulder": (0, 100), "left_hip": (0, 300, 0.2)})
        assert derive_pixel_to_cm(pose) == 0.12

    def test_no_pose(self):
        """Test calibration without a pose."""
        assert derive_pixel_to_cm(None) == 0.12
