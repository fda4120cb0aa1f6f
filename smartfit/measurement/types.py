"""Data types for body measurement estimation."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator

from smartfit.pose.base import MIN_KEYPOINT_SCORE

# Ratio of frame height used when Height cannot be measured
HEIGHT_FALLBACK_RATIO = 0.01
# Replacement for the ratio above, selectable via EstimatorConfig
CORRECTED_HEIGHT_FALLBACK_RATIO = 0.7


class Measurement(Enum):
    """Body measurements produced by the estimator, in display order."""
    HEIGHT = "Height"
    SHOULDER_WIDTH = "Shoulder Width"
    CHEST = "Chest"
    WAIST = "Waist"
    HIPS = "Hips"
    ARM_LENGTH = "Arm Length"
    LEG_LENGTH = "Leg Length"


@dataclass(frozen=True)
class Frame:
    """
    Dimensions of a captured image.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
    """
    width: int
    height: int

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Frame dimensions must be positive, got {self.width}x{self.height}"
            )

    def to_dict(self) -> Dict[str, int]:
        """Convert to dictionary."""
        return {"width": self.width, "height": self.height}


@dataclass(frozen=True)
class MeasurementValue:
    """
    A single measurement result.

    Attributes:
        centimeters: Measurement rounded to whole centimeters.
        is_estimated_fallback: True if derived from image proportions
            instead of detected landmarks.
    """
    centimeters: int
    is_estimated_fallback: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "centimeters": self.centimeters,
            "is_estimated_fallback": self.is_estimated_fallback,
        }


@dataclass
class MeasurementSet:
    """
    Estimated measurements for one image.

    Every Measurement is always present; values that could not be
    measured from landmarks are flagged as estimated fallbacks.
    """
    values: Dict[Measurement, MeasurementValue]

    def __post_init__(self):
        missing = [m.value for m in Measurement if m not in self.values]
        if missing:
            raise ValueError(f"MeasurementSet is missing: {', '.join(missing)}")

    def __getitem__(self, key: Measurement) -> MeasurementValue:
        return self.values[key]

    def __iter__(self) -> Iterator[Measurement]:
        return (m for m in Measurement)

    def __len__(self) -> int:
        return len(self.values)

    def items(self):
        """Measurements and values in display order."""
        return [(m, self.values[m]) for m in Measurement]

    @property
    def fallback_count(self) -> int:
        """Number of measurements that fell back to image proportions."""
        return sum(1 for v in self.values.values() if v.is_estimated_fallback)

    @property
    def all_measured(self) -> bool:
        """Whether every measurement was derived from landmarks."""
        return self.fallback_count == 0

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """Convert to the canonical numeric form keyed by measurement name."""
        return {m.value: v.to_dict() for m, v in self.items()}

    def to_display_dict(self) -> Dict[str, str]:
        """Convert to a name -> formatted string record, e.g. {"Height": "172 cm"}."""
        from smartfit.measurement.formatting import format_measurement

        return {m.value: format_measurement(v) for m, v in self.items()}


@dataclass(frozen=True)
class EstimatorConfig:
    """
    Tunable constants for the measurement estimator.

    Attributes:
        min_keypoint_score: Keypoints at or below this score are ignored.
        default_pixel_to_cm: Scale used when calibration is unavailable.
        reference_torso_cm: Assumed vertical shoulder-to-hip span of an adult.
        min_pixel_to_cm: Calibrated scales at or below this are rejected.
        max_pixel_to_cm: Calibrated scales at or above this are rejected.
        corrected_height_fallback: Use CORRECTED_HEIGHT_FALLBACK_RATIO instead
            of HEIGHT_FALLBACK_RATIO when Height falls back.
    """
    min_keypoint_score: float = MIN_KEYPOINT_SCORE
    default_pixel_to_cm: float = 0.12
    reference_torso_cm: float = 45.0
    min_pixel_to_cm: float = 0.05
    max_pixel_to_cm: float = 0.3
    corrected_height_fallback: bool = False

    @property
    def height_fallback_ratio(self) -> float:
        """Fraction of frame height reported when Height falls back."""
        if self.corrected_height_fallback:
            return CORRECTED_HEIGHT_FALLBACK_RATIO
        return HEIGHT_FALLBACK_RATIO

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EstimatorConfig":
        """Create a config from a dictionary, ignoring unknown keys."""
        known = {k: v for k, v in (data or {}).items() if k in cls.__dataclass_fields__}
        return cls(**known)
