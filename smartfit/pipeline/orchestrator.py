"""Pipeline orchestrator for measuring people in images."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from tqdm import tqdm

from smartfit.measurement.estimator import estimate
from smartfit.measurement.framing import check_pose_fit
from smartfit.measurement.types import EstimatorConfig, Frame, MeasurementSet
from smartfit.pose.base import PoseBackend, PoseResult
from smartfit.pose.mediapipe_backend import MediaPipeBackend
from smartfit.utils.image_utils import DEFAULT_IMAGE_PATTERNS, find_images, frame_from_image, load_image
from smartfit.utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class PipelineConfig:
    """
    Configuration for the measurement pipeline.

    Attributes:
        pose_backend: Pose estimation backend name.
        min_detection_confidence: Minimum confidence for pose detection.
        model_complexity: Pose model complexity (0=lite, 1=full, 2=heavy).
        model_dir: Directory for downloaded pose models (None for default cache).
        image_patterns: Glob patterns used when measuring a directory.
        estimator: Constants for the measurement estimator.
        output_dir: Directory that exports go to when no output path is given
            (None to export only on request).
    """
    pose_backend: str = "mediapipe"
    min_detection_confidence: float = 0.5
    model_complexity: int = 1
    model_dir: Optional[str] = None
    image_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_IMAGE_PATTERNS))
    estimator: EstimatorConfig = field(default_factory=EstimatorConfig)
    output_dir: Optional[str] = None

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any]) -> "PipelineConfig":
        """
        Build a config from the parsed YAML configuration.

        Args:
            cfg: Dictionary with optional "pose", "estimator" and "output" sections.
        """
        pose_cfg = cfg.get("pose") or {}
        output_cfg = cfg.get("output") or {}
        return cls(
            pose_backend=pose_cfg.get("default_backend", "mediapipe"),
            min_detection_confidence=pose_cfg.get("min_detection_confidence", 0.5),
            model_complexity=pose_cfg.get("model_complexity", 1),
            model_dir=pose_cfg.get("model_dir"),
            image_patterns=pose_cfg.get("image_patterns", list(DEFAULT_IMAGE_PATTERNS)),
            estimator=EstimatorConfig.from_dict(cfg.get("estimator") or {}),
            output_dir=output_cfg.get("dir"),
        )


@dataclass
class MeasurementReport:
    """
    Measurements for a single image.

    Attributes:
        source: Image path or other identifier of the input.
        frame: Image dimensions.
        pose_detected: Whether the detector found a person.
        fits_guide: Whether the person stands inside the capture guide.
        measurements: Estimated measurements.
    """
    source: str
    frame: Frame
    pose_detected: bool
    fits_guide: bool
    measurements: MeasurementSet

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "source": self.source,
            "frame": self.frame.to_dict(),
            "pose_detected": self.pose_detected,
            "fits_guide": self.fits_guide,
            "measurements": self.measurements.to_dict(),
            "display": self.measurements.to_display_dict(),
        }


@dataclass
class PipelineProgress:
    """
    Track progress of a directory run.

    Attributes:
        total_images: Number of images found.
        measured: Number of images measured.
        fully_measured: Images where no measurement fell back.
        no_pose: Images where no person was detected.
        failed: Number of images that could not be processed.
        errors: Error messages for failed images.
    """
    total_images: int = 0
    measured: int = 0
    fully_measured: int = 0
    no_pose: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total_images": self.total_images,
            "measured": self.measured,
            "fully_measured": self.fully_measured,
            "no_pose": self.no_pose,
            "failed": self.failed,
            "error_count": len(self.errors),
        }


class MeasurementPipeline:
    """
    Image to measurements pipeline.

    Runs pose detection on each image, then the measurement estimator.
    The pose backend is created lazily so pre-computed keypoints can be
    measured without loading a model.
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        pose_backend: Optional[PoseBackend] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            config: Pipeline configuration. Uses defaults if not provided.
            pose_backend: Backend to use instead of the configured one.
        """
        self.config = config or PipelineConfig()
        self.progress = PipelineProgress()
        self._pose_backend = pose_backend

    @property
    def pose_backend(self) -> PoseBackend:
        """Get or create the pose estimation backend."""
        if self._pose_backend is None:
            if self.config.pose_backend == "mediapipe":
                self._pose_backend = MediaPipeBackend(
                    min_detection_confidence=self.config.min_detection_confidence,
                    model_complexity=self.config.model_complexity,
                    model_dir=self.config.model_dir,
                )
            else:
                raise ValueError(f"Unknown pose backend: {self.config.pose_backend}")
            self._pose_backend.initialize()
        return self._pose_backend

    def measure_pose(
        self,
        frame: Frame,
        pose: Optional[PoseResult],
        source: str = "",
    ) -> MeasurementReport:
        """
        Measure a pre-computed pose.

        Args:
            frame: Image dimensions.
            pose: Detected pose, or None.
            source: Identifier of the input for the report.

        Returns:
            MeasurementReport for the pose.
        """
        measurements = estimate(frame, pose, self.config.estimator)
        return MeasurementReport(
            source=source,
            frame=frame,
            pose_detected=pose is not None and not pose.is_empty,
            fits_guide=check_pose_fit(pose, frame, self.config.estimator.min_keypoint_score),
            measurements=measurements,
        )

    def measure_image(self, image_path: Union[str, Path]) -> MeasurementReport:
        """
        Detect the pose in an image file and measure it.

        Args:
            image_path: Path to the image.

        Returns:
            MeasurementReport for the image.
        """
        image = load_image(image_path)
        frame = frame_from_image(image)
        pose = self.pose_backend.process_image(image)

        if pose is None:
            logger.warning(f"No pose detected in {image_path}, using image-proportion estimates")

        return self.measure_pose(frame, pose, source=str(image_path))

    def measure_directory(
        self,
        directory: Union[str, Path],
        show_progress: bool = True,
    ) -> List[MeasurementReport]:
        """
        Measure every image in a directory.

        Failures are logged and counted; they do not stop the run.

        Args:
            directory: Directory containing images.
            show_progress: Whether to show a progress bar.

        Returns:
            Reports for the images that were processed.
        """
        self.progress = PipelineProgress()
        images = find_images(directory, self.config.image_patterns)
        self.progress.total_images = len(images)

        logger.info(f"Measuring {len(images)} images in {directory}")

        reports = []
        for image_path in tqdm(images, desc="Measuring images", disable=not show_progress):
            try:
                report = self.measure_image(image_path)
            except Exception as e:
                self.progress.failed += 1
                self.progress.errors.append(f"{image_path}: {e}")
                logger.error(f"Error measuring {image_path}: {e}")
                continue

            reports.append(report)
            self.progress.measured += 1
            if not report.pose_detected:
                self.progress.no_pose += 1
            elif report.measurements.all_measured:
                self.progress.fully_measured += 1

        logger.info(
            f"Measured {self.progress.measured}/{self.progress.total_images} images, "
            f"{self.progress.fully_measured} fully measured, {self.progress.failed} failed"
        )
        return reports

    def cleanup(self) -> None:
        """Clean up resources."""
        if self._pose_backend:
            self._pose_backend.cleanup()

        logger.debug("Pipeline resources cleaned up")

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.cleanup()
        return False
