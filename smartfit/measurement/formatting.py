"""Presentation helpers for measurement results."""

import json
import logging
from pathlib import Path
from typing import Union

from smartfit.measurement.types import MeasurementSet, MeasurementValue

logger = logging.getLogger(__name__)

DEFAULT_EXPORT_FILENAME = "smartfit-measurements.json"
ESTIMATED_SUFFIX = " (estimated)"


def format_measurement(value: MeasurementValue) -> str:
    """Format a value as e.g. "172 cm" or "5 cm (estimated)"."""
    text = f"{value.centimeters} cm"
    if value.is_estimated_fallback:
        text += ESTIMATED_SUFFIX
    return text


def export_measurements(
    measurements: MeasurementSet,
    output_path: Union[str, Path] = DEFAULT_EXPORT_FILENAME,
) -> Path:
    """
    Write measurements as a JSON record of formatted strings.

    Args:
        measurements: Measurements to export.
        output_path: Destination file. Parent directories are created.

    Returns:
        Path of the written file.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(measurements.to_display_dict(), f, indent=2)

    logger.info(f"Measurements exported to {output_path}")
    return output_path
