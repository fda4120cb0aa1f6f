"""Image loading utilities."""

import logging
from pathlib import Path
from typing import List, Sequence, Union

import cv2
import numpy as np

from smartfit.measurement.types import Frame

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_PATTERNS = ["*.jpg", "*.jpeg", "*.png", "*.bmp", "*.webp"]


def load_image(image_path: Union[str, Path]) -> np.ndarray:
    """
    Read an image from disk in BGR format.

    Args:
        image_path: Path to the image file.

    Returns:
        Image array of shape (H, W, 3).

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file cannot be decoded as an image.
    """
    image_path = Path(image_path)
    if not image_path.exists():
        raise FileNotFoundError(f"Image not found: {image_path}")

    image = cv2.imread(str(image_path), cv2.IMREAD_COLOR)
    if image is None:
        raise ValueError(f"Could not read image: {image_path}")

    return image


def frame_from_image(image: np.ndarray) -> Frame:
    """Get the Frame dimensions of an image array."""
    h, w = image.shape[:2]
    return Frame(width=int(w), height=int(h))


def find_images(
    directory: Union[str, Path],
    patterns: Sequence[str] = DEFAULT_IMAGE_PATTERNS,
) -> List[Path]:
    """
    List image files in a directory, sorted by name.

    Args:
        directory: Directory to search (not recursive).
        patterns: Glob patterns of files to include.

    Returns:
        Sorted list of unique image paths.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise NotADirectoryError(f"Not a directory: {directory}")

    found = set()
    for pattern in patterns:
        found.update(p for p in directory.glob(pattern) if p.is_file())

    images = sorted(found)
    logger.debug(f"Found {len(images)} images in {directory}")
    return images
