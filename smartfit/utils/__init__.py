"""Utility modules for the SmartFit measurement system."""

from smartfit.utils.logging_config import setup_logging, get_logger
from smartfit.utils.image_utils import find_images, frame_from_image, load_image

__all__ = [
    "setup_logging",
    "get_logger",
    "find_images",
    "frame_from_image",
    "load_image",
]
