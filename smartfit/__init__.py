"""
SmartFit Body Measurement System.

Estimates body measurements (height, shoulder width, chest, waist, hips,
arm length, leg length) from a single image using 2D pose landmarks and
anthropometric calibration heuristics.

Modules are imported on-demand to avoid loading heavy dependencies.
"""

__version__ = "0.1.0"
__author__ = "SmartFit Team"
