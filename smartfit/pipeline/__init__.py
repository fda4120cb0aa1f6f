"""Pipeline module for measuring people in images."""

from smartfit.pipeline.orchestrator import MeasurementPipeline, MeasurementReport, PipelineConfig

__all__ = ["MeasurementPipeline", "MeasurementReport", "PipelineConfig"]
