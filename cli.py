#!/usr/bin/env python3
"""Command-line interface for SmartFit body measurement estimation."""

import json
from pathlib import Path
from typing import Optional

import click
import yaml

DEFAULT_CONFIG_PATH = "config/config.yaml"
BATCH_REPORTS_FILENAME = "smartfit-reports.json"


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> dict:
    """Load configuration from YAML file."""
    config_file = Path(config_path)
    if config_file.exists():
        with open(config_file) as f:
            return yaml.safe_load(f) or {}
    return {}


def _setup_logging(ctx: click.Context) -> None:
    from smartfit.utils.logging_config import setup_logging

    cfg = ctx.obj["config"]
    log_cfg = cfg.get("logging") or {}
    log_level = "DEBUG" if ctx.obj["verbose"] else log_cfg.get("level", "WARNING")
    setup_logging(level=log_level, log_file=log_cfg.get("file"))


def _pipeline_config(ctx: click.Context, corrected_height_fallback: bool):
    from dataclasses import replace

    from smartfit.pipeline.orchestrator import PipelineConfig

    pipeline_config = PipelineConfig.from_dict(ctx.obj["config"])
    if corrected_height_fallback:
        pipeline_config.estimator = replace(pipeline_config.estimator, corrected_height_fallback=True)
    return pipeline_config


def _resolve_output(output: Optional[str], pipeline_config, filename: str) -> Optional[Path]:
    """Explicit --output wins; otherwise export into output.dir when configured."""
    if output:
        return Path(output)
    if pipeline_config.output_dir:
        return Path(pipeline_config.output_dir) / filename
    return None


def _echo_report(report, as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        return

    click.echo(f"Image: {report.source or '-'} ({report.frame.width}x{report.frame.height})")
    click.echo(f"Pose detected: {'yes' if report.pose_detected else 'no'}")
    click.echo(f"Body within guide: {'yes' if report.fits_guide else 'no'}")
    click.echo("Measurements:")
    for name, value in report.measurements.to_display_dict().items():
        click.echo(f"  {name}: {value}")


corrected_height_option = click.option(
    "--corrected-height-fallback",
    is_flag=True,
    help="Use a frame-proportional height when height cannot be measured",
)


@click.group()
@click.option(
    "--config",
    "-c",
    default=DEFAULT_CONFIG_PATH,
    help="Path to configuration file",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging",
)
@click.pass_context
def cli(ctx: click.Context, config: str, verbose: bool) -> None:
    """SmartFit Body Measurement System.

    Estimate body measurements from a single photo using
    pose landmarks and anthropometric calibration.
    """
    ctx.ensure_object(dict)
    ctx.obj["config"] = load_config(config)
    ctx.obj["verbose"] = verbose


@cli.command()
@click.argument("image", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    help="Export measurements to a JSON file (default: into output.dir when configured)",
)
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    help="Print the full report as JSON",
)
@corrected_height_option
@click.pass_context
def measure(
    ctx: click.Context,
    image: str,
    output: Optional[str],
    as_json: bool,
    corrected_height_fallback: bool,
) -> None:
    """Detect the pose in IMAGE and estimate measurements."""
    from smartfit.measurement.formatting import export_measurements
    from smartfit.pipeline.orchestrator import MeasurementPipeline

    _setup_logging(ctx)

    pipeline_config = _pipeline_config(ctx, corrected_height_fallback)
    output_path = _resolve_output(output, pipeline_config, f"{Path(image).stem}-measurements.json")

    with MeasurementPipeline(pipeline_config) as pipeline:
        report = pipeline.measure_image(image)

    _echo_report(report, as_json)

    if output_path:
        path = export_measurements(report.measurements, output_path)
        click.echo(f"Saved measurements to {path}", err=True)


@cli.command("measure-keypoints")
@click.argument("keypoints_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--width", "-W", required=True, type=click.IntRange(min=1), help="Image width in pixels")
@click.option("--height", "-H", required=True, type=click.IntRange(min=1), help="Image height in pixels")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    help="Export measurements to a JSON file (default: into output.dir when configured)",
)
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    help="Print the full report as JSON",
)
@corrected_height_option
@click.pass_context
def measure_keypoints(
    ctx: click.Context,
    keypoints_file: str,
    width: int,
    height: int,
    output: Optional[str],
    as_json: bool,
    corrected_height_fallback: bool,
) -> None:
    """Estimate measurements from detector keypoints saved as JSON.

    KEYPOINTS_FILE holds {"keypoints": [{"name", "x", "y", "score"}, ...]}
    in pixel coordinates, a list of such poses (the first one is used),
    or null when no person was detected.
    """
    from smartfit.measurement.formatting import export_measurements
    from smartfit.measurement.types import Frame
    from smartfit.pipeline.orchestrator import MeasurementPipeline
    from smartfit.pose.base import PoseResult

    _setup_logging(ctx)

    try:
        with open(keypoints_file, encoding="utf-8") as f:
            data = json.load(f)
        pose = PoseResult.from_dict(data) if data else None
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        raise click.BadParameter(f"Invalid keypoints file: {e}", param_hint="KEYPOINTS_FILE")

    pipeline_config = _pipeline_config(ctx, corrected_height_fallback)
    output_path = _resolve_output(output, pipeline_config, f"{Path(keypoints_file).stem}-measurements.json")

    pipeline = MeasurementPipeline(pipeline_config)
    report = pipeline.measure_pose(Frame(width=width, height=height), pose, source=keypoints_file)

    _echo_report(report, as_json)

    if output_path:
        path = export_measurements(report.measurements, output_path)
        click.echo(f"Saved measurements to {path}", err=True)


@cli.command()
@click.argument("directory", type=click.Path(exists=True, file_okay=False))
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    help="Write all reports to a JSON file (default: into output.dir when configured)",
)
@corrected_height_option
@click.pass_context
def batch(
    ctx: click.Context,
    directory: str,
    output: Optional[str],
    corrected_height_fallback: bool,
) -> None:
    """Estimate measurements for every image in DIRECTORY."""
    from smartfit.pipeline.orchestrator import MeasurementPipeline

    _setup_logging(ctx)

    pipeline_config = _pipeline_config(ctx, corrected_height_fallback)
    output_path = _resolve_output(output, pipeline_config, BATCH_REPORTS_FILENAME)

    with MeasurementPipeline(pipeline_config) as pipeline:
        reports = pipeline.measure_directory(directory)
        progress = pipeline.progress

    click.echo("Batch Results:")
    click.echo(f"  Images found: {progress.total_images}")
    click.echo(f"  Measured: {progress.measured}")
    click.echo(f"  Fully measured: {progress.fully_measured}")
    click.echo(f"  No pose detected: {progress.no_pose}")
    click.echo(f"  Failed: {progress.failed}")

    if output_path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump([r.to_dict() for r in reports], f, indent=2)
        click.echo(f"Saved {len(reports)} reports to {output_path}")


@cli.command()
@click.pass_context
def version(ctx: click.Context) -> None:
    """Show version information."""
    from smartfit import __version__

    click.echo("SmartFit Body Measurement System")
    click.echo(f"Version: {__version__}")


if __name__ == "__main__":
    cli()
