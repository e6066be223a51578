# src/sparkbinding/cli.py
"""sparkbinding Command Line Interface.

Entry point for the sparkbinding CLI tool.
"""

from __future__ import annotations

from pathlib import Path

import typer
import yaml

from sparkbinding import __version__
from sparkbinding.contracts import BindingError, ConfigError
from sparkbinding.core.config import apply_overrides, load_properties, parse_duration, resolve

__all__ = ["app"]

app = typer.Typer(
    name="sparkbinding",
    help="sparkbinding: checkpointed Spark Streaming jobs fed by Kafka.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"sparkbinding version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from .env file.

    Args:
        env_file: Explicit path to .env file. If None, searches for .env
                 in current directory and parent directories.

    Returns:
        True if .env was found and loaded, False otherwise.

    Raises:
        typer.Exit: If explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(
                f"Error: .env file not found: {env_file}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)

    return load_dotenv(override=False)  # Don't override existing env vars


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
        exists=False,  # Existence checked in _load_dotenv for a clearer message
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """sparkbinding: checkpointed Spark Streaming jobs fed by Kafka."""
    from sparkbinding.core.logging import configure_logging

    configure_logging(json_output=json_logs, level="DEBUG" if verbose else "INFO")

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho(
            "Warning: --env-file ignored because --no-dotenv is set.",
            fg=typer.colors.YELLOW,
            err=True,
        )


def _load(config: Path, overrides: list[str] | None) -> dict[str, str]:
    """Load properties and apply overrides, exiting with status 1 on failure."""
    try:
        properties = load_properties(config.expanduser())
        return apply_overrides(properties, overrides or [])
    except FileNotFoundError:
        typer.echo(f"Error: Config file not found: {config}", err=True)
        raise typer.Exit(1) from None
    except yaml.YAMLError as e:
        typer.echo(f"YAML syntax error in {config}: {e}", err=True)
        raise typer.Exit(1) from None
    except ConfigError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(1) from None


@app.command()
def run(
    config: Path = typer.Option(..., "--config", "-c", help="Path to job properties YAML file."),
    overrides: list[str] | None = typer.Option(None, "--set", "-D", help="Override a property: key=value (repeatable)."),
    handler: str | None = typer.Option(
        None,
        "--handler",
        "-H",
        help="Per-batch callback as module:attribute (default: log batch sizes).",
    ),
    create_on_error: bool = typer.Option(
        False,
        "--create-on-error",
        help="Start a new job if the checkpointed job definition is unreadable.",
    ),
) -> None:
    """Create or resume the streaming job and run it until stopped.

    SIGINT/SIGTERM stop the job gracefully; a second Ctrl-C force-kills.
    """
    from sparkbinding.engine import JobLifecycleController, load_batch_handler, log_batch, shutdown_handler
    from sparkbinding.runtime import SparkStreamingRuntime

    properties = _load(config, overrides)

    try:
        batch_handler = load_batch_handler(handler) if handler else log_batch
    except ConfigError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(1) from None

    runtime = SparkStreamingRuntime(batch_handler, create_on_error=create_on_error)
    controller = JobLifecycleController(properties, runtime)

    try:
        with shutdown_handler(controller):
            controller.init()
            controller.await_termination()
    except ConfigError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(1) from None
    except BindingError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    except KeyboardInterrupt:
        # Second Ctrl-C: do not wait for the in-flight micro-batch
        controller.stop(graceful=False)
        raise typer.Exit(130) from None
    finally:
        controller.close()


@app.command()
def checkpoint(
    config: Path = typer.Option(..., "--config", "-c", help="Path to job properties YAML file."),
    overrides: list[str] | None = typer.Option(None, "--set", "-D", help="Override a property: key=value (repeatable)."),
) -> None:
    """Resolve (and create if missing) the job's checkpoint directory and print it."""
    from sparkbinding.core.checkpoint import CheckpointLocator, default_root

    properties = _load(config, overrides)
    try:
        job_config = resolve(properties).unwrap()
        location = CheckpointLocator().resolve(
            default_root(job_config.default_fs),
            job_config.sdc_id,
            job_config.topic,
            job_config.pipeline_name,
        )
    except BindingError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    typer.echo(location.url)


@app.command()
def validate(
    config: Path = typer.Option(..., "--config", "-c", help="Path to job properties YAML file."),
    overrides: list[str] | None = typer.Option(None, "--set", "-D", help="Override a property: key=value (repeatable)."),
) -> None:
    """Validate job properties without touching the filesystem or Spark."""
    from sparkbinding.core.checkpoint import CheckpointLocator, default_root
    from sparkbinding.sources import StreamSourceFactory

    properties = _load(config, overrides)
    try:
        job_config = resolve(properties).unwrap()
        interval_ms = parse_duration(job_config.max_wait_time)
        source = StreamSourceFactory().build(job_config.source_name, job_config)
    except ConfigError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(1) from None

    location = CheckpointLocator().locate(
        default_root(job_config.default_fs),
        job_config.sdc_id,
        job_config.topic,
        job_config.pipeline_name,
    )
    typer.echo("Configuration valid.")
    typer.echo(f"  Source: {source.kind}")
    typer.echo(f"  Brokers: {', '.join(source.brokers)}")
    typer.echo(f"  Topics: {', '.join(source.topics)}")
    typer.echo(f"  Offset reset: {source.offset_reset or '<broker default>'}")
    typer.echo(f"  Batch interval: {interval_ms} ms")
    typer.echo(f"  Checkpoint: {location.url}")


if __name__ == "__main__":
    app()
