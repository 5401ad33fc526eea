"""Command-line interface for Reciperfect.

Responsibilities:
- Expose the watch service, one-off file processing, and config inspection.
- Convert config files, `config.env` files, and CLI overrides into `ReciperfectConfig`.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Annotated

import typer

from .cli_rendering import echo_config_summary, echo_result_summary, exit_with_command_error
from .config import ConfigLoader, ReciperfectConfig
from .errors import PipelineStageError
from .pipeline.service import WatchService, build_file_processor
from .telemetry.logger import RunLogger

app = typer.Typer(
    name="reciperfect",
    no_args_is_help=True,
    help="Reciperfect recipe translation and narration service.",
)

ConfigFileOption = Annotated[
    Path | None,
    typer.Option("--config", help="Path to YAML config file."),
]
EnvFileOption = Annotated[
    Path | None,
    typer.Option("--env-file", help="Path to a `config.env` file; process env wins."),
]
UploadDirOption = Annotated[
    Path | None,
    typer.Option("--upload-dir", help="Watched upload directory (overrides config)."),
]


class StageProgressIndicator:
    """Render deterministic per-stage progress lines for one processed file."""

    _SPINNER_FRAMES = "|/-\\"

    def __init__(self, command_name: str) -> None:
        """Initialize progress indicator metadata for a command invocation."""

        self._command_name = command_name

    def on_stage_start(self, stage_name: str, stage_index: int, stage_total: int) -> None:
        """Print one progress line for a stage start transition."""

        spinner = self._SPINNER_FRAMES[(stage_index - 1) % len(self._SPINNER_FRAMES)]
        typer.echo(
            f"[progress] command={self._command_name} "
            f"{spinner} {stage_index}/{stage_total} stage={stage_name}"
        )


def _load_config(
    config_file: Path | None,
    env_file: Path | None,
    upload_dir: Path | None,
    *,
    require_upload_dir: bool = False,
) -> ReciperfectConfig:
    """Resolve effective config and map loader failures to stage errors."""

    source = config_file if config_file is not None else env_file
    try:
        if config_file is not None:
            config = ConfigLoader.from_yaml(config_file)
        elif env_file is not None:
            config = ConfigLoader.from_env_file(env_file)
        else:
            config = ConfigLoader.from_env()
        if upload_dir is not None:
            config = replace(config, upload_dir=upload_dir)
        config.validate(require_upload_dir=require_upload_dir)
        return config
    except FileNotFoundError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Config file not found: `{source}`.",
            hint="Provide an existing path via `--config` or `--env-file`.",
        ) from exc
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Invalid configuration: {exc}",
            hint="Set the `RECIPERFECT_*` settings or fix the config file and rerun.",
        ) from exc
    except Exception as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Failed to load configuration: {exc}",
            hint="Verify config file syntax and permissions.",
        ) from exc


@app.command("watch")
def watch_command(
    config_file: ConfigFileOption = None,
    env_file: EnvFileOption = None,
    upload_dir: UploadDirOption = None,
    ignore_existing: Annotated[
        bool,
        typer.Option(
            "--ignore-existing",
            help="Skip files already present in the upload directory at startup.",
        ),
    ] = False,
) -> None:
    """Watch the upload directory and process added files one at a time."""

    try:
        config = _load_config(config_file, env_file, upload_dir, require_upload_dir=True)
        service = WatchService(
            config,
            run_logger=RunLogger(),
            ignore_initial=ignore_existing,
        )
    except Exception as exc:
        exit_with_command_error("watch", exc)

    typer.echo(f"Listening for files on {config.upload_dir}")
    service.run_forever()


@app.command("process")
def process_command(
    source: Annotated[Path, typer.Argument(help="Path to a scanned recipe file.")],
    config_file: ConfigFileOption = None,
    env_file: EnvFileOption = None,
    upload_dir: UploadDirOption = None,
) -> None:
    """Process one file immediately and publish its manifest."""

    try:
        config = _load_config(config_file, env_file, upload_dir)
        progress = StageProgressIndicator(command_name="process")
        processor = build_file_processor(
            config,
            run_logger=RunLogger(),
            stage_progress_callback=progress.on_stage_start,
        )
        result = processor.process(source)
    except Exception as exc:
        exit_with_command_error("process", exc)

    echo_result_summary(result)


@app.command("check-config")
def check_config_command(
    config_file: ConfigFileOption = None,
    env_file: EnvFileOption = None,
    upload_dir: UploadDirOption = None,
) -> None:
    """Validate configuration and print resolved non-secret settings."""

    try:
        config = _load_config(config_file, env_file, upload_dir, require_upload_dir=True)
    except Exception as exc:
        exit_with_command_error("check-config", exc)

    echo_config_summary(config.as_summary())


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
