"""CLI for subgraph-validate."""

from typing import List, Optional

import typer
from rich.text import Text

from . import config, pipeline, report, utils
from .config import Config
from .ingest import IngestMode
from .report import RunSummary

app = typer.Typer(help="Validate subgraph schemas")
config_app = typer.Typer(help="Configuration file operations")
app.add_typer(config_app, name="config")


@app.command("validate")
def validate_cmd(
    schemas: List[str] = typer.Argument(..., help="Subgraph schemas to validate"),
    batch: bool = typer.Option(
        False,
        "--batch",
        "-b",
        help="Validate schemas in bulk; input files are JSONL with an `id` and a `schema` per line",
    ),
    api: bool = typer.Option(False, "--api", help="Also derive and validate the API schema"),
    spec_version: Optional[str] = typer.Option(None, help="Spec version whose rules apply"),
    config_file: Optional[str] = typer.Option(None, "--config", help="Config file path"),
    debug: bool = typer.Option(False, "--debug", help="Show tracebacks for fatal errors"),
):
    """Validate subgraph schemas by parsing them into input (and API) schemas."""
    try:
        cfg = config.for_run(config.load(config_file), spec_version)
        mode = IngestMode.BATCH if batch else IngestMode.SINGLE
        summary = run_validate(schemas, mode, cfg, api)
        report.emit_summary(summary)
    except Exception as e:
        report.error(str(e))
        if debug:
            raise
        raise typer.Exit(1)


def run_validate(paths: List[str], mode: IngestMode, cfg: Config, api: bool = False) -> RunSummary:
    """
    Validate every schema in `paths`, reporting as it goes.

    Schemas are processed strictly in file order, then line order. A
    schema failing validation never stops the run; an ingestion error does.

    Args:
        paths: Input files
        mode: How to read each file
        cfg: Run configuration
        api: Also derive the API schema

    Returns:
        RunSummary of all reported outcomes

    Raises:
        IngestionError: If a file is unreadable or a batch record malformed
    """
    summary = RunSummary()
    for path in paths:
        report.header(mode, path)
        for source in mode.read(path, cfg.batch_label_prefix):
            outcome = pipeline.run(source, cfg, api)
            report.emit(outcome)
            summary.record(outcome)
    return summary


@config_app.command("init")
def config_init(
    path: Optional[str] = typer.Option(None, help="Where to write the config file"),
    force: bool = typer.Option(False, help="Overwrite an existing file"),
):
    """Write an example config file."""
    target = path or config.get_default_config_path()
    if utils.exists(target) and not force:
        report.error(f"{target} already exists, use --force to overwrite")
        raise typer.Exit(1)
    try:
        written = config.create_example_config(target)
    except OSError as e:
        report.error(str(e))
        raise typer.Exit(1)
    report.console.print(Text(f"Config written to {written}", style="cyan"))


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
