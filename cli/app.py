from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_response, render_run
from logging_config import configure_logging
from services.errors import CorrelatorError
from services.runner import build_default_service


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Correlate geolocated sensor records from a CSV and a JSON source.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


def _check_threshold(threshold: Optional[float]) -> None:
    if threshold is not None and threshold <= 0:
        raise typer.BadParameter("Threshold must be a positive number of metres.")


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Correlator API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="HTTP request timeout in seconds.",
    ),
) -> None:
    """Entry point for the CLI."""
    configure_logging()
    config = load_config(base_url=base_url, request_timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("run")
def run_command(
    data_dir: Optional[Path] = typer.Option(
        None,
        "--data-dir",
        "-d",
        file_okay=False,
        help="Directory holding the input files (defaults to CORRELATOR_DATA_DIR or cwd).",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        dir_okay=False,
        help="Where to write the correlation JSON (defaults to <data-dir>/CorrelatedSensors.json).",
    ),
    threshold: Optional[float] = typer.Option(
        None,
        "--threshold",
        "-t",
        help="Maximum match distance in metres.",
    ),
) -> None:
    """Correlate the local input files and write the result."""
    _check_threshold(threshold)
    service = build_default_service(threshold)
    try:
        run = service.run(data_dir=data_dir, output_path=output)
    except CorrelatorError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc
    render_run(run)


@app.command("submit")
def submit_command(
    ctx: typer.Context,
    csv_file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Path to CSV file."),
    json_file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Path to JSON file."),
    threshold: Optional[float] = typer.Option(
        None,
        "--threshold",
        "-t",
        help="Maximum match distance in metres.",
    ),
) -> None:
    """Send both files to the correlator API and display the result."""
    _check_threshold(threshold)
    state = _get_state(ctx)
    typer.echo(f"Submitting {csv_file} and {json_file} to {state.config.base_url} ...")
    payload = state.client.correlate_files(csv_file, json_file, threshold)
    typer.echo()
    render_response(payload)
