from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping

import typer

from services.runner import CorrelationRun
from services.writer import format_pair


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_pairs(pairs: Mapping[Any, Any]) -> None:
    for a_id, b_id in pairs.items():
        typer.echo(format_pair(a_id, b_id))


def echo_errors(label: str, errors: Iterable[Dict[str, Any]]) -> None:
    for error in errors:
        typer.secho(
            f"  - {label} row {error.get('row_number')}: {error.get('reason')}",
            fg=typer.colors.YELLOW,
        )


def render_run(run: CorrelationRun) -> None:
    typer.echo(f"Sensor correlation completed. Results saved to {run.output_path}")
    if run.errors_a or run.errors_b:
        echo_heading("Skipped Rows")
        echo_errors("CSV", [error.model_dump() for error in run.errors_a])
        echo_errors("JSON", [error.model_dump() for error in run.errors_b])
    typer.echo("Correlated Sensors:")
    echo_pairs(run.mapping)


def render_response(payload: Dict[str, Any]) -> None:
    echo_heading("Correlation Result")
    typer.echo(f"threshold_m: {payload.get('threshold_m')}")
    typer.echo(f"match_count: {payload.get('match_count')}")
    errors_a = payload.get("errors_a") or []
    errors_b = payload.get("errors_b") or []
    if errors_a or errors_b:
        typer.echo()
        echo_heading("Skipped Rows")
        echo_errors("CSV", errors_a)
        echo_errors("JSON", errors_b)
    typer.echo()
    typer.echo("Correlated Sensors:")
    pairs = payload.get("pairs") or {}
    if pairs:
        echo_pairs(pairs)
    else:
        typer.echo("No correlated sensors.")
