"""Typer CLI for the RCS engine: operator-facing commands."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

import structlog
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from rcs.models import BatchSummary, RcsResult, Submission

app = typer.Typer(
    name="rcs",
    help="DeepRef Reference Credibility Score: scoring, ranking and recalculation.",
    add_completion=False,
)
console = Console()

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _get_settings(
    db_path: Optional[str] = None,
    log_level: Optional[str] = None,
) -> "Settings":  # type: ignore[name-defined]
    from rcs.config import Settings

    overrides: dict = {}
    if db_path:
        overrides["db_path"] = db_path
    if log_level:
        overrides["log_level"] = log_level.upper()
    return Settings(**overrides)  # type: ignore[arg-type]


def _setup_logging(level: str = "INFO", json_fmt: bool = False) -> None:
    numeric = getattr(logging, level.upper(), logging.INFO)
    if json_fmt:
        handler = logging.StreamHandler()
        handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                foreign_pre_chain=[
                    structlog.stdlib.add_log_level,
                    structlog.stdlib.add_logger_name,
                    structlog.stdlib.ExtraAdder(),
                    structlog.processors.TimeStamper(fmt="iso", utc=True),
                    structlog.processors.format_exc_info,
                ],
                processors=[
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    structlog.processors.JSONRenderer(default=str),
                ],
            )
        )
        logging.basicConfig(level=numeric, handlers=[handler], force=True)
    else:
        fmt = "%(asctime)s %(levelname)s %(name)s %(message)s"
        logging.basicConfig(level=numeric, format=fmt)


def _open_db(path: str) -> "Database":  # type: ignore[name-defined]
    from rcs.storage.database import Database

    return Database(path)


def _calculator(cfg, db) -> "RcsCalculator":  # type: ignore[name-defined]
    from rcs.engine import RcsCalculator

    return RcsCalculator.from_settings(cfg, db)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def score(
    reference_id: str = typer.Argument(..., help="Reference id to score."),
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override reference DB path."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw result as JSON."),
) -> None:
    """Score one reference, persist the result and print the breakdown."""
    from rcs.errors import SubmissionNotFound

    cfg = _get_settings(db_path=db_path, log_level=log_level)
    _setup_logging(cfg.log_level, cfg.log_json)
    db = _open_db(cfg.db_path)

    try:
        result = _calculator(cfg, db).score_submission_sync(reference_id)
    except SubmissionNotFound as exc:
        console.print(f"[bold red]{exc}[/]")
        raise typer.Exit(1)
    except Exception as exc:
        console.print(f"[bold red]Fatal: {exc}[/]")
        raise typer.Exit(2)
    finally:
        db.close()

    if as_json:
        console.print_json(result.model_dump_json())
    else:
        _print_result(result)


@app.command()
def recalc(
    requester: Optional[str] = typer.Option(None, "--requester", help="Only rescore this seeker's references."),
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override reference DB path."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level."),
) -> None:
    """Rescore every completed reference in chunks; failures are counted, not fatal."""
    cfg = _get_settings(db_path=db_path, log_level=log_level)
    _setup_logging(cfg.log_level, cfg.log_json)
    db = _open_db(cfg.db_path)

    try:
        summary = _calculator(cfg, db).recalculate_batch_sync(requester)
    except Exception as exc:
        console.print(f"[bold red]Fatal: {exc}[/]")
        raise typer.Exit(2)
    finally:
        db.close()

    _print_summary(summary)
    if summary.failed:
        raise typer.Exit(1)


@app.command()
def stats(
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override reference DB path."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level."),
) -> None:
    """Show store statistics: reference counts, mean score, grade distribution."""
    cfg = _get_settings(db_path=db_path, log_level=log_level)
    _setup_logging(cfg.log_level, cfg.log_json)
    with _open_db(cfg.db_path) as db:
        s = db.get_stats()

    table = Table(title="RCS Reference Stats")
    table.add_column("Metric", style="bold")
    table.add_column("Value")
    for k, v in s.items():
        if isinstance(v, dict):
            v = ", ".join(f"{grade}={n}" for grade, n in sorted(v.items())) or None
        table.add_row(str(k), str(v) if v is not None else "-")
    console.print(table)


@app.command()
def seed(
    count: int = typer.Option(50, "--count", help="Number of synthetic references."),
    rng_seed: Optional[int] = typer.Option(None, "--seed", help="Random seed for reproducibility."),
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override reference DB path."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level."),
) -> None:
    """Insert synthetic references for demos."""
    from rcs.synthetic import SyntheticReferenceGenerator

    cfg = _get_settings(db_path=db_path, log_level=log_level)
    _setup_logging(cfg.log_level, cfg.log_json)
    submissions = SyntheticReferenceGenerator(count=count, seed=rng_seed).generate()
    with _open_db(cfg.db_path) as db:
        for submission in submissions:
            db.upsert_submission(submission)
    console.print(f"[bold green]Seeded {len(submissions)} references[/]")


@app.command(name="import")
def import_file(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON file with a list of references."),
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override reference DB path."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level."),
) -> None:
    """Load references from a JSON array into the store."""
    cfg = _get_settings(db_path=db_path, log_level=log_level)
    _setup_logging(cfg.log_level, cfg.log_json)

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(raw, list):
            raise ValueError("expected a JSON array of references")
        submissions: List[Submission] = [Submission.model_validate(item) for item in raw]
    except (ValueError, ValidationError) as exc:
        console.print(f"[bold red]Invalid input: {exc}[/]")
        raise typer.Exit(2)

    with _open_db(cfg.db_path) as db:
        for submission in submissions:
            db.upsert_submission(submission)
    console.print(f"[bold green]Imported {len(submissions)} references[/]")


@app.command()
def schedule(
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override reference DB path."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level."),
) -> None:
    """Start the APScheduler daemon running periodic batch recalculation."""
    cfg = _get_settings(db_path=db_path, log_level=log_level)
    _setup_logging(cfg.log_level, cfg.log_json)

    from rcs.scheduling.scheduler import RecalcScheduler

    console.print(f"[bold]Starting scheduler[/]  recalc={cfg.recalc_cron!r}")
    scheduler = RecalcScheduler(cfg)
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        console.print("[yellow]Scheduler stopped.[/]")


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _print_result(result: RcsResult) -> None:
    table = Table(title=f"RCS for {result.submission_id}")
    table.add_column("Component", style="bold")
    table.add_column("Score", justify="right")
    table.add_column("Weight", justify="right")
    weights = result.weights.as_dict()
    for name, value in result.breakdown.model_dump().items():
        table.add_row(name, f"{value:.1f}", f"{weights[name]:.2f}")
    console.print(table)
    console.print(
        f"[bold]Overall:[/] {result.overall:.1f}  "
        f"[bold]Grade:[/] {result.grade.value}  "
        f"[bold]Badge:[/] {result.badge.value}  "
        f"[bold]Percentile:[/] {result.percentile}"
    )


def _print_summary(summary: BatchSummary) -> None:
    colour = "green" if not summary.failed else "yellow"
    console.print(
        f"[bold {colour}]Recalculated {summary.total} references[/]  "
        f"updated={summary.updated}  failed={summary.failed}"
    )
    if summary.failures:
        table = Table(title="Failed References")
        table.add_column("Reference", style="bold")
        table.add_column("Reason")
        for failure in summary.failures:
            table.add_row(failure.submission_id, failure.reason)
        console.print(table)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """CLI entry point registered in pyproject.toml."""
    app()


if __name__ == "__main__":
    main()
