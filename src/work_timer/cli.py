#!/usr/bin/env python3
"""Work/break timer CLI.

Usage:
    work-timer start                      # Run the interactive timer (p pause, q quit)
    work-timer today                      # Totals for today
    work-timer lastxdays 7                # Per-day totals for the last 7 days
    work-timer lastxdays 7 --sum          # Summed totals for the last 7 days
    work-timer range 2024-06-01 2024-06-10
"""

from __future__ import annotations

import logging
from datetime import datetime

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .aggregate import (
    DayBucket,
    aggregate_last_x_days,
    aggregate_range,
    aggregate_today,
    sum_buckets,
)
from .clock import SystemClock
from .config import Settings
from .driver import TickDriver
from .engine import TimerEngine, format_hms
from .errors import ClockError, InvalidRangeError, MissingHomeDirectoryError, PersistenceError
from .history import HistoryRecord, HistoryStore
from .terminal import LiveRenderer, RawKeyboard

logger = logging.getLogger("work_timer")

console = Console()
err_console = Console(stderr=True)

DATE_FORMATS = ["%Y-%m-%d"]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(format="%(asctime)s | %(levelname)s | %(message)s")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _report(message: str) -> None:
    err_console.print(f"[red]Error: {escape(message)}[/red]", soft_wrap=True)


def _format_pair(work_seconds: int, pause_seconds: int) -> str:
    return f"Work: {format_hms(work_seconds)}  Play: {format_hms(pause_seconds)}"


def _print_days(buckets: list[DayBucket], total: bool = False) -> None:
    """Print per-day totals as a table, optionally with a total row."""
    table = Table(show_header=True, header_style="bold cyan", box=None)
    table.add_column("Date")
    table.add_column("Work", justify="right")
    table.add_column("Play", justify="right")

    for bucket in buckets:
        table.add_row(bucket.day.isoformat(), format_hms(bucket.work_seconds), format_hms(bucket.pause_seconds))

    if total:
        work_total, pause_total = sum_buckets(buckets)
        table.add_row("Total", format_hms(work_total), format_hms(pause_total), style="bold")

    console.print(table)


def _load_records(ctx: click.Context) -> list[HistoryRecord]:
    """Read every valid record, exiting with status 1 if the file is unusable."""
    settings: Settings = ctx.obj["settings"]
    try:
        store = HistoryStore(settings.history_path())
        result = store.read_all()
    except (MissingHomeDirectoryError, PersistenceError) as exc:
        _report(str(exc))
        ctx.exit(1)

    if result.errors:
        logger.warning("Skipped %d corrupt row(s) in %s", len(result.errors), store.path)
    return result.records


def _open_store_for_timer(settings: Settings) -> HistoryStore | None:
    try:
        store = HistoryStore(settings.history_path())
    except MissingHomeDirectoryError as exc:
        _report(f"{exc}; this session will not be saved")
        return None

    try:
        store.ensure_initialized()
    except PersistenceError as exc:
        _report(str(exc))
    return store


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--data-file",
    type=click.Path(),
    default=None,
    help="History file (defaults to $WORK_TIMER_DATA_FILE or ~/.timer_data).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging on stderr.")
@click.pass_context
def cli(ctx: click.Context, data_file: str | None, verbose: bool) -> None:
    """Track work and break time from the terminal."""
    settings = Settings.from_env(data_file=data_file, verbose=verbose)
    _configure_logging(settings.verbose)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


@cli.command()
@click.option("--pause-key", default=None, help="Key that toggles pause (default: p).")
@click.option("--quit-key", default=None, help="Key that ends the session (default: q).")
@click.pass_context
def start(ctx: click.Context, pause_key: str | None, quit_key: str | None) -> None:
    """Run the interactive timer and save the session on quit."""
    settings: Settings = ctx.obj["settings"]
    if pause_key is not None:
        settings.pause_key = pause_key
    if quit_key is not None:
        settings.quit_key = quit_key
    settings.validate()

    store = _open_store_for_timer(settings)
    keyboard = RawKeyboard(pause_key=settings.pause_key, quit_key=settings.quit_key)

    try:
        with LiveRenderer(console, pause_key=settings.pause_key, quit_key=settings.quit_key) as renderer:
            driver = TickDriver(
                TimerEngine(),
                SystemClock(),
                renderer,
                keyboard,
                store=store,
                period=settings.tick_seconds,
            )
            outcome = driver.run()
    except ClockError as exc:
        err_console.print(f"[red]Fatal: {escape(str(exc))}[/red]", soft_wrap=True)
        ctx.exit(1)

    snapshot = outcome.snapshot
    if outcome.error is not None:
        _report(f"session not saved: {outcome.error}")
    elif outcome.saved:
        console.print(f"[dim]Session saved to {escape(str(store.path))}[/dim]")
    console.print(_format_pair(snapshot.work_seconds, snapshot.pause_seconds))


@cli.command()
@click.pass_context
def today(ctx: click.Context) -> None:
    """Show today's totals."""
    bucket = aggregate_today(_load_records(ctx))
    console.print(_format_pair(bucket.work_seconds, bucket.pause_seconds))


@cli.command(name="lastxdays")
@click.argument("days", type=click.IntRange(min=1))
@click.option("--sum", "show_sum", is_flag=True, help="Print one summed pair instead of per-day rows.")
@click.pass_context
def last_x_days(ctx: click.Context, days: int, show_sum: bool) -> None:
    """Show totals for the last DAYS days, today included."""
    buckets = aggregate_last_x_days(_load_records(ctx), days)
    if show_sum:
        console.print(_format_pair(*sum_buckets(buckets)))
        return
    _print_days(buckets)


@cli.command(name="range")
@click.argument("start_date", metavar="START", type=click.DateTime(formats=DATE_FORMATS))
@click.argument("end_date", metavar="END", type=click.DateTime(formats=DATE_FORMATS))
@click.pass_context
def date_range(ctx: click.Context, start_date: datetime, end_date: datetime) -> None:
    """Show per-day totals from START to END (YYYY-MM-DD, inclusive)."""
    records = _load_records(ctx)
    try:
        buckets = aggregate_range(records, start_date.date(), end_date.date())
    except InvalidRangeError as exc:
        _report(str(exc))
        ctx.exit(1)

    _print_days(list(buckets.values()), total=True)


def main() -> None:
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
