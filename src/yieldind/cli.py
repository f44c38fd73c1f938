import logging
import time
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import click
import duckdb
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .analytics.periods import format_duration, parse_duration
from .core.config import AnalyticsConfig
from .core.use_cases.position_analytics import PositionAnalyticsService
from .orchestration.queries import load_observations
from .orchestration.replay import (
    HARVEST_COLUMNS,
    TRADE_COLUMNS,
    VALUE_COLUMNS,
    replay_harvests,
    replay_trades,
    replay_values,
)
from .storage.results import write_results
from .storage.state_store import InMemoryStateStore, JsonlStateStore

console = Console()
err_console = Console(stderr=True)


class DurationParam(click.ParamType):
    """Click type for "30d", "12h", "1w" or plain seconds."""

    name = "duration"

    def convert(self, value: Any, param: click.Parameter | None, ctx: click.Context | None) -> int:
        if isinstance(value, int):
            return value
        try:
            return parse_duration(value)
        except ValueError as e:
            self.fail(str(e), param, ctx)


class DecimalParam(click.ParamType):
    name = "decimal"

    def convert(self, value: Any, param: click.Parameter | None, ctx: click.Context | None) -> Decimal:
        if isinstance(value, Decimal):
            return value
        try:
            return Decimal(str(value))
        except InvalidOperation:
            self.fail(f"{value!r} is not a decimal number", param, ctx)


DURATION = DurationParam()
DECIMAL = DecimalParam()

input_argument = click.argument("input_path", metavar="INPUT")
state_dir_option = click.option(
    "--state-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for the JSONL state journal (resumes previous runs); in-memory when omitted",
)
out_option = click.option(
    "--out",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Optional Parquet file for the final per-subject results",
)


def _make_service(config: AnalyticsConfig) -> PositionAnalyticsService:
    repository = JsonlStateStore(config.state_dir) if config.state_dir is not None else InMemoryStateStore()
    return PositionAnalyticsService(repository, config)


def _fmt(value: object) -> str:
    if isinstance(value, Decimal):
        return f"{value:,.6f}"
    return str(value)


def _print_results(title: str, rows: list[dict[str, Any]]) -> None:
    if not rows:
        console.print(f"[yellow]no rows[/] for {title}")
        return
    table = Table(title=title)
    for name in rows[0]:
        table.add_column(name, justify="left" if name == "subject" else "right")
    for row in rows:
        table.add_row(*(_fmt(v) for v in row.values()))
    console.print(table)


def _finish(title: str, rows: list[dict[str, Any]], out: Path | None, n_obs: int, t0: float) -> None:
    _print_results(title, rows)
    if out is not None:
        write_results(rows, out)
        console.print(f"[bold]wrote[/]: {out}")
    console.print(f"[bold]done[/]: {n_obs} observations • {len(rows)} subjects • {time.time() - t0:.2f}s")


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
)
def cli(log_level: str) -> None:
    """YieldInd: PnL, APR and daily averages for DeFi positions."""
    root = logging.getLogger()
    root.setLevel(log_level.upper())
    if not any(isinstance(h, RichHandler) for h in root.handlers):
        root.addHandler(RichHandler(console=err_console, show_path=False))


@cli.command("pnl")
@input_argument
@click.option("--current-price", type=DECIMAL, default=None, help="Mark price for unrealized PnL (default: per-row or trade price)")
@click.option("--strict/--no-strict", default=False, show_default=True, help="Fail on sales larger than the shares held")
@state_dir_option
@out_option
def pnl_cmd(
    input_path: str,
    current_price: Decimal | None,
    strict: bool,
    state_dir: Path | None,
    out: Path | None,
) -> None:
    """Replay trades (subject, timestamp, share_delta, price) with FIFO lot accounting."""
    t0 = time.time()
    try:
        service = _make_service(AnalyticsConfig(strict_pnl=strict, state_dir=state_dir))
        frame = load_observations(input_path, TRADE_COLUMNS, optional=("current_price",))
        snapshots = replay_trades(frame, service, current_price=current_price)
    except (ValueError, duckdb.Error) as e:
        raise click.ClickException(str(e)) from e

    _finish("PnL", [s.as_row() for s in snapshots.values()], out, len(frame), t0)


@cli.command("apr")
@input_argument
@click.option("--window", "windows", type=DURATION, multiple=True, help="APR window, e.g. 1d, 7d, 30d; repeat for several")
@click.option("--now", type=int, default=None, help="Evaluate the final APRs at this unix timestamp")
@state_dir_option
@out_option
def apr_cmd(
    input_path: str,
    windows: tuple[int, ...],
    now: int | None,
    state_dir: Path | None,
    out: Path | None,
) -> None:
    """Replay collects (subject, timestamp, collected_amount, total_value_locked) into windowed APRs."""
    t0 = time.time()
    try:
        config = AnalyticsConfig(state_dir=state_dir) if not windows else AnalyticsConfig(apr_windows=windows, state_dir=state_dir)
        service = _make_service(config)
        frame = load_observations(input_path, HARVEST_COLUMNS)
        snapshots = replay_harvests(frame, service, now=now)
    except (ValueError, duckdb.Error) as e:
        raise click.ClickException(str(e)) from e

    labels = ", ".join(format_duration(w) for w in config.apr_windows)
    _finish(f"APR ({labels})", [s.as_row() for s in snapshots.values()], out, len(frame), t0)
    if service.stats.skipped_zero_harvests:
        console.print(f"[yellow]skipped[/]={service.stats.skipped_zero_harvests} zero-amount collects")


@cli.command("daily-avg")
@input_argument
@click.option("--entries", type=int, default=30, show_default=True, help="Closed days kept in the average")
@state_dir_option
@out_option
def daily_avg_cmd(input_path: str, entries: int, state_dir: Path | None, out: Path | None) -> None:
    """Replay samples (subject, timestamp, value) into day-weighted moving averages."""
    t0 = time.time()
    try:
        service = _make_service(AnalyticsConfig(daily_avg_entries=entries, state_dir=state_dir))
        frame = load_observations(input_path, VALUE_COLUMNS)
        snapshots = replay_values(frame, service)
    except (ValueError, duckdb.Error) as e:
        raise click.ClickException(str(e)) from e

    _finish(f"Daily average ({entries} days)", [s.as_row() for s in snapshots.values()], out, len(frame), t0)


if __name__ == "__main__":
    cli()
