from decimal import Decimal

import pyarrow.parquet as pq
from click.testing import CliRunner

from yieldind.cli import cli
from yieldind.core.constants import DAY

T0 = 1712707200


def test_pnl_command(write_csv, tmp_path):
    path = write_csv(
        "trades.csv",
        ["subject", "timestamp", "share_delta", "price"],
        [["pos", T0, "2", "10"], ["pos", T0 + 1, "2", "15"], ["pos", T0 + 2, "-3", "20"]],
    )
    out = tmp_path / "pnl.parquet"

    result = CliRunner().invoke(cli, ["pnl", str(path), "--out", str(out)])

    assert result.exit_code == 0, result.output
    assert "PnL" in result.output
    row = pq.read_table(out).to_pylist()[0]
    assert row["subject"] == "pos"
    assert Decimal(row["realized_pnl"]) == Decimal("25")
    assert Decimal(row["unrealized_pnl"]) == Decimal("5")


def test_pnl_strict_fails_on_oversell(write_csv):
    path = write_csv(
        "trades.csv",
        ["subject", "timestamp", "share_delta", "price"],
        [["pos", T0, "1", "10"], ["pos", T0 + 1, "-2", "11"]],
    )
    result = CliRunner().invoke(cli, ["pnl", str(path), "--strict"])

    assert result.exit_code == 1
    assert "cannot sell" in result.output


def test_apr_command_with_windows(write_csv, tmp_path):
    path = write_csv(
        "collects.csv",
        ["subject", "timestamp", "collected_amount", "total_value_locked"],
        [["vault", T0, "10", "1000"], ["vault", T0 + DAY, "10", "1000"], ["vault", T0 + DAY + 60, "0", "1000"]],
    )
    out = tmp_path / "apr.parquet"

    result = CliRunner().invoke(
        cli, ["apr", str(path), "--window", "1d", "--window", "7d", "--now", str(T0 + DAY), "--out", str(out)]
    )

    assert result.exit_code == 0, result.output
    row = pq.read_table(out).to_pylist()[0]
    assert set(row) == {"subject", "now", "apr_1d", "apr_1w"}
    assert abs(Decimal(row["apr_1d"]) - Decimal("3.65")) < Decimal("0.0001")
    assert "skipped" in result.output


def test_apr_rejects_bad_window(write_csv):
    path = write_csv("collects.csv", ["subject", "timestamp", "collected_amount", "total_value_locked"], [])
    result = CliRunner().invoke(cli, ["apr", str(path), "--window", "soon"])
    assert result.exit_code == 2
    assert "Invalid duration" in result.output


def test_daily_avg_command_resumes_from_state_dir(write_csv, tmp_path):
    state_dir = tmp_path / "state"
    first = write_csv("v1.csv", ["subject", "timestamp", "value"], [["pos", T0, "10"]])
    second = write_csv("v2.csv", ["subject", "timestamp", "value"], [["pos", T0 + DAY, "30"], ["pos", T0 + 2 * DAY, "0"]])
    out = tmp_path / "avg.parquet"
    runner = CliRunner()

    assert runner.invoke(cli, ["daily-avg", str(first), "--state-dir", str(state_dir)]).exit_code == 0
    result = runner.invoke(cli, ["daily-avg", str(second), "--state-dir", str(state_dir), "--out", str(out)])

    assert result.exit_code == 0, result.output
    assert (state_dir / "daily_avg.jsonl").is_file()
    row = pq.read_table(out).to_pylist()[0]
    assert Decimal(row["average"]) == Decimal("20")
    assert row["closed_days"] == "2"


def test_missing_column_is_reported(write_csv):
    path = write_csv("values.csv", ["subject", "timestamp"], [["pos", T0]])
    result = CliRunner().invoke(cli, ["daily-avg", str(path)])
    assert result.exit_code == 1
    assert "missing required columns" in result.output


def test_apr_command_with_same_block_collects(write_csv, tmp_path):
    path = write_csv(
        "collects.csv",
        ["subject", "timestamp", "log_index", "collected_amount", "total_value_locked"],
        [
            ["vault", T0, "0", "10", "1000"],
            ["vault", T0 + DAY, "1", "5", "1000"],
            ["vault", T0 + DAY, "2", "5", "1000"],
        ],
    )

    out = tmp_path / "apr.parquet"

    result = CliRunner().invoke(cli, ["apr", str(path), "--window", "1d", "--out", str(out)])

    assert result.exit_code == 0, result.output
    row = pq.read_table(out).to_pylist()[0]
    assert abs(Decimal(row["apr_1d"]) - Decimal("3.65")) < Decimal("0.0001")
