"""Smoke tests for the CLI entry point."""
from __future__ import annotations

import json

import pandas as pd
import pytest

from lead_insights import __main__
from lead_insights.cli import main


@pytest.fixture()
def config_path(tmp_path):
    (tmp_path / "overview.csv").write_text(
        "Date and Time Stamp,Name,Email Address,Lead Intent,Lead Score\n"
        "2024-03-14 09:00:00,Sarah Jones,sarah.j@email.com,High,85\n"
        "2024-03-01 10:00:00,Tom Brown,tom@example.com,Low,40\n"
        "2024-02-20 10:00:00,Ann Lee,ann@example.com,High,60\n",
        encoding="utf-8",
    )
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps({"tabs": [{"name": "Overview", "source": "overview", "path": "overview.csv"}]}),
        encoding="utf-8",
    )
    return path


def test_cli_writes_overview_envelope(config_path, tmp_path) -> None:
    output_path = tmp_path / "overview.json"

    exit_code = main(
        [
            "overview",
            str(output_path),
            "--config",
            str(config_path),
            "--now",
            "2024-03-15T12:00:00",
            "--days",
            "7",
        ]
    )

    assert exit_code == 0
    envelope = json.loads(output_path.read_text(encoding="utf-8"))
    assert envelope["success"] is True
    assert envelope["timestamp"] == "2024-03-15T12:00:00"
    assert envelope["data"]["totalLeadsCount"] == 3
    assert envelope["data"]["currentMonthCount"] == 2
    assert len(envelope["data"]["timelineData"]) == 7


def test_cli_leads_view_applies_filters(config_path, tmp_path) -> None:
    output_path = tmp_path / "leads.json"

    exit_code = main(
        [
            "leads",
            str(output_path),
            "--config",
            str(config_path),
            "--intent",
            "High",
            "--sort-by",
            "leadScore",
            "--order",
            "asc",
        ]
    )

    assert exit_code == 0
    data = json.loads(output_path.read_text(encoding="utf-8"))["data"]
    assert data["count"] == 2
    assert [lead["name"] for lead in data["leads"]] == ["Ann Lee", "Sarah Jones"]


def test_cli_exports_leads_table(config_path, tmp_path) -> None:
    output_path = tmp_path / "leads.csv"

    exit_code = main(["leads", str(output_path), "--config", str(config_path), "--search", "SARAH"])

    assert exit_code == 0
    frame = pd.read_csv(output_path)
    assert frame["email"].tolist() == ["sarah.j@email.com"]


def test_cli_reports_configuration_errors_as_envelope(tmp_path) -> None:
    output_path = tmp_path / "overview.json"

    exit_code = main(["overview", str(output_path), "--config", str(tmp_path / "missing.json")])

    assert exit_code == 1
    envelope = json.loads(output_path.read_text(encoding="utf-8"))
    assert envelope["success"] is False
    assert envelope["error"] == "Failed to render the overview report"
    assert "missing.json" in envelope["message"]


def test_cli_rejects_invalid_reference_time(config_path, tmp_path) -> None:
    output_path = tmp_path / "stats.json"

    exit_code = main(["stats", str(output_path), "--config", str(config_path), "--now", "yesterday-ish"])

    assert exit_code == 1
    assert json.loads(output_path.read_text(encoding="utf-8"))["success"] is False


def test_module_entry_point_delegates_to_cli(config_path, tmp_path) -> None:
    """The package entry point should behave like the CLI."""

    output_path = tmp_path / "stats.json"

    exit_code = __main__.main(["stats", str(output_path), "--config", str(config_path), "--now", "2024-03-15"])

    assert exit_code == 0
    data = json.loads(output_path.read_text(encoding="utf-8"))["data"]
    assert data["stats"]["total"] == 3
    assert data["metrics"]["monthLeads"] == 2


def test_module_entry_point_without_arguments_shows_help(capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = __main__.main([])

    captured = capsys.readouterr()
    assert "python -m lead_insights" in captured.out
    assert exit_code == 2
