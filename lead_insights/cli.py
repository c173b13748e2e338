"""Command line interface for rendering dashboard reports from sheet exports."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

from .analytics import ALL, FilterCriteria, filter_leads, sort_leads
from .config import ConfigurationError, load_configuration
from .ingestion import UnsupportedFileTypeError
from .ingestion.normalizer import parse_timestamp
from .io import is_table_path, write_leads_table, write_report
from .reports import VIEWS, ReportBuilder, error_envelope, success_envelope

LOGGER = logging.getLogger(__name__)


def build_parser(prog: str | None = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=prog,
        description="Aggregate exported lead sheet tabs into dashboard reports",
    )
    parser.add_argument("view", choices=VIEWS, help="Which report to render")
    parser.add_argument(
        "output",
        help="Path where the JSON report is written (the leads view also accepts CSV or XLSX)",
    )
    parser.add_argument(
        "--config",
        required=True,
        help="Path to the tab configuration file (YAML or JSON)",
    )
    parser.add_argument(
        "--days",
        type=int,
        default=None,
        help="Number of days covered by time series (overrides the configuration)",
    )
    parser.add_argument(
        "--now",
        default=None,
        help="Reference time as an ISO 8601 timestamp (defaults to the current time)",
    )

    filters = parser.add_argument_group("leads view filters")
    filters.add_argument("--search", default=None, help="Case-insensitive match on name, email or phone")
    filters.add_argument("--intent", default=ALL, help="Lead intent to keep (High, Low or all)")
    filters.add_argument("--status", default=ALL, help="Lead status to keep")
    filters.add_argument(
        "--source",
        default=ALL,
        help="Source to keep (overview, lead-form, ai-conversation or all)",
    )
    filters.add_argument("--date-from", default=None, help="Keep leads captured at or after this time")
    filters.add_argument("--date-to", default=None, help="Keep leads captured at or before this time")
    filters.add_argument("--sort-by", default="timestamp", help="Lead attribute to sort by")
    filters.add_argument("--order", choices=["asc", "desc"], default="desc", help="Sort direction")

    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (e.g. DEBUG, INFO, WARNING)",
    )
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    try:
        now = _parse_moment(args.now, "--now") or datetime.now()
        config = load_configuration(args.config)
        if args.days is not None:
            if args.days <= 0:
                raise ConfigurationError(f"--days must be a positive integer, got {args.days}")
            config["days"] = args.days
        builder = ReportBuilder.from_config(config)
        if not builder.tabs:
            logging.warning("No tabs are enabled - reports will be empty")

        criteria = FilterCriteria(
            source=args.source,
            intent=args.intent,
            status=args.status,
            date_from=_parse_moment(args.date_from, "--date-from"),
            date_to=_parse_moment(args.date_to, "--date-to"),
            search=args.search,
        )

        if args.view == "leads" and is_table_path(args.output):
            leads = sort_leads(filter_leads(builder.load(), criteria), args.sort_by, args.order)
            write_leads_table(args.output, leads)
            logging.info("Exported %s leads to %s", len(leads), Path(args.output).resolve())
            return 0

        data = builder.render(args.view, now=now, criteria=criteria, sort_by=args.sort_by, order=args.order)
        write_report(args.output, success_envelope(data, now if args.now else None))
    except (ConfigurationError, UnsupportedFileTypeError, ValueError, OSError) as exc:
        LOGGER.error("Failed to render the %s report: %s", args.view, exc)
        _write_failure(args.output, error_envelope(f"Failed to render the {args.view} report", str(exc)))
        return 1

    logging.info("%s report written to %s", args.view, Path(args.output).resolve())
    return 0


def _parse_moment(value: str | None, option: str) -> datetime | None:
    if value is None:
        return None
    moment = parse_timestamp(value)
    if moment is None:
        raise ValueError(f"{option} expects an ISO 8601 timestamp, got {value!r}")
    return moment


def _write_failure(output: str, envelope: dict) -> None:
    if is_table_path(output):
        print(json.dumps(envelope), file=sys.stderr)
        return
    try:
        write_report(output, envelope)
    except (ValueError, OSError):
        print(json.dumps(envelope), file=sys.stderr)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
