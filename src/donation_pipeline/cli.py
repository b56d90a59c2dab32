"""Command-line interface for donation reports.

Provides subcommands: `report` and `history`. Each command is implemented as
a `cmd_*` function that accepts an argparse namespace.
"""
from __future__ import annotations

import argparse
import json
import logging
from datetime import date
from pathlib import Path

from dotenv import load_dotenv

from donation_pipeline.config import get_settings
from donation_pipeline.logging_config import configure_logging
from donation_pipeline.db import db_from_settings
from donation_pipeline.formatting import format_amount, format_number, recent_rows
from donation_pipeline.models import CHANNEL_ORDER
from donation_pipeline.collect.store import (
    DonationStore,
    DonationStoreError,
    MongoDonationStore,
    SnapshotDonationStore,
)
from donation_pipeline.aggregate.history import collect_years, yearly_breakdown
from donation_pipeline.report import build_report

log = logging.getLogger(__name__)


# --------------------------------------------------
# Helpers
# --------------------------------------------------
def _store(args: argparse.Namespace) -> DonationStore:
    """Return the snapshot store when `--snapshot` is given, else MongoDB."""
    if args.snapshot is not None:
        try:
            return SnapshotDonationStore.from_json(args.snapshot)
        except DonationStoreError as e:
            raise SystemExit(str(e)) from e
    s = get_settings()
    return MongoDonationStore(db_from_settings(s), max_time_ms=int(s.fetch_timeout * 1000))


def _org_id(args: argparse.Namespace) -> str | None:
    return args.org_id or get_settings().org_id


# --------------------------------------------------
# REPORT
# --------------------------------------------------
def cmd_report(args: argparse.Namespace) -> None:
    """Print the donation report for one organization and year.

    Args:
        args: argparse namespace with `org_id`, `year`, `snapshot`, `json`.
    """
    s = get_settings()
    report = build_report(_store(args), _org_id(args), args.year, timeout=s.fetch_timeout)

    if args.json:
        payload = report.stats.model_dump(mode="json", by_alias=True)
        payload["degraded"] = report.degraded
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    symbol = s.currency_symbol
    print(f"Donations for {report.org_id or '-'} in {report.year}")
    print(f"Total (excluding crypto): {symbol}{format_number(report.stats.total)}")
    print("Breakdown:")
    for entry in report.stats.breakdown:
        print(f"  {entry.method:<8} {format_amount(entry.amount, entry.method, symbol)}")
    print("Top donors:")
    for i, donor in enumerate(report.stats.top_donors, start=1):
        print(f"  {i}. {donor.name or '-'}  {symbol}{format_number(donor.amount)}")
    for method in CHANNEL_ORDER:
        donations = report.channel(method)
        print(f"{method.value} donations ({len(donations)}):")
        for row in recent_rows(donations, symbol=symbol):
            print("  " + "  ".join(row.values()))
    if report.degraded:
        print(f"WARNING: incomplete data, failed channels: {', '.join(report.failed_channels)}")


# --------------------------------------------------
# HISTORY
# --------------------------------------------------
def cmd_history(args: argparse.Namespace) -> None:
    """Print per-year, per-method amounts for the requested years."""
    s = get_settings()
    by_year = collect_years(_store(args), _org_id(args), args.years, timeout=s.fetch_timeout)
    frame = yearly_breakdown(by_year)
    log.info("History rows: %d across %d years", len(frame), len(by_year))

    if frame.empty:
        print("No donations found.")
        return
    table = frame.pivot_table(index="year", columns="method", values="amount", aggfunc="sum", sort=False)
    print(table.fillna(0).to_string())


# --------------------------------------------------
# CLI
# --------------------------------------------------
def build_parser() -> argparse.ArgumentParser:
    """Build and return the top-level argument parser for the CLI.

    Returns:
        Configured argparse.ArgumentParser instance.
    """
    p = argparse.ArgumentParser(prog="donation_pipeline")
    sub = p.add_subparsers(dest="cmd", required=True)
    this_year = str(date.today().year)

    p_report = sub.add_parser("report")
    p_report.add_argument("--org-id", default=None)
    p_report.add_argument("--year", default=this_year)
    p_report.add_argument("--snapshot", type=Path, default=None)
    p_report.add_argument("--json", action="store_true")

    p_history = sub.add_parser("history")
    p_history.add_argument("--org-id", default=None)
    p_history.add_argument("--years", nargs="+", default=[this_year])
    p_history.add_argument("--snapshot", type=Path, default=None)

    return p


def main(argv: list[str] | None = None) -> None:
    """CLI entry point: parse args, configure logging and dispatch commands."""
    load_dotenv()
    configure_logging(Path("logs/donations.log"))

    args = build_parser().parse_args(argv)

    if args.cmd == "report":
        cmd_report(args)
    elif args.cmd == "history":
        cmd_history(args)
    else:
        raise SystemExit(2)


if __name__ == "__main__":
    main()
