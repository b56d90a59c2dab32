"""Build the dashboard report for one organization and year.

Runs the Collector once, then the Summarizer once over its complete output,
and keeps the per-channel lists the dashboard tables show.
"""
from __future__ import annotations

import logging
import threading

from donation_pipeline.aggregate.summarize import split_by_channel, summarize
from donation_pipeline.collect.collector import collect_channels
from donation_pipeline.collect.store import DonationStore
from donation_pipeline.models import DonationReport, PaymentMethod

log = logging.getLogger(__name__)


def build_report(
    store: DonationStore,
    org_id: str | None,
    year: str | int,
    timeout: float | None = None,
    cancel: threading.Event | None = None,
) -> DonationReport:
    """Collect and summarize donations for `org_id` in `year`.

    Args:
        store: Store answering channel queries.
        org_id: Authenticated organization id; None yields an empty report.
        year: Report year.
        timeout: Per-channel fetch timeout in seconds.
        cancel: Optional event that abandons the collection when set.

    Returns:
        A frozen `DonationReport`; `degraded` is set when a channel failed.
    """
    collected = collect_channels(store, org_id, year, timeout=timeout, cancel=cancel)
    by_channel = split_by_channel(collected.donations)
    report = DonationReport(
        org_id=org_id,
        year=str(year),
        stats=summarize(collected.donations),
        cash=tuple(by_channel[PaymentMethod.CASH]),
        online=tuple(by_channel[PaymentMethod.ONLINE]),
        crypto=tuple(by_channel[PaymentMethod.CRYPTO]),
        failed_channels=tuple(collected.failed_channels),
    )
    if report.degraded:
        log.warning("Report for %s/%s is incomplete: %s", org_id, year, ", ".join(report.failed_channels))
    return report
