"""Collector stage: gather one organization's donations for one year.

Each channel is fetched in full across all organizations and filtered
locally by storage path. The three fetches run concurrently and must all
finish (or fail, or time out) before the result is assembled.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ALL_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field

from donation_pipeline.collect.store import DonationStore, DonationStoreError
from donation_pipeline.models import CHANNEL_ORDER, Donation, PaymentMethod
from donation_pipeline.paths import matches_scope

log = logging.getLogger(__name__)

# how often a cancellable collection checks its cancel event
CANCEL_POLL_SECONDS = 0.05


@dataclass(frozen=True)
class CollectionResult:
    """Donations collected for one (org, year) plus the channels that failed.

    Attributes:
        donations: Cash, then online, then crypto donations, store order
            preserved within each channel.
        failed_channels: Channel names whose fetch errored or timed out.
    """
    donations: list[Donation] = field(default_factory=list)
    failed_channels: list[str] = field(default_factory=list)


def _channel_donations(
    store: DonationStore,
    method: PaymentMethod,
    org_id: str,
    year: str,
) -> list[Donation]:
    """Fetch `method`'s channel and keep the documents in scope."""
    docs = store.fetch_channel(method.channel)
    kept: list[Donation] = []

    for doc in docs:
        if not matches_scope(doc.path, org_id, year, method.channel):
            continue
        kept.append(Donation.from_document(doc, method))

    log.info("%s: %d of %d documents belong to %s/%s", method.channel, len(kept), len(docs), org_id, year)
    return kept


def _wait_all(
    pending: set[Future[list[Donation]]],
    timeout: float | None,
    cancel: threading.Event | None,
) -> bool:
    """Wait for every future, the deadline, or cancellation.

    Returns:
        False if `cancel` was set before the wait finished.
    """
    deadline = None if timeout is None else time.monotonic() + timeout
    while pending:
        if cancel is not None and cancel.is_set():
            return False
        remaining = None if deadline is None else deadline - time.monotonic()
        if remaining is not None and remaining <= 0:
            break
        step = remaining
        if cancel is not None:
            step = CANCEL_POLL_SECONDS if remaining is None else min(remaining, CANCEL_POLL_SECONDS)
        _, pending = wait(pending, timeout=step, return_when=ALL_COMPLETED)
    return not (cancel is not None and cancel.is_set())


def collect_channels(
    store: DonationStore,
    org_id: str | None,
    year: str | int,
    timeout: float | None = None,
    cancel: threading.Event | None = None,
) -> CollectionResult:
    """Collect the donations of `org_id` for `year` from every channel.

    Args:
        store: Store answering cross-organization channel queries.
        org_id: Authenticated organization id; falsy means nobody is
            signed in and nothing is collected.
        year: Year segment of the storage path.
        timeout: Upper bound in seconds for each channel fetch.
        cancel: Set it to abandon the run; late results are discarded.

    Returns:
        A `CollectionResult`. Store errors and timeouts are logged and
        reported in `failed_channels`; they are never raised.
    """
    if not org_id:
        log.info("No authenticated organization; nothing to collect.")
        return CollectionResult()

    year = str(year)
    executor = ThreadPoolExecutor(max_workers=len(CHANNEL_ORDER), thread_name_prefix="collect")
    try:
        futures = {
            method: executor.submit(_channel_donations, store, method, org_id, year)
            for method in CHANNEL_ORDER
        }
        finished = _wait_all(set(futures.values()), timeout, cancel)
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    if not finished:
        log.info("Collection for %s/%s cancelled; discarding in-flight fetches.", org_id, year)
        return CollectionResult()

    result = CollectionResult()
    for method, future in futures.items():
        if not future.done():
            log.warning("Fetching %s donations timed out after %ss; abandoning it.", method.channel, timeout)
            result.failed_channels.append(method.channel)
            continue
        try:
            result.donations.extend(future.result())
        except DonationStoreError as e:
            log.warning("Fetching %s donations failed: %s", method.channel, e)
            result.failed_channels.append(method.channel)
        except Exception:
            log.exception("Unexpected error fetching %s donations", method.channel)
            result.failed_channels.append(method.channel)

    log.info(
        "Collected %d donations for %s/%s (failed channels: %s)",
        len(result.donations),
        org_id,
        year,
        ", ".join(result.failed_channels) or "none",
    )
    return result


def collect(
    store: DonationStore,
    org_id: str | None,
    year: str | int,
    timeout: float | None = None,
    cancel: threading.Event | None = None,
) -> list[Donation]:
    """Return the donations of `org_id` for `year`; see `collect_channels`."""
    return collect_channels(store, org_id, year, timeout=timeout, cancel=cancel).donations
