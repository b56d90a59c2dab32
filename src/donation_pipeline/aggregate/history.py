"""Year-over-year donation view.

Runs one Collector pass per year and reduces each year's donations to its
per-method breakdown. The per-year collections are independent, so they are
fanned out as Dask delayed tasks on the threaded scheduler.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Sequence, cast

import pandas as pd
from dask import compute, delayed  # type: ignore[attr-defined]

from donation_pipeline.aggregate.summarize import summarize
from donation_pipeline.collect.collector import collect
from donation_pipeline.collect.store import DonationStore
from donation_pipeline.models import Donation

log = logging.getLogger(__name__)

HISTORY_COLUMNS = ["year", "method", "amount"]


def collect_years(
    store: DonationStore,
    org_id: str | None,
    years: Iterable[str | int],
    timeout: float | None = None,
) -> dict[str, list[Donation]]:
    """Collect donations for several years.

    Args:
        store: Store answering channel queries.
        org_id: Authenticated organization id.
        years: Years to collect; duplicates are collapsed.
        timeout: Per-channel fetch timeout passed to each Collector run.

    Returns:
        Mapping of year (as string) to that year's donations, in the order
        the years were given.
    """
    keys = list(dict.fromkeys(str(y) for y in years))
    if not org_id or not keys:
        return {k: [] for k in keys}

    log.info("Collecting %d years for %s", len(keys), org_id)
    tasks = [delayed(collect)(store, org_id, year, timeout) for year in keys]
    # dask ships no stubs for `compute`
    results = cast(Any, compute)(*tasks, scheduler="threads")
    return dict(zip(keys, results))


def yearly_breakdown(donations_by_year: Mapping[str, Sequence[Donation]]) -> pd.DataFrame:
    """Return per-year, per-method amounts.

    Crypto is included, as in the single-year breakdown.

    Returns:
        pandas.DataFrame with columns `year`, `method`, `amount`; years
        without donations contribute no rows.
    """
    rows: list[dict[str, Any]] = []
    for year, donations in donations_by_year.items():
        for entry in summarize(donations).breakdown:
            rows.append({"year": str(year), "method": entry.method, "amount": entry.amount})
    return pd.DataFrame(rows, columns=HISTORY_COLUMNS)
