"""Summarizer stage: donation statistics for the dashboard.

Functions in this module are pure: they take the Collector's output and
build pandas frames and frozen models from it without any I/O.

Expectations:
- Input: donations in Collector order (cash, online, crypto).
- `total` and `top_donors` exclude crypto; `breakdown` includes it, so
  crypto token counts sit next to currency amounts in that view.
"""
from __future__ import annotations

from typing import Iterable, Sequence

import pandas as pd

from donation_pipeline.models import (
    CHANNEL_ORDER,
    OTHER_METHOD,
    BreakdownEntry,
    Donation,
    DonationStats,
    PaymentMethod,
    TopDonor,
)

TOP_DONORS = 3

FRAME_COLUMNS = ["id", "name", "amount", "method"]


def donations_frame(donations: Iterable[Donation]) -> pd.DataFrame:
    """Return one row per donation, indexed by input position.

    Args:
        donations: Collected donations.

    Returns:
        pandas.DataFrame with columns `id`, `name`, `amount` (float) and
        `method` (payment method label, "Other" when absent).
    """
    rows = [
        {
            "id": d.id,
            "name": d.name,
            "amount": d.amount,
            "method": d.payment_method.value if d.payment_method else None,
        }
        for d in donations
    ]
    pdf = pd.DataFrame(rows, columns=FRAME_COLUMNS)
    pdf["amount"] = pd.to_numeric(pdf["amount"], errors="coerce").fillna(0.0).astype(float)
    pdf["method"] = pdf["method"].fillna(OTHER_METHOD)
    return pdf


def _total(pdf: pd.DataFrame) -> float:
    return float(pdf.loc[pdf["method"] != PaymentMethod.CRYPTO.value, "amount"].sum())


def _breakdown(pdf: pd.DataFrame) -> tuple[BreakdownEntry, ...]:
    # sort=False keeps first-occurrence order of each method
    sums = pdf.groupby("method", sort=False)["amount"].sum()
    return tuple(BreakdownEntry(method=str(m), amount=float(a)) for m, a in sums.items())


def _top_donors(pdf: pd.DataFrame, donations: Sequence[Donation], n: int) -> tuple[TopDonor, ...]:
    eligible = pdf[pdf["method"] != PaymentMethod.CRYPTO.value]
    top = eligible.sort_values("amount", ascending=False, kind="stable").head(n)
    return tuple(
        TopDonor(name=donations[pos].name, amount=float(amount), date=donations[pos].date)
        for pos, amount in top["amount"].items()
    )


def summarize(donations: Sequence[Donation], top_n: int = TOP_DONORS) -> DonationStats:
    """Compute the headline total, per-method breakdown and top donors.

    Args:
        donations: Collected donations; amounts are already coerced.
        top_n: Number of top donations to keep (default 3).

    Returns:
        A frozen `DonationStats`. Ties in amount keep their input order.
    """
    donations = list(donations)
    pdf = donations_frame(donations)
    return DonationStats(
        total=_total(pdf),
        breakdown=_breakdown(pdf),
        top_donors=_top_donors(pdf, donations, top_n),
    )


def split_by_channel(donations: Iterable[Donation]) -> dict[PaymentMethod, list[Donation]]:
    """Group donations into per-channel lists, preserving input order."""
    out: dict[PaymentMethod, list[Donation]] = {m: [] for m in CHANNEL_ORDER}
    for d in donations:
        out[d.payment_method].append(d)
    return out
