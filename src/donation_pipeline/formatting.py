"""Presentation conventions shared by the CLI and the dashboard.

Currency amounts get a thousands separator and the currency glyph; crypto
amounts are token counts and are shown as bare numbers.
"""
from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Iterable

import pandas as pd

from donation_pipeline.models import Donation, PaymentMethod, TopDonor

DEFAULT_CURRENCY = "₹"
NO_DATE = "No date"
TABLE_ROWS = 5

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}")


def format_number(amount: float) -> str:
    """Thousands-separated number; at most two decimals, none when integral."""
    if float(amount).is_integer():
        return f"{int(amount):,}"
    return f"{amount:,.2f}".rstrip("0").rstrip(".")


def format_amount(amount: float, method: PaymentMethod | str, symbol: str = DEFAULT_CURRENCY) -> str:
    """Render `amount` for `method`: bare number for crypto, currency otherwise."""
    if str(getattr(method, "value", method)) == PaymentMethod.CRYPTO.value:
        return format_number(amount)
    return f"{symbol}{format_number(amount)}"


def _epoch_millis_date(value: str) -> str | None:
    try:
        millis = int(value)
    except ValueError:
        return None
    try:
        return datetime.fromtimestamp(millis / 1000, tz=timezone.utc).strftime("%Y-%m-%d")
    except (OverflowError, OSError, ValueError):
        return None


def format_date_value(value: Any) -> str | None:
    """Return `YYYY-MM-DD` for datetimes and ISO-8601 strings.

    Other non-empty strings are returned as stored; empty values give None.
    """
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d")
    if not isinstance(value, str) or not value:
        return None
    if not ISO_DATE_RE.match(value):
        return value
    parsed = pd.to_datetime(value, errors="coerce", format="ISO8601")
    return value if pd.isna(parsed) else parsed.strftime("%Y-%m-%d")


def display_date(donation: Donation) -> str:
    """Return the donation's date as `YYYY-MM-DD`.

    Falls back to reading online and crypto document ids as epoch
    milliseconds, which is how those channels have recorded the date.
    Unparseable date strings are shown as stored.
    """
    formatted = format_date_value(donation.date)
    if formatted is not None:
        return formatted

    if donation.payment_method in (PaymentMethod.ONLINE, PaymentMethod.CRYPTO):
        from_id = _epoch_millis_date(donation.id)
        if from_id is not None:
            return from_id
    return NO_DATE


def recent_rows(
    donations: Iterable[Donation],
    limit: int = TABLE_ROWS,
    symbol: str = DEFAULT_CURRENCY,
) -> list[dict[str, str]]:
    """Rows for a per-channel table: the first `limit` donations as collected."""
    rows: list[dict[str, str]] = []
    for d in donations:
        if len(rows) >= limit:
            break
        amount_label = "Tokens" if d.payment_method is PaymentMethod.CRYPTO else "Amount"
        rows.append(
            {
                "Name": d.name,
                amount_label: format_amount(d.amount, d.payment_method, symbol),
                "Date": display_date(d),
                "Method": d.payment_method.value,
            }
        )
    return rows


def top_donor_rows(donors: Iterable[TopDonor], symbol: str = DEFAULT_CURRENCY) -> list[dict[str, str]]:
    """Rows for the top donors table; top donors are never crypto."""
    return [
        {
            "Name": d.name,
            "Amount": f"{symbol}{format_number(d.amount)}",
            "Date": format_date_value(d.date) or NO_DATE,
        }
        for d in donors
    ]
