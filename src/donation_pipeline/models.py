"""Pydantic models for collected donations and dashboard outputs.

`Donation` is the normalized view of one stored document: field aliases
(`name`/`donorName`, `timestamp`/`donatedOn`) are resolved and the amount is
coerced exactly once, in `Donation.from_document`. The summary models are
frozen and consumed by the CLI and the Streamlit dashboard.
"""

from __future__ import annotations

import math
import numbers
from datetime import date as date_type, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


class PaymentMethod(str, Enum):
    """Donation intake channel, as shown to users."""
    CASH = "Cash"
    ONLINE = "Online"
    CRYPTO = "Crypto"

    @property
    def channel(self) -> str:
        """Collection name the channel is stored under."""
        return self.value.lower()


# Collection order; also the concatenation order of collected donations.
CHANNEL_ORDER: tuple[PaymentMethod, ...] = (
    PaymentMethod.CASH,
    PaymentMethod.ONLINE,
    PaymentMethod.CRYPTO,
)

OTHER_METHOD = "Other"


def coerce_amount(value: Any) -> float:
    """Coerce a stored amount to a float; anything unusable becomes 0.

    Numbers are kept, numeric strings are parsed after trimming, booleans
    count as 1/0. Missing, empty, unparseable, NaN and infinite values all
    become 0.
    """
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return float(value)
    if hasattr(value, "to_decimal"):
        # bson Decimal128
        value = value.to_decimal()
    if isinstance(value, numbers.Number):
        try:
            number = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return 0.0
    elif isinstance(value, str):
        text = value.strip()
        if not text or "_" in text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return 0.0
    else:
        return 0.0
    return number if math.isfinite(number) else 0.0


def _first_present(body: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = body.get(key)
        if value is not None and value != "":
            return value
    return None


def _normalize_date(value: Any) -> datetime | str | None:
    if value is None or isinstance(value, (datetime, str)):
        return value
    if isinstance(value, date_type):
        return datetime.combine(value, datetime.min.time())
    return str(value)


class StoredDocument(BaseModel):
    """A raw document as returned by a channel query.

    Attributes:
        id: Document id within its channel collection.
        path: Full storage path, e.g. `donations/{org}/{year}/{channel}/{id}`.
        body: Stored fields; unknown fields are carried but ignored.
    """
    model_config = ConfigDict(frozen=True)
    id: str
    path: str
    body: dict[str, Any] = Field(default_factory=dict)


class Donation(BaseModel):
    """One donation, normalized at collection time.

    Attributes:
        id: Opaque document id.
        name: Donor display name (`name`, else `donorName`, else "").
        amount: Coerced numeric amount; token count for crypto.
        date: Donation date (`timestamp`, else `donatedOn`) or None.
        payment_method: Channel the document was fetched from.
        path: Storage path of the source document.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")
    id: str
    name: str = ""
    amount: float = 0.0
    date: datetime | str | None = None
    payment_method: PaymentMethod
    path: str = ""

    @field_validator("amount", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> float:
        return coerce_amount(value)

    @field_validator("name", mode="before")
    @classmethod
    def _coerce_name(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @classmethod
    def from_document(cls, document: StoredDocument, method: PaymentMethod) -> Donation:
        """Build a donation from a stored document fetched from `method`'s channel.

        Any `paymentMethod` field in the body is ignored.
        """
        body = document.body
        return cls(
            id=document.id,
            name=_first_present(body, "name", "donorName"),
            amount=body.get("amount"),
            date=_normalize_date(_first_present(body, "timestamp", "donatedOn")),
            payment_method=method,
            path=document.path,
        )


class BreakdownEntry(BaseModel):
    """Per-method amount; crypto entries are token counts."""
    model_config = ConfigDict(frozen=True)
    method: str
    amount: float


class TopDonor(BaseModel):
    """Projection of a single high-amount donation."""
    model_config = ConfigDict(frozen=True)
    name: str
    amount: float
    date: datetime | str | None = None


class DonationStats(BaseModel):
    """Summary statistics rendered by the dashboard.

    `total` excludes crypto while `breakdown` includes it; the two are not
    expected to agree.
    """
    model_config = ConfigDict(frozen=True)
    total: float = 0.0
    breakdown: tuple[BreakdownEntry, ...] = ()
    top_donors: tuple[TopDonor, ...] = Field(default=(), serialization_alias="topDonors")


class DonationReport(BaseModel):
    """Everything the dashboard needs for one organization and year."""
    model_config = ConfigDict(frozen=True)
    org_id: str | None
    year: str
    stats: DonationStats
    cash: tuple[Donation, ...] = ()
    online: tuple[Donation, ...] = ()
    crypto: tuple[Donation, ...] = ()
    failed_channels: tuple[str, ...] = ()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def degraded(self) -> bool:
        """True when at least one channel could not be fetched."""
        return bool(self.failed_channels)

    def channel(self, method: PaymentMethod) -> tuple[Donation, ...]:
        """Return the donations collected from `method`'s channel."""
        return getattr(self, method.channel)
