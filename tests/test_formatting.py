from __future__ import annotations

from datetime import datetime

from donation_pipeline.formatting import (
    display_date,
    format_amount,
    format_date_value,
    format_number,
    recent_rows,
    top_donor_rows,
)
from donation_pipeline.models import Donation, PaymentMethod, TopDonor


def test_format_number() -> None:
    assert format_number(1234567) == "1,234,567"
    assert format_number(1234.5) == "1,234.5"
    assert format_number(3.14159) == "3.14"
    assert format_number(0) == "0"


def test_format_amount_currency_except_crypto() -> None:
    assert format_amount(1500, PaymentMethod.CASH) == "₹1,500"
    assert format_amount(1500, "Online", "$") == "$1,500"
    assert format_amount(1500, PaymentMethod.CRYPTO) == "1,500"
    assert format_amount(2.5, "Crypto") == "2.5"


def test_display_date_from_fields() -> None:
    d1 = Donation(id="x", date=datetime(2024, 3, 4, 10, 0), payment_method=PaymentMethod.CASH)
    d2 = Donation(id="x", date="2024-03-05T08:00:00Z", payment_method=PaymentMethod.CASH)
    d3 = Donation(id="x", date="not recorded", payment_method=PaymentMethod.CASH)
    assert display_date(d1) == "2024-03-04"
    assert display_date(d2) == "2024-03-05"
    assert display_date(d3) == "not recorded"


def test_display_date_falls_back_to_id_for_online_and_crypto() -> None:
    # 2024-01-01T00:00:00Z in epoch milliseconds
    online = Donation(id="1704067200000", payment_method=PaymentMethod.ONLINE)
    crypto = Donation(id="1704067200000", payment_method=PaymentMethod.CRYPTO)
    cash = Donation(id="1704067200000", payment_method=PaymentMethod.CASH)
    assert display_date(online) == "2024-01-01"
    assert display_date(crypto) == "2024-01-01"
    assert display_date(cash) == "No date"
    assert display_date(Donation(id="abc", payment_method=PaymentMethod.ONLINE)) == "No date"


def test_recent_rows_limit_and_labels() -> None:
    cash = [Donation(id=str(i), name=f"n{i}", amount=i * 1000, payment_method=PaymentMethod.CASH) for i in range(7)]
    rows = recent_rows(cash)
    assert len(rows) == 5
    assert rows[2] == {"Name": "n2", "Amount": "₹2,000", "Date": "No date", "Method": "Cash"}

    crypto = [Donation(id="k", name="C", amount=3, payment_method=PaymentMethod.CRYPTO)]
    assert recent_rows(crypto)[0]["Tokens"] == "3"


def test_display_date_keeps_keyword_strings() -> None:
    for text in ("now", "today"):
        d = Donation(id="x", date=text, payment_method=PaymentMethod.CASH)
        assert display_date(d) == text


def test_format_date_value() -> None:
    assert format_date_value(datetime(2024, 1, 2)) == "2024-01-02"
    assert format_date_value("2024-01-02T10:00:00+05:30") == "2024-01-02"
    assert format_date_value("2024-99-99") == "2024-99-99"
    assert format_date_value(None) is None
    assert format_date_value("") is None


def test_top_donor_rows_format_dates() -> None:
    donors = [
        TopDonor(name="A", amount=1500, date=datetime(2024, 1, 2)),
        TopDonor(name="B", amount=20.5, date=None),
    ]
    assert top_donor_rows(donors) == [
        {"Name": "A", "Amount": "₹1,500", "Date": "2024-01-02"},
        {"Name": "B", "Amount": "₹20.5", "Date": "No date"},
    ]
