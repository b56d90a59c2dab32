from __future__ import annotations

from donation_pipeline.collect.store import DonationStoreError, SnapshotDonationStore
from donation_pipeline.models import PaymentMethod, StoredDocument
from donation_pipeline.report import build_report


def _store() -> SnapshotDonationStore:
    return SnapshotDonationStore({
        "cash": [{"path": "donations/ngo1/2024/cash/c1", "name": "A", "amount": "100"}],
        "online": [{"path": "donations/ngo1/2024/online/o1", "name": "B", "amount": 50}],
        "crypto": [{"path": "donations/ngo1/2024/crypto/k1", "name": "C", "amount": 5}],
    })


class _BrokenCrypto:
    def fetch_channel(self, channel: str) -> list[StoredDocument]:
        if channel == "crypto":
            raise DonationStoreError("network unreachable")
        return _store().fetch_channel(channel)


def test_build_report_matches_channels_and_stats() -> None:
    report = build_report(_store(), "ngo1", 2024)
    assert report.year == "2024"
    assert report.stats.total == 150
    assert [d.id for d in report.cash] == ["c1"]
    assert [d.id for d in report.channel(PaymentMethod.ONLINE)] == ["o1"]
    assert [d.id for d in report.crypto] == ["k1"]
    assert report.degraded is False


def test_build_report_no_user() -> None:
    report = build_report(_store(), None, "2024")
    assert report.stats.total == 0
    assert report.stats.breakdown == ()
    assert report.stats.top_donors == ()
    assert report.cash == report.online == report.crypto == ()


def test_build_report_flags_degraded_data() -> None:
    report = build_report(_BrokenCrypto(), "ngo1", "2024")
    assert report.degraded is True
    assert report.failed_channels == ("crypto",)
    assert report.stats.total == 150
    assert [e.method for e in report.stats.breakdown] == ["Cash", "Online"]
