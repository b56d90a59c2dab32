"""Storage path parsing for donation documents.

Donation documents live under `donations/{orgId}/{year}/{channel}/...`. The
store is queried per channel across every organization, so the owning
organization and year are recovered from the path and compared segment by
segment.
"""

from __future__ import annotations

from dataclasses import dataclass

ROOT_SEGMENT = "donations"


@dataclass(frozen=True)
class DonationPath:
    """Structured view of a donation document path.

    Attributes:
        org_id: Organization segment following `donations`.
        year: Year segment.
        channel: Channel collection segment (`cash`, `online`, `crypto`).
        doc_id: Trailing document id, when the path names a document.
    """
    org_id: str
    year: str
    channel: str
    doc_id: str | None = None

    @classmethod
    def parse(cls, path: str | None) -> DonationPath | None:
        """Parse `path` into its scope segments.

        Returns:
            A `DonationPath`, or None when the path has no
            `donations/{org}/{year}/{channel}` run of segments.
        """
        if not path:
            return None
        segments = [s for s in str(path).split("/") if s]
        for i, segment in enumerate(segments):
            if segment != ROOT_SEGMENT or len(segments) < i + 4:
                continue
            rest = segments[i + 4 :]
            return cls(
                org_id=segments[i + 1],
                year=segments[i + 2],
                channel=segments[i + 3],
                doc_id=rest[-1] if rest else None,
            )
        return None


def matches_scope(path: str | None, org_id: str, year: str, channel: str) -> bool:
    """Return True when `path` belongs to exactly this org, year and channel."""
    parsed = DonationPath.parse(path)
    if parsed is None:
        return False
    return (
        parsed.org_id == str(org_id)
        and parsed.year == str(year)
        and parsed.channel == channel
    )
