from __future__ import annotations

from datetime import date

import altair as alt
import pandas as pd
import streamlit as st

from donation_pipeline.aggregate.history import collect_years, yearly_breakdown
from donation_pipeline.collect.store import MongoDonationStore
from donation_pipeline.config import get_settings
from donation_pipeline.db import db_from_settings
from donation_pipeline.formatting import format_amount, format_number, recent_rows, top_donor_rows
from donation_pipeline.models import DonationReport, PaymentMethod
from donation_pipeline.report import build_report

# =====================================================
# Page config
# =====================================================
st.set_page_config(page_title="NGO Donation Reports", layout="wide")
st.title("💰 Donation Reports")

COLORS = ["#0088FE", "#00C49F", "#FFBB28", "#FF8042"]
HISTORY_YEARS = 5

try:
    settings = get_settings()
except RuntimeError as exc:
    st.error(str(exc))
    st.stop()

SYMBOL = settings.currency_symbol
ORG_ID = settings.org_id

# =====================================================
# Data access (cached; each refresh is one full collection)
# =====================================================
@st.cache_resource
def get_store() -> MongoDonationStore:
    """Return one MongoDB-backed store per server process."""
    return MongoDonationStore(
        db_from_settings(settings),
        max_time_ms=int(settings.fetch_timeout * 1000),
    )


@st.cache_data(ttl=settings.cache_ttl_seconds, show_spinner="Loading donations...")
def load_report(org_id: str | None, year: str) -> DonationReport:
    """Collect and summarize donations for the signed-in NGO."""
    return build_report(get_store(), org_id, year, timeout=settings.fetch_timeout)


@st.cache_data(ttl=settings.cache_ttl_seconds, show_spinner=False)
def load_history(org_id: str | None, years: tuple[str, ...]) -> pd.DataFrame:
    """Per-year, per-method amounts for the year-over-year chart."""
    return yearly_breakdown(
        collect_years(get_store(), org_id, years, timeout=settings.fetch_timeout)
    )


def channel_table(title: str, method: PaymentMethod, report: DonationReport) -> None:
    """Display the first rows of one channel's donations."""
    st.subheader(title)
    rows = recent_rows(report.channel(method), symbol=SYMBOL)
    if not rows:
        st.info(f"No {method.value.lower()} donations recorded.")
        return
    st.dataframe(pd.DataFrame(rows), hide_index=True, width="stretch")

# =====================================================
# Sidebar
# =====================================================
this_year = date.today().year
year = st.sidebar.selectbox(
    "Year",
    [str(y) for y in range(this_year, this_year - HISTORY_YEARS, -1)],
    index=0,
)

if not ORG_ID:
    st.info("Sign in as an NGO (set `NGO_ID` in `.env`) to see its donations.")

report = load_report(ORG_ID, year)

if report.degraded:
    st.warning(
        "Some donation channels could not be loaded "
        f"({', '.join(report.failed_channels)}); figures below are incomplete."
    )

# =====================================================
# SECTION 1 — DONATION OVERVIEW
# =====================================================
st.header("📌 Donation Overview")
st.metric("Total Donations", f"{SYMBOL}{format_number(report.stats.total)}")
st.caption("Crypto donations are token counts and are excluded from the total.")

left, right = st.columns(2)

with left:
    st.subheader("Donation Breakdown")
    breakdown = pd.DataFrame(
        [
            {"Method": e.method, "Amount": format_amount(e.amount, e.method, SYMBOL)}
            for e in report.stats.breakdown
        ],
        columns=["Method", "Amount"],
    )
    st.dataframe(breakdown, hide_index=True, width="stretch")

with right:
    st.subheader("Donation Methods")
    df_pie = pd.DataFrame(
        [
            {"method": e.method, "amount": e.amount}
            for e in report.stats.breakdown
            if e.method != PaymentMethod.CRYPTO.value
        ],
        columns=["method", "amount"],
    )
    if df_pie.empty or df_pie["amount"].sum() == 0:
        st.info("No cash or online donations yet.")
    else:
        pie = (
            alt.Chart(df_pie)
            .mark_arc(outerRadius=110)
            .encode(
                theta=alt.Theta("amount:Q"),
                color=alt.Color("method:N", title="Method", scale=alt.Scale(range=COLORS)),
                tooltip=["method:N", alt.Tooltip("amount:Q", format=",.2f")],
            )
            .properties(height=300)
        )
        st.altair_chart(pie, width="stretch")

st.subheader("Top Donors")
if report.stats.top_donors:
    st.dataframe(
        pd.DataFrame(top_donor_rows(report.stats.top_donors, symbol=SYMBOL)),
        hide_index=True,
        width="stretch",
    )
else:
    st.info("No donors to show.")

st.divider()

# =====================================================
# SECTION 2 — CHANNEL TABLES
# =====================================================
channel_table("Cash Donations", PaymentMethod.CASH, report)
channel_table("UPI Donations", PaymentMethod.ONLINE, report)
channel_table("Cryptocurrency Donations", PaymentMethod.CRYPTO, report)

st.divider()

# =====================================================
# SECTION 3 — YEAR OVER YEAR
# =====================================================
st.header("📈 Year over Year")

years = tuple(str(y) for y in range(this_year - HISTORY_YEARS + 1, this_year + 1))
df_history = load_history(ORG_ID, years)
df_history = df_history[df_history["method"] != PaymentMethod.CRYPTO.value]

if df_history.empty:
    st.info("No donation history available.")
else:
    chart = (
        alt.Chart(df_history)
        .mark_bar()
        .encode(
            x=alt.X("year:O", title="Year"),
            y=alt.Y("amount:Q", title=f"Amount ({SYMBOL})"),
            color=alt.Color("method:N", title="Method", scale=alt.Scale(range=COLORS)),
            tooltip=["year:O", "method:N", alt.Tooltip("amount:Q", format=",.2f")],
        )
        .properties(height=320)
    )
    st.altair_chart(chart, width="stretch")

# =====================================================
# Footer
# =====================================================
st.caption("NGO-Connect • MongoDB • Streamlit • Donation Reports")
