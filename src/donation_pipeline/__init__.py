"""donation_pipeline package.

Contains modules for collecting an NGO's cash, online and crypto donation
documents from MongoDB, summarizing them into dashboard statistics, and
utilities for serving a Streamlit dashboard.

Architecture:
- Collector: per-channel fan-in reads filtered by storage path
- Summarizer: pandas aggregation into total / breakdown / top donors
- Pydantic models normalize documents and freeze the outputs
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
