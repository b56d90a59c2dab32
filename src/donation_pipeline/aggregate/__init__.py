"""Aggregation helpers.

This package contains routines that turn collected donations into the
statistics the dashboard renders: the headline total, the per-channel
breakdown, the top donors, and the year-over-year view.
"""
