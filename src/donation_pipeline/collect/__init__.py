"""Collection helpers.

Provides the document stores that answer per-channel queries and the
Collector that fans out over the cash, online and crypto channels and keeps
the documents whose storage path belongs to one organization and year.
"""
