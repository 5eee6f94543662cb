"""Merge per-project parts-list spreadsheets into one deduplicated list."""

__version__ = "0.1.0"
