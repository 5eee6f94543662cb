"""Command line interface (`python -m partslist_merge.cli`)."""

from .__main__ import main

__all__ = ["main"]
