"""
Base protocol for scrape sources.
"""

from typing import Protocol

from casual_records.sources.stream import ScrapeStream


class ScrapeSource(Protocol):
    """
    Protocol for sources of records (local folders, mailboxes, APIs, ...).

    scrape() returns a ScrapeStream whose single background task walks the
    origin. Per-item errors are emitted as items and do not end the walk;
    only a fatal error does, and it is emitted once before completion.
    """

    @property
    def name(self) -> str:
        """Name/identifier of this source."""
        ...

    def scrape(self) -> ScrapeStream:
        """Start walking the origin; iterate the returned stream for items."""
        ...
