"""
Scrape sources that feed records into ingestion.
"""

from casual_records.sources.base import ScrapeSource
from casual_records.sources.local import LocalDirectorySource, generate_title
from casual_records.sources.stream import ScrapeItem, ScrapeStream

__all__ = [
    "ScrapeSource",
    "ScrapeStream",
    "ScrapeItem",
    "LocalDirectorySource",
    "generate_title",
]
