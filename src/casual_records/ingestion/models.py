"""
Models for scrape-and-ingest results.
"""

from dataclasses import dataclass, field
from typing import List


@dataclass
class SourceSummary:
    """
    Outcome of draining one scrape source.

    Attributes:
        source: Name of the source
        ingested: Records successfully upserted
        failed: Items that produced an error (scrape, extraction or ingest)
        errors: Human-readable error messages, one per failed item
        aborted: True when the source reported a fatal error
    """

    source: str
    ingested: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)
    aborted: bool = False

    def record_failure(self, message: str) -> None:
        self.failed += 1
        self.errors.append(message)


@dataclass
class ScrapeSummary:
    """
    Result of a scrape-and-ingest run over one or more sources.

    Examples:
        >>> summary = ScrapeSummary(sources=[SourceSummary("local", ingested=3, failed=1)])
        >>> summary.ingested, summary.failed, summary.ok
        (3, 1, False)
    """

    sources: List[SourceSummary] = field(default_factory=list)
    timed_out: bool = False

    @property
    def ingested(self) -> int:
        return sum(source.ingested for source in self.sources)

    @property
    def failed(self) -> int:
        return sum(source.failed for source in self.sources)

    @property
    def ok(self) -> bool:
        """True when every item was ingested and the run finished in time."""
        return self.failed == 0 and not self.timed_out
