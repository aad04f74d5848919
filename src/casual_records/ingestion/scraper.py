"""
Scrape-and-ingest orchestration.

Drains one ScrapeStream per source concurrently, upserting every record and
counting every error without stopping. A timeout cancels all sources and
returns the partial summary; cancellation of the caller propagates.
"""

import asyncio
import logging
from typing import Iterable, Optional

from casual_records.ingestion.ingestor import RecordIngestor
from casual_records.ingestion.models import ScrapeSummary, SourceSummary
from casual_records.sources.base import ScrapeSource
from casual_records.sources.stream import ScrapeItem

logger = logging.getLogger(__name__)


class RecordScraper:
    """Runs scrape sources and feeds their records into a RecordIngestor."""

    def __init__(self, ingestor: RecordIngestor):
        self.ingestor = ingestor

    async def scrape(
        self,
        sources: Iterable[ScrapeSource],
        timeout: Optional[float] = None,
    ) -> ScrapeSummary:
        """
        Scrape all sources and ingest what they produce.

        Args:
            sources: Sources to drain (concurrently)
            timeout: Wall-clock limit in seconds for the whole run (None = no limit)

        Returns:
            ScrapeSummary with per-source ingested/failed counts; ``timed_out``
            is set when the deadline cancelled the run

        Raises:
            asyncio.CancelledError: If the caller is cancelled; all producers
                are stopped before it propagates
        """
        sources = list(sources)
        summary = ScrapeSummary(sources=[SourceSummary(source=source.name) for source in sources])

        run = asyncio.gather(
            *(self._drain(source, result) for source, result in zip(sources, summary.sources))
        )

        try:
            if timeout is not None and timeout > 0:
                await asyncio.wait_for(run, timeout)
            else:
                await run
        except asyncio.TimeoutError:
            summary.timed_out = True
            logger.warning(f"Scrape timed out after {timeout}s")

        logger.info(
            f"Scrape finished: ingested={summary.ingested}, failed={summary.failed}, "
            f"sources={len(summary.sources)}, timed_out={summary.timed_out}"
        )
        return summary

    async def _drain(self, source: ScrapeSource, result: SourceSummary) -> None:
        logger.info(f"Scraping source: {source.name}")

        try:
            async with source.scrape() as stream:
                async for item in stream:
                    await self._consume(source, item, result)
        except Exception as e:
            # a source that cannot even be opened aborts alone
            logger.error(f"[{source.name}] scrape failed: {e}")
            result.aborted = True
            result.record_failure(f"source {source.name} failed: {e}")

        logger.info(
            f"Source {source.name} done: ingested={result.ingested}, failed={result.failed}"
            + (" (aborted)" if result.aborted else "")
        )

    async def _consume(self, source: ScrapeSource, item: ScrapeItem, result: SourceSummary) -> None:
        if item.error is not None:
            if item.fatal:
                result.aborted = True
            logger.warning(f"[{source.name}] {item.error}")
            result.record_failure(str(item.error))
            return

        if item.record is None:
            return

        try:
            await self.ingestor.ingest(item.record)
        except Exception as e:
            logger.warning(f"[{source.name}] failed to ingest {item.path or item.record.id}: {e}")
            result.record_failure(f"{item.path or item.record.id}: {e}")
        else:
            result.ingested += 1
