"""
Bounded producer/consumer stream for scraped records.

A source's walk runs as one background task that puts ScrapeItem results on
a small bounded queue, followed by a completion sentinel. The consumer drains
the stream with ``async for``; leaving the ``async with`` block (normally, on
error or on cancellation) cancels the producer and waits for it to finish.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from casual_records.errors import ScrapeError
from casual_records.models import Record

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE = 1

_DONE = object()


@dataclass
class ScrapeItem:
    """
    One result produced by a source: either a record or an error.

    Attributes:
        path: Origin of the item (file path, URL, ...) when known
        record: Extracted record, None when extraction failed
        error: Per-item (or fatal) error, None on success
    """

    path: Optional[str] = None
    record: Optional[Record] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.record is not None

    @property
    def fatal(self) -> bool:
        return isinstance(self.error, ScrapeError) and self.error.fatal


Emit = Callable[[ScrapeItem], Awaitable[None]]
Producer = Callable[[Emit], Awaitable[None]]


class ScrapeStream:
    """
    Async iterator over the items produced by one scrape.

    The stream must be used as an async context manager, or closed with
    aclose(). Iteration alone that stops early (``break``) leaves the producer
    blocked on the full queue.

    Example:
        async with source.scrape() as stream:
            async for item in stream:
                ...
    """

    def __init__(self, name: str, producer: Producer, buffer_size: int = DEFAULT_BUFFER_SIZE):
        """
        Initialize the stream (the producer starts on first use).

        Args:
            name: Source name (for logging and task naming)
            producer: Coroutine function that emits items until the walk ends
            buffer_size: Queue capacity; a full queue blocks the producer
        """
        self.name = name
        self._producer = producer
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max(1, buffer_size))
        self._task: Optional[asyncio.Task] = None
        self._finished = False

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run(), name=f"scrape:{self.name}")

    async def _emit(self, item: ScrapeItem) -> None:
        await self._queue.put(item)

    async def _run(self) -> None:
        try:
            await self._producer(self._emit)
        except Exception as e:
            logger.error(f"Scrape of {self.name} aborted: {e}")
            error = e if isinstance(e, ScrapeError) else ScrapeError(str(e), fatal=True)
            error.fatal = True
            await self._queue.put(ScrapeItem(path=error.path, error=error))
        await self._queue.put(_DONE)

    @property
    def done(self) -> bool:
        """True once the producer task has finished (completed or cancelled)."""
        return self._task is not None and self._task.done()

    def __aiter__(self) -> "ScrapeStream":
        return self

    async def __anext__(self) -> ScrapeItem:
        if self._finished:
            raise StopAsyncIteration

        self.start()
        item = await self._queue.get()
        if item is _DONE:
            self._finished = True
            raise StopAsyncIteration
        return item

    async def aclose(self) -> None:
        """Stop the producer; items not yet consumed are dropped."""
        self._finished = True
        if self._task is None:
            return
        if not self._task.done():
            self._task.cancel()
        # wait() never raises the task's own CancelledError into the caller
        await asyncio.wait([self._task])
        logger.debug(f"Scrape stream {self.name} closed")

    async def __aenter__(self) -> "ScrapeStream":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
