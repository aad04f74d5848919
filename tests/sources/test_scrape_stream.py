"""Tests for the bounded scrape stream."""

import asyncio

import pytest

from casual_records.errors import ScrapeError
from casual_records.models import Record
from casual_records.sources.stream import ScrapeItem, ScrapeStream


def make_item(index: int) -> ScrapeItem:
    return ScrapeItem(path=f"file{index}.txt", record=Record(id=f"r{index}", content=f"text {index}"))


async def collect(stream: ScrapeStream) -> list:
    items = []
    async with stream:
        async for item in stream:
            items.append(item)
    return items


@pytest.mark.asyncio
async def test_items_arrive_in_order_then_stream_ends():
    """Every emitted item is delivered, then iteration stops."""

    async def producer(emit):
        for i in range(3):
            await emit(make_item(i))

    stream = ScrapeStream("test", producer)
    items = await collect(stream)

    assert [item.record.id for item in items] == ["r0", "r1", "r2"]
    assert all(item.ok for item in items)
    assert stream.done


@pytest.mark.asyncio
async def test_per_item_errors_do_not_end_stream():
    """Error items are delivered like records."""

    async def producer(emit):
        await emit(make_item(0))
        await emit(ScrapeItem(path="bad.txt", error=ScrapeError("unreadable", path="bad.txt")))
        await emit(make_item(1))

    items = await collect(ScrapeStream("test", producer))

    assert len(items) == 3
    assert not items[1].ok
    assert not items[1].fatal
    assert items[2].ok


@pytest.mark.asyncio
async def test_fatal_error_reported_once_then_ends():
    """A producer exception becomes one fatal error item before completion."""

    async def producer(emit):
        await emit(make_item(0))
        raise ScrapeError("root is gone", path="/missing")

    items = await collect(ScrapeStream("test", producer))

    assert len(items) == 2
    assert items[1].fatal
    assert items[1].path == "/missing"


@pytest.mark.asyncio
async def test_unexpected_exception_wrapped_as_fatal():
    async def producer(emit):
        raise RuntimeError("boom")

    items = await collect(ScrapeStream("test", producer))

    assert len(items) == 1
    assert isinstance(items[0].error, ScrapeError)
    assert items[0].fatal
    assert "boom" in str(items[0].error)


@pytest.mark.asyncio
async def test_full_queue_blocks_producer():
    """A slow consumer throttles the producer."""
    emitted = []

    async def producer(emit):
        for i in range(10):
            await emit(make_item(i))
            emitted.append(i)

    stream = ScrapeStream("test", producer, buffer_size=1)
    async with stream:
        first = await stream.__anext__()
        await asyncio.sleep(0.05)

        assert first.record.id == "r0"
        # one item delivered, one queued, one blocked on put
        assert len(emitted) <= 2

    assert stream.done


@pytest.mark.asyncio
async def test_leaving_early_cancels_producer():
    """Breaking out of the loop stops the producer task."""
    cancelled = asyncio.Event()

    async def producer(emit):
        try:
            i = 0
            while True:
                await emit(make_item(i))
                i += 1
        except asyncio.CancelledError:
            cancelled.set()
            raise

    stream = ScrapeStream("test", producer)
    async with stream:
        async for item in stream:
            if item.record.id == "r2":
                break

    assert stream.done
    assert cancelled.is_set()


@pytest.mark.asyncio
async def test_cancelling_consumer_stops_producer():
    """Cancelling the draining task closes the stream within bounded time."""
    started = asyncio.Event()

    async def producer(emit):
        started.set()
        await asyncio.sleep(3600)

    stream = ScrapeStream("test", producer)

    async def consume():
        async with stream:
            async for _ in stream:
                pass

    task = asyncio.create_task(consume())
    await asyncio.wait_for(started.wait(), timeout=1)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await asyncio.wait_for(task, timeout=1)
    assert stream.done


@pytest.mark.asyncio
async def test_iteration_after_close_stops():
    async def producer(emit):
        await emit(make_item(0))

    stream = ScrapeStream("test", producer)
    await collect(stream)

    with pytest.raises(StopAsyncIteration):
        await stream.__anext__()


@pytest.mark.asyncio
async def test_aclose_after_bare_iteration_stops_producer():
    """A stream iterated without ``async with`` is released by aclose()."""

    async def producer(emit):
        i = 0
        while True:
            await emit(make_item(i))
            i += 1

    stream = ScrapeStream("test", producer)
    async for item in stream:
        if item.record.id == "r1":
            break

    assert not stream.done

    await asyncio.wait_for(stream.aclose(), timeout=1)
    assert stream.done
