"""Tests for HandoffQueue."""

import asyncio
import threading

import pytest

from conftest import make_span


class TestHandoffQueuePushDrain:
    """Tests for push/drain bookkeeping."""

    def test_push_and_drain(self, span_queue):
        """Test that drain returns spans in push order and empties the queue."""
        span_queue.push(make_span("a"))
        span_queue.push(make_span("b"))

        drained = span_queue.drain()

        assert [s.name for s in drained] == ["a", "b"]
        assert span_queue.qsize() == 0
        assert span_queue.empty()

    def test_drain_empty(self, span_queue):
        """Test draining an empty queue."""
        assert span_queue.drain() == []

    def test_get_nowait_empty(self, span_queue):
        """Test that removing from an empty queue raises."""
        with pytest.raises(IndexError):
            span_queue.get_nowait()

    def test_push_without_consumer(self, span_queue):
        """Test that pushing before any consumer waits never fails."""
        for _ in range(100):
            span_queue.push(make_span())

        assert span_queue.qsize() == 100

    def test_concurrent_producers_lose_nothing(self, span_queue):
        """Test qsize == M - K after concurrent pushes and K removals."""
        producers = 8
        per_producer = 500
        removals = 1000

        def produce():
            for _ in range(per_producer):
                span_queue.push(make_span())

        threads = [threading.Thread(target=produce) for _ in range(producers)]
        for thread in threads:
            thread.start()

        removed = 0
        while removed < removals:
            try:
                span_queue.get_nowait()
                removed += 1
            except IndexError:
                continue

        for thread in threads:
            thread.join()

        assert span_queue.qsize() == producers * per_producer - removals


class TestHandoffQueueWait:
    """Tests for wait_available()."""

    @pytest.mark.asyncio
    async def test_wait_returns_when_items_present(self, span_queue):
        """Test that waiting on a non-empty queue returns immediately."""
        span_queue.push(make_span())

        await asyncio.wait_for(span_queue.wait_available(), timeout=1)

        # Waiting does not consume
        assert span_queue.qsize() == 1

    @pytest.mark.asyncio
    async def test_wait_blocks_until_push(self, span_queue):
        """Test that the consumer suspends while the queue is empty."""
        waiter = asyncio.create_task(span_queue.wait_available())
        await asyncio.sleep(0.05)
        assert not waiter.done()

        span_queue.push(make_span())

        await asyncio.wait_for(waiter, timeout=1)

    @pytest.mark.asyncio
    async def test_wait_woken_from_other_thread(self, span_queue):
        """Test that a push from a request thread wakes the consumer."""
        waiter = asyncio.create_task(span_queue.wait_available())
        await asyncio.sleep(0.05)

        thread = threading.Thread(target=span_queue.push, args=(make_span(),))
        thread.start()
        thread.join()

        await asyncio.wait_for(waiter, timeout=1)
        assert span_queue.qsize() == 1

    @pytest.mark.asyncio
    async def test_wait_after_drain_blocks_again(self, span_queue):
        """Test that availability is per item, not sticky."""
        span_queue.push(make_span())
        await span_queue.wait_available()
        span_queue.drain()

        waiter = asyncio.create_task(span_queue.wait_available())
        await asyncio.sleep(0.05)
        assert not waiter.done()

        waiter.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiter

    @pytest.mark.asyncio
    async def test_wait_is_cancellable(self, span_queue):
        """Test that a shutdown can interrupt the wait."""
        waiter = asyncio.create_task(span_queue.wait_available())
        await asyncio.sleep(0)

        waiter.cancel()

        with pytest.raises(asyncio.CancelledError):
            await waiter
