"""
Tests for cancellation tokens and off-thread execution.
"""

import asyncio
import threading
import time

import pytest

from palette_engine.services.colors.errors import ExtractionCancelledError
from palette_engine.services.reliability import CancellationToken, run_cancellable


class TestCancellationToken:
    """Test the cancellation flag"""

    def test_initially_not_cancelled(self):
        token = CancellationToken()
        assert not token.cancelled
        token.raise_if_cancelled("anything")

    def test_cancel(self):
        token = CancellationToken()
        token.cancel()
        token.cancel()
        assert token.cancelled

    def test_raise_if_cancelled_names_stage(self):
        token = CancellationToken()
        token.cancel()
        with pytest.raises(ExtractionCancelledError, match="during sampling"):
            token.raise_if_cancelled("sampling")

    def test_cancel_from_other_thread(self):
        token = CancellationToken()
        thread = threading.Thread(target=token.cancel)
        thread.start()
        thread.join()
        assert token.cancelled


class TestRunCancellable:
    """Test worker-thread execution"""

    @pytest.mark.asyncio
    async def test_returns_result(self):
        result = await run_cancellable(lambda a, b=0: a + b, CancellationToken(), 2, b=3)
        assert result == 5

    @pytest.mark.asyncio
    async def test_propagates_errors(self):
        def failing():
            raise ExtractionCancelledError("stopped")

        with pytest.raises(ExtractionCancelledError):
            await run_cancellable(failing, CancellationToken())

    @pytest.mark.asyncio
    async def test_task_cancellation_cancels_token(self):
        """Cancelling the awaiting task signals the worker to stop"""
        token = CancellationToken()
        started = threading.Event()
        stopped = threading.Event()

        def worker():
            started.set()
            while not token.cancelled:
                time.sleep(0.01)
            stopped.set()

        task = asyncio.create_task(run_cancellable(worker, token))
        assert await asyncio.to_thread(started.wait, 5)

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert token.cancelled
        assert await asyncio.to_thread(stopped.wait, 5)
