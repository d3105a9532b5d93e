"""
Palette Engine Reliability & Cancellation
Cooperative cancellation and off-thread execution of blocking extractions.
"""
import asyncio
import threading
from typing import Any, Callable, TypeVar

from loguru import logger

from palette_engine.services.colors.errors import ExtractionCancelledError

T = TypeVar('T')


class CancellationToken:
    """
    Thread-safe cancellation flag shared between a caller and one extraction.

    The extraction polls the token at iteration boundaries; cancel() never
    interrupts a computation mid-step.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, stage: str = "") -> None:
        """
        Raise if cancellation was requested.

        Raises:
            ExtractionCancelledError: If cancel() has been called
        """
        if self._event.is_set():
            where = f" during {stage}" if stage else ""
            raise ExtractionCancelledError(f"Extraction cancelled{where}")


async def run_cancellable(func: Callable[..., T],
                          token: CancellationToken,
                          *args: Any,
                          **kwargs: Any) -> T:
    """
    Run a blocking function in a worker thread.

    If the awaiting task is cancelled, the token is cancelled as well so the
    worker stops at its next checkpoint and releases its buffers.

    Args:
        func: Blocking callable that polls token
        token: Token observed by func
        *args, **kwargs: Forwarded to func

    Returns:
        Whatever func returns
    """
    try:
        return await asyncio.to_thread(func, *args, **kwargs)
    except asyncio.CancelledError:
        token.cancel()
        logger.info("Awaiting task cancelled; signalled worker to stop")
        raise
