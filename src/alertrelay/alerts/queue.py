"""
Bounded buffer of alert batches drained by a fixed pool of workers.

The webhook handler only enqueues; dispatch (HTTP calls to the channel and
the call provider) runs on worker tasks, each pushing the blocking work to a
thread.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

import anyio

from alertrelay.alerts.dispatcher import AlertDispatcher
from alertrelay.alerts.models import Alert
from alertrelay.shared.exceptions import AlertQueueFull
from alertrelay.shared.logging import correlation_scope, get_logger

logger = get_logger(__name__)


class AlertQueue:
    """asyncio.Queue of batches plus the worker tasks consuming it."""

    def __init__(
        self,
        dispatcher: AlertDispatcher,
        max_size: int = 100,
        workers: int = 5,
    ) -> None:
        if workers < 1:
            raise ValueError("workers must be >= 1")
        self._dispatcher = dispatcher
        self._queue: asyncio.Queue[list[Alert]] = asyncio.Queue(maxsize=max_size)
        self._worker_count = workers
        self._tasks: list[asyncio.Task[None]] = []

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    def qsize(self) -> int:
        return self._queue.qsize()

    def submit(self, alerts: Sequence[Alert]) -> None:
        """Enqueue a batch without waiting; raises AlertQueueFull at capacity."""
        try:
            self._queue.put_nowait(list(alerts))
        except asyncio.QueueFull as e:
            logger.warning("Alert queue full; rejecting batch", extra={"alerts": len(alerts)})
            raise AlertQueueFull("Alert queue is full, try again later") from e

    def start(self) -> None:
        if self._tasks:
            return
        self._tasks = [
            asyncio.create_task(self._worker(i), name=f"alert-worker-{i}")
            for i in range(self._worker_count)
        ]
        logger.info("Alert workers started", extra={"workers": self._worker_count})

    async def join(self) -> None:
        """Wait until every queued batch has been processed."""
        await self._queue.join()

    async def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        for task in self._tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._tasks = []
        logger.info("Alert workers stopped")

    async def _worker(self, index: int) -> None:
        while True:
            batch = await self._queue.get()
            try:
                with correlation_scope(prefix="batch-"):
                    await anyio.to_thread.run_sync(self._dispatcher.dispatch, batch)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Alert batch processing failed", extra={"worker": index})
            finally:
                self._queue.task_done()
