"""Motion-sample buffer between the ~50 Hz sensor feed and the classifier.

The sensor callback must never wait on the classifier, so :meth:`publish`
is synchronous.  When the buffer is full the *oldest* queued sample is
evicted: the posture window only cares about the most recent second or so
of motion.

Samples are delivered in arrival order.  A sample whose timestamp runs
backwards relative to the last delivered one is discarded, since the
hysteresis dwell timer assumes non-decreasing time.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

import structlog

from dreambreeze.models import AccelerometerSample

logger = structlog.get_logger(__name__)

SampleConsumer = Callable[[AccelerometerSample], Awaitable[None]]

STATS_EVERY_SAMPLES = 3_000  # one minute at 50 Hz


class MotionPipeline:
    """Bounded, drop-oldest FIFO that feeds accelerometer samples to consumers.

    A failing consumer is logged and skipped; it never stops delivery.
    """

    def __init__(self, maxsize: int = 10_000, stats_every: int = STATS_EVERY_SAMPLES) -> None:
        self._queue: asyncio.Queue[AccelerometerSample] = asyncio.Queue(maxsize=maxsize)
        self._consumers: list[SampleConsumer] = []
        self._stats_every = stats_every
        self._last_timestamp: int | None = None
        self._running = False
        self._task: asyncio.Task | None = None
        self._stats = {"processed": 0, "dropped_overflow": 0, "dropped_stale": 0}

    def add_consumer(self, fn: SampleConsumer) -> None:
        self._consumers.append(fn)

    # ── Producer side ─────────────────────────────────────────

    def publish(self, sample: AccelerometerSample) -> bool:
        """Enqueue *sample* without blocking.

        Returns ``False`` when an older sample had to be evicted to make room.
        """
        evicted = False
        if self._queue.full():
            self._queue.get_nowait()
            self._queue.task_done()
            self._stats["dropped_overflow"] += 1
            evicted = True
            if self._stats["dropped_overflow"] == 1:
                logger.warning("motion_pipeline.overflow", maxsize=self._queue.maxsize)
        self._queue.put_nowait(sample)
        return not evicted

    def publish_batch(self, samples: list[AccelerometerSample]) -> int:
        """Publish *samples* in order; return how many queued samples were evicted."""
        return sum(not self.publish(s) for s in samples)

    # ── Consumer side ─────────────────────────────────────────

    async def start(self) -> None:
        """Deliver samples until :meth:`stop`.  Run as a background task."""
        self._task = asyncio.current_task()
        self._running = True
        logger.info(
            "motion_pipeline.started",
            consumers=len(self._consumers),
            maxsize=self._queue.maxsize,
        )
        try:
            while self._running:
                sample = await self._queue.get()
                try:
                    await self._deliver(sample)
                finally:
                    self._queue.task_done()
        finally:
            self._running = False

    async def _deliver(self, sample: AccelerometerSample) -> None:
        if self._last_timestamp is not None and sample.timestamp < self._last_timestamp:
            self._stats["dropped_stale"] += 1
            logger.debug(
                "motion_pipeline.stale_sample",
                timestamp=sample.timestamp,
                last_timestamp=self._last_timestamp,
            )
            return
        self._last_timestamp = sample.timestamp

        for consumer in self._consumers:
            try:
                await consumer(sample)
            except Exception as exc:
                logger.error(
                    "motion_pipeline.consumer_error",
                    consumer=getattr(consumer, "__qualname__", repr(consumer)),
                    timestamp=sample.timestamp,
                    error=str(exc),
                )

        self._stats["processed"] += 1
        if self._stats["processed"] % self._stats_every == 0:
            logger.info("motion_pipeline.stats", pending=self._queue.qsize(), **self._stats)

    async def join(self) -> None:
        """Wait until every queued sample has been delivered or dropped."""
        await self._queue.join()

    async def stop(self) -> None:
        """Stop delivery and wait for the consumer task to finish.  Idempotent."""
        self._running = False
        task, self._task = self._task, None
        if task is not None and task is not asyncio.current_task() and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        logger.info("motion_pipeline.stopped", **self._stats)

    # ── Introspection ─────────────────────────────────────────

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    @property
    def processed_total(self) -> int:
        return self._stats["processed"]

    @property
    def dropped_total(self) -> int:
        return self._stats["dropped_overflow"] + self._stats["dropped_stale"]

    @property
    def stats(self) -> dict[str, int]:
        return dict(self._stats)
