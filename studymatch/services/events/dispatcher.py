import asyncio
from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import Any

from loguru import logger

from studymatch.core.config import settings

Handler = Callable[[Any], Awaitable[None]]


class EventDispatcher:
    """
    In-process fire-and-forget event queue.

    Producers call `publish()` from request handlers; a small pool of worker
    tasks drains the queue and invokes the registered handlers. Handler
    failures are logged and never reach the producer. The queue is created
    lazily so the dispatcher binds to whichever event loop first uses it.
    """

    def __init__(self, workers: int | None = None, maxsize: int | None = None):
        self.worker_count = workers or settings.EVENT_WORKERS
        self.maxsize = maxsize if maxsize is not None else settings.EVENT_QUEUE_MAXSIZE
        self._handlers: dict[type, list[Handler]] = defaultdict(list)
        self._queue: asyncio.Queue | None = None
        self._workers: list[asyncio.Task] = []

    def subscribe(self, event_type: type, handler: Handler) -> None:
        self._handlers[event_type].append(handler)
        logger.debug(f"Subscribed {getattr(handler, '__qualname__', handler)} to {event_type.__name__}")

    def start(self) -> None:
        """Spawn the worker tasks on the running loop. No-op if already started."""
        if self._workers:
            return
        if self._queue is None:
            self._queue = asyncio.Queue(maxsize=self.maxsize)
        self._workers = [asyncio.create_task(self._worker(i)) for i in range(self.worker_count)]
        logger.info(f"Event dispatcher started with {self.worker_count} workers")

    async def stop(self) -> None:
        """Finish queued work, then cancel the workers. A later start() gets a fresh queue."""
        if not self._workers:
            return
        await self.drain()
        for task in self._workers:
            task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        self._queue = None
        logger.info("Event dispatcher stopped")

    def publish(self, event: Any) -> None:
        """Queue an event for background handling. Never blocks and never raises."""
        if not self._handlers.get(type(event)):
            logger.debug(f"No handlers for {type(event).__name__}, dropping")
            return
        try:
            self.start()
            self._queue.put_nowait(event)
            logger.debug(f"Queued {type(event).__name__}: {event}")
        except asyncio.QueueFull:
            logger.error(f"Event queue full, dropped {type(event).__name__}: {event}")
        except RuntimeError as e:
            # No running loop (called from sync code outside the app)
            logger.error(f"Cannot queue {type(event).__name__} without a running event loop: {e}")

    async def drain(self) -> None:
        """Wait until every queued event has been handled."""
        if self._queue is not None and self._workers:
            await self._queue.join()

    async def _worker(self, index: int) -> None:
        while True:
            event = await self._queue.get()
            try:
                await self.dispatch(event)
            finally:
                self._queue.task_done()

    async def dispatch(self, event: Any) -> None:
        """Run every handler for an event, each in its own error boundary."""
        for handler in self._handlers.get(type(event), []):
            try:
                await handler(event)
            except Exception as e:
                logger.exception(f"Handler {getattr(handler, '__qualname__', handler)} failed for {event}: {e}")
