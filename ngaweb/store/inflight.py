"""Single-flight registry: one fetch per thread page at a time."""
import asyncio
import logging
import threading
from typing import Awaitable, Callable, Dict

from ngaweb.parse.models import RequestKey, ThreadPage

logger = logging.getLogger(__name__)


class InflightRegistry:
    """
    Collapse concurrent loads of the same page into one computation.

    The first caller for a key starts ``compute`` as a task; callers arriving
    while it runs await that same task instead of starting their own. The
    task is forgotten as soon as it settles, success or failure, so a failed
    load never blocks later ones. Callers await the task through
    ``asyncio.shield``: cancelling one caller leaves the computation running
    for the others.
    """

    def __init__(self):
        self._tasks: Dict[RequestKey, asyncio.Task] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._tasks)

    def __contains__(self, key: RequestKey) -> bool:
        with self._lock:
            return key in self._tasks

    async def run(
        self,
        key: RequestKey,
        compute: Callable[[], Awaitable[ThreadPage]],
    ) -> ThreadPage:
        """Join the in-flight computation for ``key``, or start it."""
        task = self._get_or_create(key, compute)
        return await asyncio.shield(task)

    def _get_or_create(
        self,
        key: RequestKey,
        compute: Callable[[], Awaitable[ThreadPage]],
    ) -> asyncio.Task:
        with self._lock:
            task = self._tasks.get(key)
            if task is not None:
                logger.debug(f"Joining in-flight load for {key}")
                return task
            task = asyncio.get_running_loop().create_task(compute())
            self._tasks[key] = task
        task.add_done_callback(lambda t: self._release(key, t))
        return task

    def _release(self, key: RequestKey, task: asyncio.Task) -> None:
        with self._lock:
            if self._tasks.get(key) is task:
                del self._tasks[key]
        # Mark the outcome as retrieved even if every caller went away
        if not task.cancelled():
            task.exception()
