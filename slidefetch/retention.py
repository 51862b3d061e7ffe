"""
Artifact retention.

Served artifacts are deleted a fixed delay after serving begins. Each pending
deletion is an asyncio task behind a ScheduledDeletion handle, so it can be
inspected, awaited, or cancelled.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from slidefetch.storage import remove_file

logger = logging.getLogger(__name__)

DEFAULT_RETENTION_SECONDS = 300.0


@dataclass
class ScheduledDeletion:
    """Handle for one pending deletion."""

    path: Path
    due_at: float
    task: Optional["asyncio.Task[bool]"] = field(default=None, repr=False)

    @property
    def done(self) -> bool:
        return self.task is not None and self.task.done()

    @property
    def cancelled(self) -> bool:
        return self.task is not None and self.task.cancelled()

    def cancel(self) -> bool:
        if self.task is None or self.task.done():
            return False
        return self.task.cancel()

    async def wait(self) -> bool:
        """Wait for the deletion; True if a file was actually removed."""
        if self.task is None:
            return False
        try:
            return await self.task
        except asyncio.CancelledError:
            if self.task.cancelled():
                return False
            raise


class RetentionScheduler:
    """
    Deletes files a fixed delay after they are scheduled.

    Usage:
        scheduler = RetentionScheduler(delay=300)
        handle = scheduler.schedule(path)
        ...
        await scheduler.shutdown()
    """

    def __init__(
        self,
        delay: float = DEFAULT_RETENTION_SECONDS,
        remover: Callable[[Path], bool] = remove_file,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.delay = delay
        self.remover = remover
        self.clock = clock
        self._pending: Dict[Path, ScheduledDeletion] = {}

    def schedule(self, path: Union[str, Path], delay: Optional[float] = None) -> ScheduledDeletion:
        """
        Arrange for ``path`` to be deleted. Must be called from a running loop.

        A path that already has a pending deletion keeps its original deadline.
        """
        path = Path(path)
        existing = self._pending.get(path)
        if existing is not None and not existing.done:
            return existing

        wait = self.delay if delay is None else delay
        handle = ScheduledDeletion(path=path, due_at=self.clock() + wait)
        handle.task = asyncio.get_running_loop().create_task(self._delete_later(handle, wait))
        self._pending[path] = handle

        logger.info(f"[Retention] {path.name} scheduled for deletion in {wait:.0f}s")
        return handle

    async def _delete_later(self, handle: ScheduledDeletion, wait: float) -> bool:
        try:
            await asyncio.sleep(wait)
            return self.delete_now(handle.path)
        finally:
            if self._pending.get(handle.path) is handle:
                del self._pending[handle.path]

    def delete_now(self, path: Union[str, Path]) -> bool:
        """Delete immediately; failures are logged, never raised."""
        path = Path(path)
        try:
            removed = self.remover(path)
        except OSError as e:
            logger.error(f"[Retention] Failed to delete {path}: {e}")
            return False

        if removed:
            logger.info(f"[Retention] Deleted {path.name}")
        else:
            logger.debug(f"[Retention] {path.name} was already gone")
        return removed

    def cancel(self, path: Union[str, Path]) -> bool:
        handle = self._pending.pop(Path(path), None)
        return handle.cancel() if handle else False

    def pending(self) -> List[ScheduledDeletion]:
        return [h for h in self._pending.values() if not h.done]

    async def shutdown(self) -> None:
        """Cancel every outstanding deletion and wait for the tasks to finish."""
        handles = list(self._pending.values())
        self._pending.clear()
        for handle in handles:
            handle.cancel()
        tasks = [h.task for h in handles if h.task is not None]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
