"""Delayed, best-effort deletion of uploaded and generated files.

Timers are plain asyncio tasks owned by the :class:`RetentionManager`, not by
the request that scheduled them, so a client disconnecting or timing out does
not cancel cleanup. Deletion errors are logged and never raised.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional, Set, Union

import structlog

__all__: list[str] = ["RetentionManager"]

logger = structlog.get_logger(__name__)

PathLike = Union[str, Path]


def _delete(path: Path) -> bool:
    """Remove **path** if present; return whether a file was deleted."""
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.error("retention_delete_failed", path=str(path), error=str(e))
        return False
    logger.info("retention_file_deleted", path=str(path))
    return True


class RetentionManager:
    """Schedules deletion of files after a fixed delay."""

    def __init__(self) -> None:
        self._tasks: Set[asyncio.Task[bool]] = set()
        self._closed = False

    @property
    def pending(self) -> int:
        """Number of deletions that have not fired yet."""
        return len(self._tasks)

    def schedule_delete(
        self, path: PathLike, delay_seconds: float
    ) -> Optional[asyncio.Task[bool]]:
        """Delete **path** once **delay_seconds** have elapsed.

        A non-positive delay deletes immediately and returns ``None``.
        Must be called from within a running event loop otherwise.
        """
        target = Path(path)
        if delay_seconds <= 0 or self._closed:
            _delete(target)
            return None

        task = asyncio.get_running_loop().create_task(
            self._delete_later(target, delay_seconds),
            name=f"retention:{target.name}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.debug(
            "retention_delete_scheduled", path=str(target), delay_seconds=delay_seconds
        )
        return task

    async def _delete_later(self, path: Path, delay_seconds: float) -> bool:
        await asyncio.sleep(delay_seconds)
        return await asyncio.to_thread(_delete, path)

    async def shutdown(self) -> None:
        """Cancel outstanding timers.

        Files whose timers are cancelled stay on disk; cleanup is best-effort.
        """
        self._closed = True
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info("retention_timers_cancelled", count=len(tasks))
