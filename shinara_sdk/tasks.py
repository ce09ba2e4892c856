from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


class BackgroundTaskRunner:
    """Runs detached coroutines and keeps them referenced until they finish.

    Failures are logged and never re-raised; callers that care about completion
    await the returned task or ``drain()``.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def submit(self, coro: Coroutine[Any, Any, Any], *, name: str) -> asyncio.Task[Any]:
        task = asyncio.get_running_loop().create_task(self._guarded(coro, name=name), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    @staticmethod
    async def _guarded(coro: Coroutine[Any, Any, Any], *, name: str) -> Any:
        try:
            return await coro
        except asyncio.CancelledError:
            logger.info("background_task_cancelled", task_name=name)
            raise
        except Exception as exc:
            logger.warning(
                "background_task_failed",
                task_name=name,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return None
