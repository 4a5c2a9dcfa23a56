"""Fire-and-forget persistence.

Writes submitted here run outside the request's decision path: the caller
never awaits them and their failures are only ever visible in the logs.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.core.logging import get_logger

logger = get_logger(__name__)

Write = Callable[[AsyncSession], Awaitable[Any]]


class BestEffortWriter:
    """Schedules database writes as tracked background tasks with their own session."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def submit(self, label: str, write: Write) -> None:
        """Schedule `write` and return immediately. Never raises."""
        try:
            task = asyncio.get_running_loop().create_task(self._run(label, write))
        except RuntimeError as e:
            logger.warning(f"Best-effort write '{label}' dropped, no running event loop: {e}")
            return

        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, label: str, write: Write) -> None:
        try:
            async with self._session_factory() as session:
                await write(session)
        except asyncio.CancelledError:
            logger.warning(f"Best-effort write '{label}' cancelled")
            raise
        except Exception as e:
            logger.warning(f"Best-effort write '{label}' failed: {type(e).__name__}: {e}")

    async def drain(self) -> None:
        """Wait for every write submitted so far. Used on shutdown and in tests."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
