from __future__ import annotations
import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable

# Branches still running after their caller was cancelled. The event loop
# only keeps weak references to tasks, so they are pinned here until done.
_detached: set[asyncio.Task] = set()


@dataclass(frozen=True)
class Settled:
    """How one branch of settle_all ended: either a value or an exception."""
    value: Any = None
    error: BaseException | None = None

    @property
    def rejected(self) -> bool:
        return self.error is not None


def _release(task: asyncio.Task) -> None:
    _detached.discard(task)
    if not task.cancelled():
        # retrieve it so an abandoned failure is not reported as unhandled
        task.exception()


async def settle_all(*awaitables: Awaitable[Any]) -> list[Settled]:
    """
    Run every awaitable concurrently and wait until ALL of them finish.

    Unlike a plain asyncio.gather, an early exception in one branch does
    not stop the wait: every branch runs to completion, then the results
    come back in input order for the caller to inspect.

    Issued branches are never aborted. If the caller is cancelled, the
    cancellation propagates to the caller only; the branches keep running
    to completion in the background and their results are dropped.
    """
    tasks = [asyncio.ensure_future(aw) for aw in awaitables]
    if not tasks:
        return []

    try:
        await asyncio.wait(tasks, return_when=asyncio.ALL_COMPLETED)
    except asyncio.CancelledError:
        for task in tasks:
            if not task.done():
                _detached.add(task)
                task.add_done_callback(_release)
        raise

    results: list[Settled] = []
    for task in tasks:
        if task.cancelled():
            raise asyncio.CancelledError()
        exc = task.exception()
        results.append(Settled(error=exc) if exc is not None else Settled(value=task.result()))
    return results
