from __future__ import annotations
import asyncio
import logging
from typing import Any, Awaitable, Callable

from profile_stats.domain.entities import Degraded, Failure, QueryOutcome, Success
from profile_stats.domain.errors import QueryFailedError

log = logging.getLogger(__name__)

Dispatch = Callable[[int], Awaitable[QueryOutcome]]


class RetryRotator:
    """
    Drives one query across the credential pool.

    `dispatch(attempt)` is expected to use the credential at position
    `attempt`, so the rotator never sees a token itself. At most
    `attempts` calls are made, in order 0, 1, 2, ...

    Default policy:
      Success  → return the payload, no further attempts
      Degraded → return None at once; the first rate-limit signal wins
      Failure  → raise QueryFailedError carrying the classified error
      raised   → propagate

    `rotate_on_rate_limit` and `retry_on` switch on real rotation: the
    rotator waits `delay` seconds and moves to the next credential.
    """

    def __init__(self,attempts: int,delay: float,rotate_on_rate_limit: bool = False,retry_on: tuple[type[BaseException], ...] = ()) -> None:
        if attempts < 1:
            raise ValueError(f"attempts must be >= 1, got {attempts}")
        self._attempts             = attempts
        self._delay                = delay
        self._rotate_on_rate_limit = rotate_on_rate_limit
        self._retry_on             = retry_on

    @property
    def attempts(self) -> int:
        return self._attempts

    async def run(self, dispatch: Dispatch) -> Any | None:
        last_error: BaseException | None = None

        for attempt in range(self._attempts):
            if attempt > 0:
                await asyncio.sleep(self._delay)

            try:
                outcome = await dispatch(attempt)
            except self._retry_on as exc:
                log.warning("Attempt %d/%d failed: %s", attempt + 1, self._attempts, exc)
                last_error = exc
                continue

            if isinstance(outcome, Success):
                return outcome.payload

            if isinstance(outcome, Degraded):
                if not self._rotate_on_rate_limit:
                    log.warning("Rate limit hit for token %d — skipping retry and returning no data", attempt + 1)
                    return None
                log.warning("Rate limit hit for token %d/%d — rotating", attempt + 1, self._attempts)
                last_error = None
                continue

            if isinstance(outcome, Failure):
                raise QueryFailedError(outcome.error)

            raise TypeError(f"dispatch returned {outcome!r}, expected a QueryOutcome")

        # Pool exhausted: only reachable when a rotation policy is switched on.
        if last_error is not None:
            raise last_error
        return None
