from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Union

from profile_stats.config import DEFAULT_RETRY_DELAY, CredentialPool
from profile_stats.domain.entities import (
    QueryOutcome,
    UserActivityData,
    UserIssueData,
    UserProfileMetrics,
    UserPullRequestData,
    UserRepositoryData,
)
from profile_stats.domain.errors import QueryFailedError, ServiceError, ServiceErrorKind, TransportError, to_service_error
from profile_stats.domain.interfaces import IQueryDispatcher
from profile_stats.infrastructure.queries import (
    USER_ACTIVITY_QUERY,
    USER_ISSUE_QUERY,
    USER_PULL_REQUEST_QUERY,
    USER_REPOSITORY_QUERY,
)
from .concurrency import settle_all
from .metrics import aggregate_metrics
from .retry import RetryRotator

log = logging.getLogger(__name__)

RATE_LIMITED_MESSAGE = (
    "Data temporarily limited due to API constraints. "
    "Please try again later for complete information."
)

ProfileResult = Union[UserProfileMetrics, ServiceError]


@dataclass(frozen=True)
class ProfileQuery:
    category: str
    document: str
    parse:    Callable[[Any], Any]


REPOSITORY_QUERY   = ProfileQuery("repository", USER_REPOSITORY_QUERY, UserRepositoryData.from_payload)
ACTIVITY_QUERY     = ProfileQuery("activity", USER_ACTIVITY_QUERY, UserActivityData.from_payload)
ISSUE_QUERY        = ProfileQuery("issue", USER_ISSUE_QUERY, UserIssueData.from_payload)
PULL_REQUEST_QUERY = ProfileQuery("pull request", USER_PULL_REQUEST_QUERY, UserPullRequestData.from_payload)

SECONDARY_QUERIES = (ACTIVITY_QUERY, ISSUE_QUERY, PULL_REQUEST_QUERY)


class ProfileOrchestrator:
    """
    Resolves one username into UserProfileMetrics, or a ServiceError.

    All dependencies are injected — this class creates NOTHING itself:
      - IQueryDispatcher → how to talk to GitHub (injected)
      - CredentialPool   → which tokens to rotate through (injected)

    Phase 1 runs the mandatory repository query on its own; every metric
    needs its totals, so failure or rate limiting there ends the request.
    Phase 2 runs activity, issue and pull-request queries concurrently and
    waits for all three before looking at any of them.
    """

    def __init__(self,dispatcher: IQueryDispatcher,credentials: CredentialPool,retry_delay: float = DEFAULT_RETRY_DELAY,rotate_on_rate_limit: bool = False,retry_transport_errors: bool = False,clock: Callable[[], datetime] | None = None) -> None:
        self._dispatcher           = dispatcher
        self._credentials          = credentials
        self._retry_delay          = retry_delay
        self._rotate_on_rate_limit = rotate_on_rate_limit
        self._retry_on             = (TransportError,) if retry_transport_errors else ()
        self._clock                = clock

    def _new_rotator(self) -> RetryRotator:
        # one rotator per query run, sized to the pool
        return RetryRotator(
            attempts             = len(self._credentials),
            delay                = self._retry_delay,
            rotate_on_rate_limit = self._rotate_on_rate_limit,
            retry_on             = self._retry_on,
        )

    async def execute_query(self, query: ProfileQuery, username: str) -> Any | None:
        """
        Run one query through the rotator and parse its payload.

        Returns the parsed payload, or None when the query was rate limited.
        Raises QueryFailedError for a classified failure, MalformedPayloadError
        for an unexpected payload shape, TransportError for network faults.
        """
        variables = {"username": username}

        async def dispatch(attempt: int) -> QueryOutcome:
            return await self._dispatcher.execute(query.document, variables, self._credentials[attempt])

        payload = await self._new_rotator().run(dispatch)
        if payload is None:
            return None
        return query.parse(payload)

    async def resolve_user_profile(self, username: str) -> ProfileResult:
        # --- Phase 1: mandatory repository query ---
        try:
            repository = await self.execute_query(REPOSITORY_QUERY, username)
        except Exception as exc:
            error = to_service_error(exc)
            log.error(
                "Repository query failed for %s: %s",
                username, exc,
                exc_info=not isinstance(exc, QueryFailedError),
            )
            return error

        if repository is None:
            log.warning("Rate limit hit when fetching repository data for %s — not running the remaining queries", username)
            return ServiceError(RATE_LIMITED_MESSAGE, ServiceErrorKind.RATE_LIMIT)

        # --- Phase 2: secondary queries, all settled before inspection ---
        settled = await settle_all(*[self.execute_query(q, username) for q in SECONDARY_QUERIES])

        rejected = [(q, s.error) for q, s in zip(SECONDARY_QUERIES, settled) if s.rejected]
        if rejected:
            for query, exc in rejected:
                log.error("%s query failed for %s: %s", query.category.capitalize(), username, exc)
            log.error("Can not find a user with username: '%s'", username)
            return ServiceError("Not found", ServiceErrorKind.NOT_FOUND)

        for query, result in zip(SECONDARY_QUERIES, settled):
            if result.value is None:
                log.warning("%s data unavailable due to rate limits for %s — using defaults", query.category.capitalize(), username)

        activity, issue, pull_request = (s.value for s in settled)
        return aggregate_metrics(
            activity     = activity,
            issue        = issue,
            pull_request = pull_request,
            repository   = repository,
            now          = self._clock() if self._clock else None,
        )
