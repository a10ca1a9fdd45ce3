from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from profile_stats.config import DEFAULT_TIMEOUT, GITHUB_API_URL
from profile_stats.domain.entities import Degraded, Failure, QueryOutcome, Success
from profile_stats.domain.errors import ServiceError, ServiceErrorKind, TransportError
from profile_stats.domain.interfaces import IQueryDispatcher

log = logging.getLogger(__name__)

# GitHub's GraphQL error type is "RATE_LIMITED"; substring match covers it.
RATE_LIMIT_ERROR_TYPE = "RATE_LIMIT"
RATE_LIMIT_MESSAGE    = "rate limit"


class GitHubClient(IQueryDispatcher):
    """
    Concrete implementation of IQueryDispatcher for GitHub's GraphQL API.

    The constructor receives an httpx.AsyncClient (injected) rather than
    creating one internally. The caller owns the client lifecycle, and
    tests pass a client built on httpx.MockTransport.

    Unlike the orchestrator, this class knows nothing about credential
    pools: it is handed exactly one token per call.
    """

    def __init__(self,client: httpx.AsyncClient,api_url: str = GITHUB_API_URL,timeout: float = DEFAULT_TIMEOUT) -> None:
        self._client  = client
        self._api_url = api_url
        self._timeout = timeout

    @staticmethod
    def _is_rate_limited(body: Mapping[str, Any]) -> bool:
        """
        Two shapes signal a rate limit:
          {"errors": [{"type": "RATE_LIMITED", ...}]}     — GraphQL-level
          {"message": "API rate limit exceeded for ..."}  — REST-style, no errors list
        """
        errors = body.get("errors")
        if isinstance(errors, list):
            for err in errors:
                if isinstance(err, dict) and RATE_LIMIT_ERROR_TYPE in str(err.get("type") or ""):
                    return True

        message = body.get("message")
        if isinstance(message, str) and RATE_LIMIT_MESSAGE in message.lower():
            return True
        return False

    def classify(self, body: Any) -> QueryOutcome:
        """Map a decoded response body onto Success / Degraded / Failure."""
        if not isinstance(body, dict):
            return Failure(ServiceError("unknown error", ServiceErrorKind.NOT_FOUND))

        data = body.get("data")
        user = data.get("user") if isinstance(data, dict) else None
        if user:
            return Success(user)

        if self._is_rate_limited(body):
            return Degraded()

        log.debug("Unclassified GitHub error envelope: %s", body.get("errors") or body.get("message"))
        return Failure(ServiceError("unknown error", ServiceErrorKind.NOT_FOUND))

    # IQueryDispatcher implementation
    async def execute(self,document: str,variables: Mapping[str, Any],credential: str) -> QueryOutcome:
        """
        POST one query and classify the answer.

        The body is inspected whatever the HTTP status: GitHub reports its
        primary rate limit as a 403 with a JSON `message`, and that has to
        come back as Degraded rather than as a transport fault.
        """
        try:
            response = await self._client.post(
                self._api_url,
                headers={
                    "Authorization": f"bearer {credential}",
                    "Content-Type":  "application/json",
                },
                json={"query": document, "variables": dict(variables)},
                timeout=self._timeout,
            )
        except httpx.RequestError as exc:
            raise TransportError(f"request to {self._api_url} failed: {exc}") from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise TransportError(
                f"non-JSON response from {self._api_url} (HTTP {response.status_code})"
            ) from exc

        return self.classify(body)
