from __future__ import annotations
from dataclasses import dataclass, fields
from datetime import datetime, timezone
from typing import Any, Generic, TypeVar, Union

from .errors import MalformedPayloadError, ServiceError

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Query outcomes
# ---------------------------------------------------------------------------
# One dispatch attempt ends in exactly one of these three shapes.

@dataclass(frozen=True)
class Success(Generic[T]):
    """The response envelope carried a `user` payload."""
    payload: T


@dataclass(frozen=True)
class Degraded:
    """The remote API answered with its rate-limit signal instead of data."""


@dataclass(frozen=True)
class Failure:
    """Any other error envelope, already classified."""
    error: ServiceError


QueryOutcome = Union[Success, Degraded, Failure]


# ---------------------------------------------------------------------------
# Raw payloads (anti-corruption layer)
# ---------------------------------------------------------------------------

def _parse_datetime(value: str | None) -> datetime | None:
    """Convert GitHub's ISO datetime string to an aware UTC datetime."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _non_negative_int(value: Any, name: str) -> int:
    """GitHub counts are plain non-negative ints; anything else is malformed."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} is not an int: {value!r}")
    if value < 0:
        raise ValueError(f"{name} is negative: {value}")
    return value


def _count(payload: dict, key: str) -> int:
    """Read `payload[key]["totalCount"]`."""
    return _non_negative_int(payload[key]["totalCount"], f"{key}.totalCount")


@dataclass(frozen=True)
class RepositoryNode:
    stargazers: int
    languages:  tuple[str, ...]


@dataclass(frozen=True)
class UserRepositoryData:
    """
    Mandatory payload: the user's owned repositories.

    `total_count` is GitHub's authoritative count and can be larger than
    `len(nodes)`, since the query only pages in the first batch of nodes.
    """
    total_count: int
    nodes:       tuple[RepositoryNode, ...]

    @classmethod
    def from_payload(cls, payload: Any) -> UserRepositoryData:
        try:
            repositories = payload["repositories"]
            nodes = []
            for node in repositories["nodes"] or []:
                if node is None:
                    continue
                language_nodes = (node.get("languages") or {}).get("nodes") or []
                nodes.append(RepositoryNode(
                    stargazers = _count(node, "stargazers"),
                    languages  = tuple(
                        lang["name"] for lang in language_nodes
                        if lang is not None and lang.get("name") is not None
                    ),
                ))
            return cls(
                total_count = _count(payload, "repositories"),
                nodes       = tuple(nodes),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise MalformedPayloadError("repository", exc) from exc


@dataclass(frozen=True)
class UserActivityData:
    created_at:                 datetime | None
    total_commit_contributions: int
    restricted_contributions:   int
    total_review_contributions: int
    organizations:              int
    followers:                  int

    @classmethod
    def from_payload(cls, payload: Any) -> UserActivityData:
        try:
            contributions = payload["contributionsCollection"]
            return cls(
                created_at                 = _parse_datetime(payload.get("createdAt")),
                total_commit_contributions = _non_negative_int(contributions["totalCommitContributions"], "totalCommitContributions"),
                restricted_contributions   = _non_negative_int(contributions["restrictedContributionsCount"], "restrictedContributionsCount"),
                total_review_contributions = _non_negative_int(contributions["totalPullRequestReviewContributions"], "totalPullRequestReviewContributions"),
                organizations              = _count(payload, "organizations"),
                followers                  = _count(payload, "followers"),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise MalformedPayloadError("activity", exc) from exc


@dataclass(frozen=True)
class UserIssueData:
    open_issues:   int
    closed_issues: int

    @classmethod
    def from_payload(cls, payload: Any) -> UserIssueData:
        try:
            return cls(
                open_issues   = _count(payload, "openIssues"),
                closed_issues = _count(payload, "closedIssues"),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise MalformedPayloadError("issue", exc) from exc


@dataclass(frozen=True)
class UserPullRequestData:
    pull_requests: int

    @classmethod
    def from_payload(cls, payload: Any) -> UserPullRequestData:
        try:
            return cls(pull_requests=_count(payload, "pullRequests"))
        except (KeyError, TypeError, ValueError) as exc:
            raise MalformedPayloadError("pull request", exc) from exc


# ---------------------------------------------------------------------------
# Final aggregate
# ---------------------------------------------------------------------------

_WIRE_NAMES = {
    "total_commits":      "totalCommits",
    "total_followers":    "totalFollowers",
    "total_issues":       "totalIssues",
    "total_organizations": "totalOrganizations",
    "total_pull_requests": "totalPullRequests",
    "total_reviews":      "totalReviews",
    "total_stargazers":   "totalStargazers",
    "total_repositories": "totalRepositories",
    "language_count":     "languageCount",
    "duration_year":      "durationYear",
    "duration_days":      "durationDays",
    "ancient_account":    "ancientAccount",
    "joined_2020":        "joined2020",
    "og_account":         "ogAccount",
}


@dataclass(frozen=True)
class UserProfileMetrics:
    """
    Immutable value object summarising one user's profile.

    Every field is a non-negative int. The three account-age flags are
    0/1 values rather than bools so the render step can multiply by them.
    """
    total_commits:       int
    total_followers:     int
    total_issues:        int
    total_organizations: int
    total_pull_requests: int
    total_reviews:       int
    total_stargazers:    int
    total_repositories:  int
    language_count:      int
    duration_year:       int
    duration_days:       int
    ancient_account:     int
    joined_2020:         int
    og_account:          int

    def to_dict(self) -> dict[str, int]:
        """camelCase keys, as the card renderer expects them."""
        return {_WIRE_NAMES[f.name]: getattr(self, f.name) for f in fields(self)}
