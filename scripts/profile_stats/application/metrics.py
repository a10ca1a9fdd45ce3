from __future__ import annotations
from datetime import datetime, timedelta, timezone

from profile_stats.domain.entities import (
    UserActivityData,
    UserIssueData,
    UserProfileMetrics,
    UserPullRequestData,
    UserRepositoryData,
)

ANCIENT_ACCOUNT_YEAR = 2010
OG_ACCOUNT_YEAR      = 2008
JOINED_2020_YEAR     = 2020
DAYS_PER_BUCKET      = 100


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _whole_years_between(start: datetime, end: datetime) -> int:
    years = end.year - start.year
    if (end.month, end.day, end.time()) < (start.month, start.day, start.time()):
        years -= 1
    return max(years, 0)


def aggregate_metrics(activity: UserActivityData | None,issue: UserIssueData | None,pull_request: UserPullRequestData | None,repository: UserRepositoryData,now: datetime | None = None) -> UserProfileMetrics:
    """
    Fold the four query payloads into one flat metrics object.

    `repository` is mandatory; each secondary payload may be None when its
    query was rate limited, in which case its fields fall back to 0. With
    no activity payload the account is treated as created right now, so
    the duration fields are 0 and no year flag is set.
    """
    now = _as_utc(now or datetime.now(tz=timezone.utc))

    total_stargazers = sum(node.stargazers for node in repository.nodes)
    languages = {name for node in repository.nodes for name in node.languages}

    created_at = _as_utc((activity.created_at if activity else None) or now)
    # clock skew can put createdAt slightly in the future
    elapsed = max(now - created_at, timedelta(0))
    created_year = created_at.year

    return UserProfileMetrics(
        total_commits       = (
            activity.restricted_contributions + activity.total_commit_contributions
            if activity else 0
        ),
        total_followers     = activity.followers if activity else 0,
        total_issues        = issue.open_issues + issue.closed_issues if issue else 0,
        total_organizations = activity.organizations if activity else 0,
        total_pull_requests = pull_request.pull_requests if pull_request else 0,
        total_reviews       = activity.total_review_contributions if activity else 0,
        total_stargazers    = total_stargazers,
        total_repositories  = repository.total_count,
        language_count      = len(languages),
        duration_year       = _whole_years_between(created_at, now),
        duration_days       = elapsed.days // DAYS_PER_BUCKET,
        ancient_account     = 1 if created_year <= ANCIENT_ACCOUNT_YEAR else 0,
        joined_2020         = 1 if created_year == JOINED_2020_YEAR else 0,
        og_account          = 1 if created_year <= OG_ACCOUNT_YEAR else 0,
    )
