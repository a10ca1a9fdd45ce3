from datetime import datetime, timezone

import pytest

from profile_stats.application.metrics import aggregate_metrics
from profile_stats.domain.entities import (
    UserActivityData,
    UserIssueData,
    UserPullRequestData,
    UserRepositoryData,
)

from conftest import activity_payload, issue_payload, pull_request_payload, repository_payload

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def _repo(nodes, total_count=3):
    return UserRepositoryData.from_payload(repository_payload(total_count=total_count, nodes=nodes))


def _node(stars, languages=None):
    node = {"stargazers": {"totalCount": stars}}
    if languages is not None:
        node["languages"] = {"nodes": [{"name": name} for name in languages]}
    else:
        node["languages"] = {"nodes": None}
    return node


def test_stargazers_are_summed_over_every_node():
    repository = _repo([_node(3), _node(0), _node(12)])

    metrics = aggregate_metrics(None, None, None, repository, now=NOW)

    assert metrics.total_stargazers == 15


def test_language_count_collapses_duplicates_and_skips_missing_lists():
    repository = _repo([_node(0, ["Go", "Rust"]), _node(0, ["Go"]), _node(0, []), _node(0)])

    metrics = aggregate_metrics(None, None, None, repository, now=NOW)

    assert metrics.language_count == 2


def test_null_language_entries_are_ignored():
    node = {"stargazers": {"totalCount": 1}, "languages": {"nodes": [None, {"name": None}, {"name": "C"}]}}
    repository = _repo([node])

    assert aggregate_metrics(None, None, None, repository, now=NOW).language_count == 1


def test_total_repositories_uses_total_count_not_node_length():
    repository = _repo([_node(1)], total_count=42)

    assert aggregate_metrics(None, None, None, repository, now=NOW).total_repositories == 42


def test_missing_secondary_payloads_default_to_zero():
    metrics = aggregate_metrics(None, None, None, _repo([_node(1, ["Go"])]), now=NOW)

    assert metrics.total_commits == 0
    assert metrics.total_followers == 0
    assert metrics.total_organizations == 0
    assert metrics.total_reviews == 0
    assert metrics.total_issues == 0
    assert metrics.total_pull_requests == 0
    # no activity → account treated as created now
    assert metrics.duration_year == 0
    assert metrics.duration_days == 0
    assert metrics.ancient_account == 0
    assert metrics.og_account == 0
    assert metrics.joined_2020 == 0


def test_all_payloads_present():
    activity = UserActivityData.from_payload(
        activity_payload(created_at="2020-03-01T00:00:00Z", commits=7, restricted=5, reviews=9, organizations=2, followers=20)
    )
    issue = UserIssueData.from_payload(issue_payload(2, 3))
    pull_request = UserPullRequestData.from_payload(pull_request_payload(4))

    metrics = aggregate_metrics(activity, issue, pull_request, _repo([_node(2)]), now=NOW)

    assert metrics.total_commits == 12
    assert metrics.total_reviews == 9
    assert metrics.total_organizations == 2
    assert metrics.total_followers == 20
    assert metrics.total_issues == 5
    assert metrics.total_pull_requests == 4
    assert metrics.joined_2020 == 1
    assert metrics.duration_year == 4
    # 2020-03-01 → 2024-06-15 is 1567 days
    assert metrics.duration_days == 15


def test_duration_year_counts_only_completed_years():
    activity = UserActivityData.from_payload(activity_payload(created_at="2014-06-16T00:00:00Z"))

    metrics = aggregate_metrics(activity, None, None, _repo([]), now=NOW)

    assert metrics.duration_year == 9


def test_created_in_the_future_clamps_to_zero():
    activity = UserActivityData.from_payload(activity_payload(created_at="2024-06-16T00:00:00Z"))

    metrics = aggregate_metrics(activity, None, None, _repo([]), now=NOW)

    assert metrics.duration_year == 0
    assert metrics.duration_days == 0


@pytest.mark.parametrize("year", range(2005, 2024))
def test_account_age_flags(year):
    activity = UserActivityData.from_payload(activity_payload(created_at=f"{year}-07-01T00:00:00Z"))

    metrics = aggregate_metrics(activity, None, None, _repo([]), now=NOW)

    assert metrics.ancient_account == (1 if year <= 2010 else 0)
    assert metrics.og_account == (1 if year <= 2008 else 0)
    assert metrics.joined_2020 == (1 if year == 2020 else 0)
    if metrics.og_account:
        assert metrics.ancient_account == 1


def test_every_field_is_non_negative():
    activity = UserActivityData.from_payload(activity_payload(created_at="2012-01-01"))

    metrics = aggregate_metrics(activity, None, None, _repo([_node(0)]), now=NOW)

    assert all(value >= 0 for value in metrics.to_dict().values())


def test_to_dict_uses_camel_case_names():
    data = aggregate_metrics(None, None, None, _repo([_node(1)]), now=NOW).to_dict()

    assert set(data) == {
        "totalCommits", "totalFollowers", "totalIssues", "totalOrganizations",
        "totalPullRequests", "totalReviews", "totalStargazers", "totalRepositories",
        "languageCount", "durationYear", "durationDays", "ancientAccount",
        "joined2020", "ogAccount",
    }
