import pytest

from profile_stats.config import CredentialPool
from profile_stats.domain.entities import Failure, Success
from profile_stats.domain.errors import ServiceError, ServiceErrorKind
from profile_stats.infrastructure.queries import (
    USER_ACTIVITY_QUERY,
    USER_ISSUE_QUERY,
    USER_PULL_REQUEST_QUERY,
    USER_REPOSITORY_QUERY,
)


class FakeDispatcher:
    """
    Scripted IQueryDispatcher.

    `script` maps a query document to a list of outcomes, one per attempt;
    an Exception instance in the list is raised instead of returned.
    Every call is recorded as (document, credential).
    """

    def __init__(self, script: dict):
        self.script = {doc: list(outcomes) for doc, outcomes in script.items()}
        self.calls: list[tuple[str, str]] = []

    async def execute(self, document, variables, credential):
        self.calls.append((document, credential))
        outcome = self.script[document].pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def credentials_for(self, document):
        return [cred for doc, cred in self.calls if doc == document]


def repository_payload(total_count=5, nodes=None):
    if nodes is None:
        nodes = [{"stargazers": {"totalCount": 2}, "languages": {"nodes": [{"name": "Go"}]}}]
    return {"repositories": {"totalCount": total_count, "nodes": nodes}}


def activity_payload(created_at="2009-01-01T00:00:00Z", commits=7, restricted=0, reviews=1, organizations=2, followers=20):
    return {
        "createdAt": created_at,
        "contributionsCollection": {
            "totalCommitContributions": commits,
            "restrictedContributionsCount": restricted,
            "totalPullRequestReviewContributions": reviews,
        },
        "organizations": {"totalCount": organizations},
        "followers": {"totalCount": followers},
    }


def issue_payload(open_issues=2, closed_issues=3):
    return {"openIssues": {"totalCount": open_issues}, "closedIssues": {"totalCount": closed_issues}}


def pull_request_payload(count=4):
    return {"pullRequests": {"totalCount": count}}


UNKNOWN_FAILURE = Failure(ServiceError("unknown error", ServiceErrorKind.NOT_FOUND))


@pytest.fixture
def pool():
    return CredentialPool(tokens=("token-a", "token-b"))


@pytest.fixture
def happy_script():
    return {
        USER_REPOSITORY_QUERY:   [Success(repository_payload())],
        USER_ACTIVITY_QUERY:     [Success(activity_payload())],
        USER_ISSUE_QUERY:        [Success(issue_payload())],
        USER_PULL_REQUEST_QUERY: [Success(pull_request_payload())],
    }
