import json

import pytest
import requests
import responses

from craterlite.github import (
    Commit,
    CommitParent,
    EventIssueComment,
    GitHubApi,
    GitHubError,
    Label,
    PullRequest,
)

BASE = "https://api.github.com"
ISSUE = f"{BASE}/repos/owner/repo/issues/1"


@pytest.fixture
def api():
    return GitHubApi("token")


def test_username_sends_token(api):
    with responses.RequestsMock() as rsps:
        rsps.get(f"{BASE}/user", json={"id": 1, "login": "bot"})
        assert api.username() == "bot"
        assert rsps.calls[0].request.headers["Authorization"] == "token token"


def test_post_comment(api):
    with responses.RequestsMock() as rsps:
        rsps.post(f"{ISSUE}/comments", status=201, json={})
        api.post_comment(ISSUE, "hello")
        assert json.loads(rsps.calls[0].request.body) == {"body": "hello"}


def test_post_comment_failure(api):
    with responses.RequestsMock() as rsps:
        rsps.post(f"{ISSUE}/comments", status=403, json={"message": "nope"})
        with pytest.raises(GitHubError) as info:
            api.post_comment(ISSUE, "hello")
    assert info.value.status == 403
    assert info.value.message == "nope"
    assert "nope" in str(info.value)


def test_list_labels(api):
    with responses.RequestsMock() as rsps:
        rsps.get(f"{ISSUE}/labels", json=[{"name": "a"}, {"name": "b"}])
        assert api.list_labels(ISSUE) == [Label("a"), Label("b")]


def test_add_label(api):
    with responses.RequestsMock() as rsps:
        rsps.post(f"{ISSUE}/labels", status=200, json=[])
        api.add_label(ISSUE, "S-waiting")
        assert json.loads(rsps.calls[0].request.body) == ["S-waiting"]


def test_remove_label_failure(api):
    with responses.RequestsMock() as rsps:
        rsps.delete(f"{ISSUE}/labels/gone", status=404, json={"message": "missing"})
        with pytest.raises(GitHubError, match="missing"):
            api.remove_label(ISSUE, "gone")


def test_relative_urls_are_prefixed(api):
    with responses.RequestsMock() as rsps:
        rsps.get(
            f"{BASE}/orgs/acme/teams",
            json=[{"id": 7, "slug": "infra"}, {"id": 9, "slug": "ops"}],
        )
        assert api.list_teams("acme") == {"infra": 7, "ops": 9}


def test_team_members(api):
    with responses.RequestsMock() as rsps:
        rsps.get(f"{BASE}/teams/7/members", json=[{"id": 1, "login": "alice"}])
        assert api.team_members(7) == ["alice"]


def test_get_commit(api):
    payload = {"sha": "a" * 40, "parents": [{"sha": "b" * 40}, {"sha": "c" * 40}]}
    with responses.RequestsMock() as rsps:
        rsps.get(f"{BASE}/repos/owner/repo/commits/{'a' * 40}", json=payload)
        commit = api.get_commit("owner/repo", "a" * 40)
    assert commit == Commit("a" * 40, (CommitParent("b" * 40), CommitParent("c" * 40)))


def test_get_commit_http_error(api):
    with responses.RequestsMock() as rsps:
        rsps.get(f"{BASE}/repos/owner/repo/commits/abc", status=404, json={})
        with pytest.raises(requests.HTTPError):
            api.get_commit("owner/repo", "abc")


def test_get_pr_head_sha(api):
    with responses.RequestsMock() as rsps:
        rsps.get(f"{BASE}/repos/owner/repo/pulls/5", json={"head": {"sha": "d" * 40}})
        assert api.get_pr_head_sha("owner/repo", 5) == "d" * 40


def test_event_from_dict():
    event = EventIssueComment.from_dict(
        {
            "action": "created",
            "issue": {
                "number": 3,
                "url": ISSUE,
                "html_url": "https://example.com/3",
                "labels": [{"name": "x"}],
                "pull_request": {"html_url": "https://example.com/pr/3"},
            },
            "comment": {"body": "hi"},
            "sender": {"id": 11, "login": "alice"},
            "repository": {"full_name": "owner/repo"},
        }
    )
    assert event.action == "created"
    assert event.issue.number == 3
    assert event.issue.labels == (Label("x"),)
    assert event.issue.pull_request == PullRequest("https://example.com/pr/3")
    assert event.sender.login == "alice"
    assert event.repository.full_name == "owner/repo"
    assert event.comment.body == "hi"


def test_event_from_dict_missing_field():
    with pytest.raises(ValueError):
        EventIssueComment.from_dict({"action": "created"})