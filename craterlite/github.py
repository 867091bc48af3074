"""Client for the GitHub REST API and the payloads it exchanges."""

from __future__ import annotations

from dataclasses import dataclass
from http import HTTPStatus
from typing import Any

import requests

API_BASE = "https://api.github.com/"
MAX_REDIRECTS = 4
USER_AGENT = "craterlite"


class GitHubError(Exception):
    """A GitHub API request answered with an unexpected status."""

    def __init__(self, status: int, message: str) -> None:
        try:
            status_text = f"{status} {HTTPStatus(status).phrase}"
        except ValueError:
            status_text = str(status)
        super().__init__(
            f"request to GitHub API failed with status {status_text}: {message}"
        )
        self.status = status
        self.message = message


@dataclass(frozen=True)
class User:
    id: int
    login: str


@dataclass(frozen=True)
class Label:
    name: str


@dataclass(frozen=True)
class PullRequest:
    html_url: str


@dataclass(frozen=True)
class Issue:
    number: int
    url: str
    html_url: str
    labels: tuple[Label, ...] = ()
    pull_request: PullRequest | None = None


@dataclass(frozen=True)
class Repository:
    full_name: str


@dataclass(frozen=True)
class Comment:
    body: str


@dataclass(frozen=True)
class Team:
    id: int
    slug: str


@dataclass(frozen=True)
class CommitParent:
    sha: str


@dataclass(frozen=True)
class Commit:
    sha: str
    parents: tuple[CommitParent, ...]


def _user(data: dict[str, Any]) -> User:
    return User(id=int(data["id"]), login=data["login"])


def _label(data: dict[str, Any]) -> Label:
    return Label(data["name"])


def _issue(data: dict[str, Any]) -> Issue:
    pull_request = data.get("pull_request")
    return Issue(
        number=int(data["number"]),
        url=data["url"],
        html_url=data["html_url"],
        labels=tuple(_label(item) for item in data["labels"]),
        pull_request=(
            PullRequest(pull_request["html_url"]) if pull_request is not None else None
        ),
    )


def _commit(data: dict[str, Any]) -> Commit:
    return Commit(
        sha=data["sha"],
        parents=tuple(CommitParent(parent["sha"]) for parent in data["parents"]),
    )


@dataclass(frozen=True)
class EventIssueComment:
    """The payload of an ``issue_comment`` webhook event."""

    action: str
    issue: Issue
    comment: Comment
    sender: User
    repository: Repository

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EventIssueComment:
        try:
            return cls(
                action=data["action"],
                issue=_issue(data["issue"]),
                comment=Comment(data["comment"]["body"]),
                sender=_user(data["sender"]),
                repository=Repository(data["repository"]["full_name"]),
            )
        except (KeyError, TypeError) as err:
            raise ValueError(f"invalid issue comment event: {err}") from err


class GitHubApi:
    """Authenticated access to the GitHub API."""

    def __init__(
        self,
        token: str,
        *,
        api_base: str = API_BASE,
        session: requests.Session | None = None,
    ) -> None:
        self._token = token
        self._api_base = api_base
        if session is None:
            session = requests.Session()
            session.max_redirects = MAX_REDIRECTS
        self._session = session

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        if not url.startswith("https://"):
            url = f"{self._api_base}{url}"
        headers = {
            "User-Agent": USER_AGENT,
            "Authorization": f"token {self._token}",
        }
        return self._session.request(method, url, headers=headers, **kwargs)

    @staticmethod
    def _expect(response: requests.Response, status: HTTPStatus) -> requests.Response:
        if response.status_code != status:
            raise GitHubError(response.status_code, response.json()["message"])
        return response

    def username(self) -> str:
        """The login of the authenticated user."""
        return self._request("GET", "user").json()["login"]

    def post_comment(self, issue_url: str, body: str) -> None:
        response = self._request("POST", f"{issue_url}/comments", json={"body": body})
        self._expect(response, HTTPStatus.CREATED)

    def list_labels(self, issue_url: str) -> list[Label]:
        response = self._request("GET", f"{issue_url}/labels")
        return [_label(item) for item in self._expect(response, HTTPStatus.OK).json()]

    def add_label(self, issue_url: str, label: str) -> None:
        response = self._request("POST", f"{issue_url}/labels", json=[label])
        self._expect(response, HTTPStatus.OK)

    def remove_label(self, issue_url: str, label: str) -> None:
        response = self._request("DELETE", f"{issue_url}/labels/{label}")
        self._expect(response, HTTPStatus.OK)

    def list_teams(self, org: str) -> dict[str, int]:
        """Map each team slug of ``org`` to its id."""
        response = self._request("GET", f"orgs/{org}/teams")
        teams = self._expect(response, HTTPStatus.OK).json()
        return {team["slug"]: int(team["id"]) for team in teams}

    def team_members(self, team: int) -> list[str]:
        response = self._request("GET", f"teams/{team}/members")
        users = self._expect(response, HTTPStatus.OK).json()
        return [_user(user).login for user in users]

    def get_commit(self, repo: str, sha: str) -> Commit:
        response = self._request("GET", f"repos/{repo}/commits/{sha}")
        response.raise_for_status()
        return _commit(response.json())

    def get_pr_head_sha(self, repo: str, pr: int) -> str:
        response = self._request("GET", f"repos/{repo}/pulls/{pr}")
        response.raise_for_status()
        return response.json()["head"]["sha"]