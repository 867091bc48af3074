"""Authentication of agents and authorization of bot users."""

from __future__ import annotations

import logging
import re
import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Protocol

import requests

log = logging.getLogger(__name__)

_GIT_REVISION_RE = re.compile(r"crater(-agent)?/(?P<sha>[a-f0-9]{7,40})( \(.*\))?")
_TOKEN_SCOPE = "CraterToken"


class _TeamDirectory(Protocol):
    def list_teams(self, org: str) -> dict[str, int]: ...

    def team_members(self, team: int) -> list[str]: ...


@dataclass(frozen=True)
class AuthDetails:
    """Who an authenticated agent is and which revision it runs."""

    name: str
    git_revision: str | None = None


def parse_token(authorization: str) -> str | None:
    """Extract the token from a ``CraterToken <token>`` header value."""
    segments = authorization.split(" ")
    if len(segments) == 2 and segments[0] == _TOKEN_SCOPE:
        return segments[1]
    return None


def git_revision(user_agent: str) -> str | None:
    """Extract the commit hash from an agent's User-Agent string."""
    match = _GIT_REVISION_RE.fullmatch(user_agent)
    return match["sha"] if match else None


def _header(headers: Mapping[str, str], name: str) -> str | None:
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted and isinstance(value, str):
            return value
    return None


def check_auth(
    agent_tokens: Mapping[str, str], headers: Mapping[str, str]
) -> AuthDetails | None:
    """Authenticate a request from its headers against the agent tokens."""
    user_agent = _header(headers, "User-Agent")
    revision = git_revision(user_agent) if user_agent is not None else None

    authorization = _header(headers, "Authorization")
    if authorization is None:
        return None
    token = parse_token(authorization)
    if token is None or token not in agent_tokens:
        return None
    return AuthDetails(name=agent_tokens[token], git_revision=revision)


class Acl:
    """The users and teams allowed to give commands to the bot."""

    def __init__(
        self,
        github_acl: Iterable[str] = (),
        rust_teams: bool = False,
        github: _TeamDirectory | None = None,
        *,
        permissions_url: str | None = None,
        session: requests.Session | None = None,
    ) -> None:
        if rust_teams and permissions_url is None:
            raise ValueError("a permissions URL is needed to check team membership")
        self._users: list[str] = []
        self._teams: list[tuple[str, str]] = []
        for item in github_acl:
            org, sep, team = item.partition("/")
            if sep:
                self._teams.append((org, team))
            else:
                self._users.append(item)
        self._rust_teams = rust_teams
        self._permissions_url = permissions_url
        self._session = session or requests.Session()
        self._lock = threading.Lock()
        self._cached: frozenset[str] = frozenset()
        if github is not None:
            self.refresh_cache(github)

    def refresh_cache(self, github: _TeamDirectory) -> None:
        """Reload the allowed usernames; teams that fail to load are skipped."""
        new_cache = set(self._users)
        orgs: dict[str, dict[str, int]] = {}
        for org, team in self._teams:
            try:
                new_cache.update(self._load_team(github, orgs, org, team))
            except Exception as err:  # noqa: BLE001 - one bad team must not block others
                log.warning("failed to authorize members of %s/%s to use the bot", org, team)
                log.warning("caused by: %s", err)
        with self._lock:
            self._cached = frozenset(new_cache)

    @staticmethod
    def _load_team(
        github: _TeamDirectory,
        orgs: dict[str, dict[str, int]],
        org: str,
        team: str,
    ) -> list[str]:
        if org not in orgs:
            orgs[org] = github.list_teams(org)
        team_id = orgs[org].get(team)
        if team_id is None:
            raise LookupError(f"team {org}/{team} doesn't exist")
        return github.team_members(team_id)

    def allowed(self, username: str, user_id: int) -> bool:
        """Whether the user may interact with the bot."""
        if self._rust_teams:
            url = self._permissions_url
            response = self._session.get(url)
            if response.status_code != 200:
                raise requests.HTTPError(
                    f"request to {url} returned status code {response.status_code}",
                    response=response,
                )
            if user_id in response.json().get("github_ids", []):
                return True
        with self._lock:
            return username in self._cached