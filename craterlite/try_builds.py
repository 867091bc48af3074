"""Detection and storage of completed try builds announced on pull requests."""

from __future__ import annotations

import json
import re
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from craterlite.github import Commit

_HOMU_COMMENT_RE = re.compile(r"<!-- homu: (\{.*\}) -->")

_SCHEMA = """
CREATE TABLE IF NOT EXISTS try_builds (
    repo TEXT NOT NULL,
    pr INTEGER NOT NULL,
    base_sha TEXT NOT NULL,
    merge_sha TEXT NOT NULL,
    PRIMARY KEY (repo, pr)
);
"""


class _CommitSource(Protocol):
    def get_commit(self, repo: str, sha: str) -> Commit: ...


@dataclass(frozen=True)
class TryBuild:
    """The commits a try build was based on and produced."""

    base_sha: str
    merge_sha: str


def base_commit(github: _CommitSource, repo: str, merge_sha: str) -> str | None:
    """The first parent of a merge commit, or ``None`` if it is not a merge."""
    commit = github.get_commit(repo, merge_sha)
    if len(commit.parents) != 2:
        return None
    return commit.parents[0].sha


def _completed_merge_sha(comment: str) -> str | None:
    match = _HOMU_COMMENT_RE.search(comment)
    if match is None:
        return None
    try:
        data = json.loads(match[1])
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict) or data.get("type") != "TryBuildCompleted":
        return None
    merge_sha = data.get("merge_sha")
    return merge_sha if isinstance(merge_sha, str) else None


class TryBuildStore:
    """Try builds recorded per repository and pull request."""

    def __init__(self, database: str | Path | sqlite3.Connection = ":memory:") -> None:
        if isinstance(database, sqlite3.Connection):
            self._conn = database
        else:
            self._conn = sqlite3.connect(database)
        self._conn.executescript(_SCHEMA)

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> TryBuildStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def detect(self, github: _CommitSource, repo: str, pr: int, comment: str) -> None:
        """Record the try build announced in ``comment``, if there is one."""
        merge_sha = _completed_merge_sha(comment)
        if merge_sha is None:
            return
        base_sha = base_commit(github, repo, merge_sha)
        if base_sha is None:
            return
        with self._conn:
            self._conn.execute(
                "INSERT OR REPLACE INTO try_builds (repo, pr, base_sha, merge_sha) "
                "VALUES (?, ?, ?, ?);",
                (repo, pr, base_sha, merge_sha),
            )

    def get_sha(self, repo: str, pr: int) -> TryBuild | None:
        row = self._conn.execute(
            "SELECT base_sha, merge_sha FROM try_builds WHERE repo = ? AND pr = ?;",
            (repo, pr),
        ).fetchone()
        return TryBuild(*row) if row is not None else None