"""Names of the experiments created from issues and pull requests."""

from __future__ import annotations

import sqlite3
from collections.abc import Callable
from pathlib import Path

_MAX_SUFFIX = 2**16 - 1

_SCHEMA = """
CREATE TABLE IF NOT EXISTS saved_names (
    issue INTEGER PRIMARY KEY ON CONFLICT REPLACE,
    experiment TEXT NOT NULL
);
"""


class ExperimentNames:
    """Remembers the experiment name last used on each issue.

    ``experiment_exists`` tells whether an experiment with a given name
    already exists; it is consulted when generating fresh names.
    """

    def __init__(
        self,
        experiment_exists: Callable[[str], bool],
        database: str | Path | sqlite3.Connection = ":memory:",
    ) -> None:
        if isinstance(database, sqlite3.Connection):
            self._conn = database
        else:
            self._conn = sqlite3.connect(database, check_same_thread=False)
        self._conn.executescript(_SCHEMA)
        self._experiment_exists = experiment_exists

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> ExperimentNames:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def store(self, issue_number: int, name: str) -> None:
        """Remember ``name`` as the experiment of the issue, replacing any earlier one."""
        with self._conn:
            self._conn.execute(
                "INSERT INTO saved_names (issue, experiment) VALUES (?, ?);",
                (issue_number, name),
            )

    def default_name(self, issue_number: int, is_pull_request: bool) -> str | None:
        """The saved name, else ``pr-<number>`` for pull requests, else ``None``."""
        row = self._conn.execute(
            "SELECT experiment FROM saved_names WHERE issue = ?;", (issue_number,)
        ).fetchone()
        if row is not None:
            return row[0]
        if is_pull_request:
            return f"pr-{issue_number}"
        return None

    def get_name(
        self, issue_number: int, is_pull_request: bool, name: str | None = None
    ) -> str:
        """The name a command acts on: the given one (then saved) or the default."""
        if name is not None:
            self.store(issue_number, name)
            return name
        default = self.default_name(issue_number, is_pull_request)
        if default is None:
            raise ValueError("missing experiment name")
        return default

    def generate_new_name(self, issue_number: int) -> str:
        """The first of ``pr-N``, ``pr-N-1``, ``pr-N-2``... that does not exist yet.

        The result is not saved.
        """
        name = f"pr-{issue_number}"
        idx = 1
        while self._experiment_exists(name):
            name = f"pr-{issue_number}-{idx}"
            if idx >= _MAX_SUFFIX:
                raise ValueError("too many similarly-named pull requests")
            idx += 1
        return name

    def setup_run_name(self, issue_number: int, name: str | None = None) -> str:
        """The name of a new run: the given one or a fresh one, saved for the issue."""
        if name is None:
            name = self.generate_new_name(issue_number)
        self.store(issue_number, name)
        return name