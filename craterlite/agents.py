"""Registry of the agents that run experiments, backed by SQLite."""

from __future__ import annotations

import sqlite3
import threading
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from pathlib import Path

INACTIVE_AFTER = timedelta(seconds=300)
"""How long without a heartbeat before an agent is unreachable."""

WORKER_TIMEOUT = 60 * 10
"""Seconds after which a silent worker no longer counts as active."""

_SCHEMA = """
CREATE TABLE IF NOT EXISTS agents (
    name TEXT PRIMARY KEY,
    last_heartbeat TEXT,
    git_revision TEXT
);
CREATE TABLE IF NOT EXISTS agent_capabilities (
    agent_name TEXT NOT NULL,
    capability TEXT NOT NULL,
    PRIMARY KEY (agent_name, capability)
);
"""

ExperimentLookup = Callable[[str], "str | None"]


class AgentStatus(Enum):
    """What an agent is doing, judged from its heartbeat and assignment."""

    WORKING = "working"
    IDLE = "idle"
    UNREACHABLE = "unreachable"


@dataclass(frozen=True)
class Agent:
    """An agent as stored in the registry."""

    name: str
    last_heartbeat: datetime | None = None
    git_revision: str | None = None
    assigned_experiment: str | None = None
    capabilities: tuple[str, ...] = ()

    def status(self, now: datetime | None = None) -> AgentStatus:
        """The agent's status at ``now`` (the current time by default)."""
        if now is None:
            now = datetime.now(timezone.utc)
        if self.last_heartbeat is not None and now - INACTIVE_AFTER < self.last_heartbeat:
            if self.assigned_experiment is not None:
                return AgentStatus.WORKING
            return AgentStatus.IDLE
        return AgentStatus.UNREACHABLE


class Agents:
    """The configured agents, their heartbeats and the workers they run."""

    def __init__(
        self,
        database: str | Path | sqlite3.Connection = ":memory:",
        agent_tokens: Mapping[str, str] | None = None,
        *,
        assigned_experiment: ExperimentLookup | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if isinstance(database, sqlite3.Connection):
            self._conn = database
        else:
            self._conn = sqlite3.connect(database, check_same_thread=False)
        self._conn.executescript(_SCHEMA)
        self._assigned_experiment = assigned_experiment
        self._clock = clock
        self._workers: dict[str, float] = {}
        self._workers_lock = threading.Lock()
        self.synchronize(agent_tokens or {})

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> Agents:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def active_worker_count(self) -> int:
        """Count the workers heard from in the last ten minutes, forgetting the rest."""
        now = self._clock()
        with self._workers_lock:
            self._workers = {
                worker: seen
                for worker, seen in self._workers.items()
                if now - seen < WORKER_TIMEOUT
            }
            return len(self._workers)

    def add_worker(self, worker_id: str) -> None:
        """Note that ``worker_id`` has just been heard from."""
        with self._workers_lock:
            self._workers[worker_id] = self._clock()

    def synchronize(self, agent_tokens: Mapping[str, str]) -> None:
        """Make the stored agents match the agent names in ``agent_tokens``."""
        wanted = set(agent_tokens.values())
        with self._conn:
            current = [row[0] for row in self._conn.execute("SELECT name FROM agents;")]
            for name in current:
                if name in wanted:
                    wanted.discard(name)
                else:
                    self._conn.execute("DELETE FROM agents WHERE name = ?;", (name,))
                    self._conn.execute(
                        "DELETE FROM agent_capabilities WHERE agent_name = ?;", (name,)
                    )
            for name in sorted(wanted):
                self._conn.execute("INSERT INTO agents (name) VALUES (?);", (name,))

    def _build(self, row: tuple[str, str | None, str | None]) -> Agent:
        name, heartbeat, revision = row
        lookup = self._assigned_experiment
        return Agent(
            name=name,
            last_heartbeat=datetime.fromisoformat(heartbeat) if heartbeat else None,
            git_revision=revision,
            assigned_experiment=lookup(name) if lookup is not None else None,
            capabilities=self.capabilities_for(name),
        )

    def all(self) -> list[Agent]:
        """Every agent, ordered by name."""
        rows = self._conn.execute(
            "SELECT name, last_heartbeat, git_revision FROM agents ORDER BY name;"
        ).fetchall()
        return [self._build(row) for row in rows]

    def get(self, name: str) -> Agent | None:
        row = self._conn.execute(
            "SELECT name, last_heartbeat, git_revision FROM agents WHERE name = ?;",
            (name,),
        ).fetchone()
        return self._build(row) if row is not None else None

    def _update(self, sql: str, params: tuple[object, ...], name: str) -> None:
        with self._conn:
            changes = self._conn.execute(sql, params).rowcount
        if changes != 1:
            raise LookupError(f"unknown agent: {name}")

    def record_heartbeat(self, name: str) -> None:
        """Store the current time as the agent's last heartbeat."""
        now = datetime.now(timezone.utc).isoformat()
        self._update(
            "UPDATE agents SET last_heartbeat = ? WHERE name = ?;", (now, name), name
        )

    def set_git_revision(self, name: str, revision: str) -> None:
        self._update(
            "UPDATE agents SET git_revision = ? WHERE name = ?;", (revision, name), name
        )

    def add_capabilities(self, name: str, capabilities: Iterable[str]) -> None:
        with self._conn:
            self._conn.executemany(
                "INSERT OR IGNORE INTO agent_capabilities (agent_name, capability) "
                "VALUES (?, ?);",
                ((name, capability) for capability in capabilities),
            )

    def capabilities_for(self, name: str) -> tuple[str, ...]:
        """The agent's capabilities, sorted."""
        rows = self._conn.execute(
            "SELECT capability FROM agent_capabilities WHERE agent_name = ? "
            "ORDER BY capability;",
            (name,),
        )
        return tuple(row[0] for row in rows)