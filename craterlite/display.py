"""Presentation helpers for the agents and experiments pages."""

from __future__ import annotations

from datetime import timedelta
from typing import NamedTuple

from craterlite.agents import AgentStatus

_NANOS_PER_SECOND = 1_000_000_000


class AgentStatusDisplay(NamedTuple):
    """How an agent's status is shown: CSS class, label, and whether to show its experiment."""

    status_class: str
    status_pretty: str
    show_assigned: bool


_AGENT_STATUS = {
    AgentStatus.WORKING: AgentStatusDisplay("orange", "Working", True),
    AgentStatus.IDLE: AgentStatusDisplay("green", "Online", False),
    AgentStatus.UNREACHABLE: AgentStatusDisplay("red", "Unreachable", False),
}


def agent_status_display(status: AgentStatus) -> AgentStatusDisplay:
    return _AGENT_STATUS[status]


def _with_fraction(integer: int, fraction: int, digits: int, suffix: str) -> str:
    decimals = f"{fraction:0{digits}d}".rstrip("0")
    return f"{integer}.{decimals}{suffix}" if decimals else f"{integer}{suffix}"


def _precise(nanos: int) -> str:
    secs, sub = divmod(nanos, _NANOS_PER_SECOND)
    if secs > 0:
        return _with_fraction(secs, sub, 9, "s")
    if sub >= 1_000_000:
        return _with_fraction(sub // 1_000_000, sub % 1_000_000, 6, "ms")
    if sub >= 1_000:
        return _with_fraction(sub // 1_000, sub % 1_000, 3, "µs")
    return f"{sub}ns"


def humanize_duration(seconds: float | timedelta) -> str:
    """Render a duration: exact under a minute, then minutes, then hours."""
    if isinstance(seconds, timedelta):
        seconds = seconds.total_seconds()
    nanos = round(seconds * _NANOS_PER_SECOND)
    if nanos < 0:
        return f"-{_precise(-nanos)}"
    whole = nanos // _NANOS_PER_SECOND
    if whole < 60:
        return _precise(nanos)
    if whole < 60 * 60:
        return f"{whole // 60} minutes"
    return f"{nanos / _NANOS_PER_SECOND / 3600:.1f} hours"