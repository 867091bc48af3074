"""Comments posted by the bot on issues, and the labels they set."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from craterlite.github import Label

_ABOUT = "**Crater** is a tool to run experiments across parts of the Rust ecosystem."


class _IssueClient(Protocol):
    def post_comment(self, issue_url: str, body: str) -> None: ...

    def list_labels(self, issue_url: str) -> list[Label]: ...

    def add_label(self, issue_url: str, label: str) -> None: ...

    def remove_label(self, issue_url: str, label: str) -> None: ...


class MessageLabel(Enum):
    """The state an experiment's issue is labelled with."""

    EXPERIMENT_QUEUED = "experiment-queued"
    EXPERIMENT_COMPLETED = "experiment-completed"


@dataclass
class LabelSettings:
    """Label names to apply, and which existing labels to remove."""

    experiment_queued: str
    experiment_completed: str
    remove: re.Pattern[str] | str

    def __post_init__(self) -> None:
        if isinstance(self.remove, str):
            self.remove = re.compile(self.remove)


@dataclass(frozen=True)
class _Line:
    emoji: str
    content: str


class Message:
    """A comment built from emoji-prefixed lines and notes."""

    def __init__(self, learn_more_url: str | None = None) -> None:
        self._lines: list[_Line] = []
        self._notes: list[_Line] = []
        self._label: MessageLabel | None = None
        self._learn_more_url = learn_more_url

    def line(self, emoji: str, content: str) -> Message:
        self._lines.append(_Line(emoji, content))
        return self

    def note(self, emoji: str, content: str) -> Message:
        self._notes.append(_Line(emoji, content))
        return self

    def set_label(self, label: MessageLabel) -> Message:
        self._label = label
        return self

    def render(self) -> str:
        """The comment body, ending with a note explaining the bot."""
        about = _ABOUT
        if self._learn_more_url:
            about = f"{about} [Learn more]({self._learn_more_url})"
        notes = [*self._notes, _Line("information_source", about)]
        body = "".join(f":{line.emoji}: {line.content}\n" for line in self._lines)
        return body + "".join(f"\n:{note.emoji}: {note.content}" for note in notes)

    def send(self, issue_url: str, github: _IssueClient, labels: LabelSettings) -> None:
        """Post the comment, then update the issue's labels if one was set."""
        github.post_comment(issue_url, self.render())
        if self._label is None:
            return

        wanted = {
            MessageLabel.EXPERIMENT_QUEUED: labels.experiment_queued,
            MessageLabel.EXPERIMENT_COMPLETED: labels.experiment_completed,
        }[self._label]
        remove = labels.remove
        assert isinstance(remove, re.Pattern)

        already_present = False
        for current in github.list_labels(issue_url):
            if current.name == wanted:
                already_present = True
            elif remove.search(current.name):
                github.remove_label(issue_url, current.name)

        if not already_present:
            github.add_label(issue_url, wanted)