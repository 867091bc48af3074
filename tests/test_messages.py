import pytest

from craterlite.github import Label
from craterlite.messages import LabelSettings, Message, MessageLabel

ISSUE = "https://api.example.com/issues/1"


class FakeGitHub:
    def __init__(self, labels=()):
        self.labels = [Label(name) for name in labels]
        self.comments = []
        self.added = []
        self.removed = []
        self.listed = 0

    def post_comment(self, issue_url, body):
        self.comments.append((issue_url, body))

    def list_labels(self, issue_url):
        self.listed += 1
        return list(self.labels)

    def add_label(self, issue_url, label):
        self.added.append(label)

    def remove_label(self, issue_url, label):
        self.removed.append(label)


@pytest.fixture
def settings():
    return LabelSettings("S-queued", "S-completed", "^S-")


def test_render_lines_then_notes():
    text = Message().line("tada", "done").line("bar_chart", "stats").note("warning", "careful").render()
    assert text.startswith(":tada: done\n:bar_chart: stats\n")
    parts = text.split("\n\n")
    assert parts[1] == ":warning: careful"
    assert parts[-1].startswith(":information_source: ")


def test_render_learn_more_link():
    text = Message("https://docs.example.com").render()
    assert text.endswith("[Learn more](https://docs.example.com)")


def test_send_posts_rendered_body_without_label(settings):
    github = FakeGitHub(["S-queued"])
    message = Message().line("ping_pong", "**Pong!**")
    message.send(ISSUE, github, settings)
    assert github.comments == [(ISSUE, message.render())]
    assert github.listed == 0
    assert github.added == []


def test_send_replaces_matching_labels(settings):
    github = FakeGitHub(["S-queued", "bug", "S-other"])
    Message().line("tada", "done").set_label(MessageLabel.EXPERIMENT_COMPLETED).send(
        ISSUE, github, settings
    )
    assert github.removed == ["S-queued", "S-other"]
    assert github.added == ["S-completed"]


def test_send_keeps_label_already_present(settings):
    github = FakeGitHub(["S-queued", "S-other"])
    Message().set_label(MessageLabel.EXPERIMENT_QUEUED).send(ISSUE, github, settings)
    assert github.removed == ["S-other"]
    assert github.added == []


def test_label_settings_compile_pattern(settings):
    assert settings.remove.search("S-anything")
    assert not settings.remove.search("bug")


def test_builder_returns_same_message():
    message = Message()
    assert message.line("a", "b") is message
    assert message.note("c", "d") is message
    assert message.set_label(MessageLabel.EXPERIMENT_QUEUED) is message