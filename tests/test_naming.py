import sqlite3

import pytest

from craterlite.naming import ExperimentNames


class _Experiments:
    def __init__(self):
        self.names = set()

    def exists(self, name):
        return name in self.names

    def create(self, name):
        if name in self.names:
            raise ValueError(f"experiment {name} already exists")
        self.names.add(name)


@pytest.fixture
def experiments():
    return _Experiments()


@pytest.fixture
def names(experiments):
    with ExperimentNames(experiments.exists) as store:
        yield store


def dummy_run(names, experiments, issue, name=None):
    name = names.setup_run_name(issue, name)
    experiments.create(name)
    return name


def dummy_edit(names, issue, name=None):
    return names.get_name(issue, True, name)


def test_default_experiment_name(names):
    assert names.default_name(1, False) is None
    assert names.default_name(2, True) == "pr-2"
    names.store(2, "foo")
    assert names.default_name(2, True) == "foo"


def test_saved_name_used_even_for_plain_issue(names):
    names.store(7, "custom")
    assert names.default_name(7, False) == "custom"


def test_run(names, experiments):
    assert dummy_run(names, experiments, 1, "pr-1") == "pr-1"
    with pytest.raises(ValueError):
        dummy_run(names, experiments, 1, "pr-1")

    assert dummy_run(names, experiments, 2) == "pr-2"
    assert dummy_run(names, experiments, 2) == "pr-2-1"
    assert dummy_run(names, experiments, 2) == "pr-2-2"
    assert dummy_run(names, experiments, 1, "pr-2-custom") == "pr-2-custom"
    assert dummy_run(names, experiments, 2) == "pr-2-3"


def test_edit(names, experiments):
    assert dummy_run(names, experiments, 1, "pr-1-custom") == "pr-1-custom"
    assert dummy_edit(names, 1) == "pr-1-custom"

    assert dummy_run(names, experiments, 2) == "pr-2"
    assert dummy_edit(names, 2) == "pr-2"
    assert dummy_edit(names, 2) == "pr-2"
    assert dummy_run(names, experiments, 2) == "pr-2-1"
    assert dummy_edit(names, 2) == "pr-2-1"


def test_get_name_with_explicit_name_is_saved(names):
    assert names.get_name(3, False, "explicit") == "explicit"
    assert names.get_name(3, False) == "explicit"


def test_get_name_missing(names):
    with pytest.raises(ValueError, match="missing experiment name"):
        names.get_name(4, False)


def test_generate_new_experiment_name(names, experiments):
    experiments.create("pr-12345")
    assert names.generate_new_name(12345) == "pr-12345-1"
    experiments.create("pr-12345-1")
    assert names.generate_new_name(12345) == "pr-12345-2"


def test_generate_new_name_is_not_saved(names):
    assert names.generate_new_name(9) == "pr-9"
    assert names.default_name(9, False) is None


def test_generate_new_name_gives_up(names):
    always = ExperimentNames(lambda _name: True)
    with pytest.raises(ValueError, match="too many similarly-named pull requests"):
        always.generate_new_name(5)
    always.close()


def test_shared_connection_persists_names():
    conn = sqlite3.connect(":memory:")
    first = ExperimentNames(lambda _name: False, conn)
    first.store(11, "kept")
    second = ExperimentNames(lambda _name: False, conn)
    assert second.default_name(11, False) == "kept"
    conn.close()