import pytest

from craterlite.args import (
    COMMAND_PARSER,
    CommandParser,
    DuplicateKeyError,
    InvalidArgumentError,
    ParsedCommand,
    Subcommand,
    UnknownKeyError,
    parse_int,
)
from craterlite.quoting import UnbalancedQuotesError
from craterlite.toolchain import Toolchain


@pytest.fixture
def parser():
    return CommandParser(
        [
            Subcommand(
                "foo",
                ("foo",),
                {"arg1": ("arg1", parse_int), "arg2": ("arg2", str)},
            ),
            Subcommand("bar", ("bar", "bar-alias"), {"arg3": ("arg3", str)}),
        ],
        default=Subcommand("baz", (), {"arg4": ("arg4", parse_int)}),
    )


@pytest.mark.parametrize(
    "text, expected",
    [
        ("foo", ParsedCommand("foo", {"arg1": None, "arg2": None})),
        ("bar", ParsedCommand("bar", {"arg3": None})),
        ("bar-alias", ParsedCommand("bar", {"arg3": None})),
        ("", ParsedCommand("baz", {"arg4": None})),
        ("foo arg1=98", ParsedCommand("foo", {"arg1": 98, "arg2": None})),
        ("foo arg2=bar arg1=98", ParsedCommand("foo", {"arg1": 98, "arg2": "bar"})),
        ("bar  arg3=foo=bar", ParsedCommand("bar", {"arg3": "foo=bar"})),
        ('bar arg3="foo \\" bar"', ParsedCommand("bar", {"arg3": 'foo " bar'})),
        ('bar-alias arg3="foo \\" bar"', ParsedCommand("bar", {"arg3": 'foo " bar'})),
        ("arg4=42", ParsedCommand("baz", {"arg4": 42})),
    ],
)
def test_command_parsing(parser, text, expected):
    assert parser.parse(text) == expected


def test_duplicate_key(parser):
    with pytest.raises(DuplicateKeyError) as info:
        parser.parse("foo arg1=98 arg1=42")
    assert info.value.key == "arg1"


@pytest.mark.parametrize("text, key", [("bar arg1=98", "arg1"), ("foo arg4=42", "arg4")])
def test_unknown_key(parser, text, key):
    with pytest.raises(UnknownKeyError) as info:
        parser.parse(text)
    assert info.value.key == key


def test_invalid_argument(parser):
    with pytest.raises(InvalidArgumentError) as info:
        parser.parse("foo bar")
    assert info.value.argument == "bar"


def test_invalid_value(parser):
    with pytest.raises(ValueError):
        parser.parse("foo arg1=abc")


def test_unbalanced_quotes(parser):
    with pytest.raises(UnbalancedQuotesError):
        parser.parse('bar arg3="foo')


def test_run_command():
    parsed = COMMAND_PARSER.parse("run start=stable end=beta+rustflags=foo p=5 ignore-blacklist=true")
    assert parsed.name == "run"
    assert parsed.args["start"] == Toolchain.parse("stable")
    assert parsed.args["end"] == Toolchain.parse("beta+rustflags=foo")
    assert parsed.args["priority"] == 5
    assert parsed.args["ignore_blacklist"] is True
    assert parsed.args["name"] is None


def test_cancel_is_abort():
    parsed = COMMAND_PARSER.parse("cancel name=foo")
    assert parsed == ParsedCommand("abort", {"name": "foo"})


def test_ping_and_reload():
    assert COMMAND_PARSER.parse("ping") == ParsedCommand("ping", {})
    assert COMMAND_PARSER.parse("reload-acl") == ParsedCommand("reload-acl", {})


def test_default_is_edit():
    parsed = COMMAND_PARSER.parse("name=foo cap-lints=warn")
    assert parsed.name == "edit"
    assert parsed.args["name"] == "foo"
    assert parsed.args["cap_lints"] == "warn"


def test_check_has_no_mode():
    with pytest.raises(UnknownKeyError) as info:
        COMMAND_PARSER.parse("check mode=clippy")
    assert info.value.key == "mode"


def test_bad_bool_rejected():
    with pytest.raises(ValueError):
        COMMAND_PARSER.parse("run ignore-blacklist=yes")


def test_bad_toolchain_rejected():
    with pytest.raises(ValueError):
        COMMAND_PARSER.parse("run start=foo#0000000")


def test_parse_int_range():
    assert parse_int("-5") == -5
    with pytest.raises(ValueError):
        parse_int("99999999999")