"""Parsing of the commands users give to the bot in issue comments."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from craterlite.quoting import split_quoted
from craterlite.toolchain import Toolchain

Converter = Callable[[str], Any]

_INT_RE = re.compile(r"[+-]?[0-9]+")
_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1


class CommandParseError(ValueError):
    """Raised when a bot command cannot be parsed."""


class MissingCommandError(CommandParseError):
    """The command line is empty."""

    def __init__(self) -> None:
        super().__init__("missing command")


class InvalidArgumentError(CommandParseError):
    """An argument is not of the form ``key=value``."""

    def __init__(self, argument: str) -> None:
        super().__init__(f"invalid argument: {argument}")
        self.argument = argument


class DuplicateKeyError(CommandParseError):
    """The same key was given twice."""

    def __init__(self, key: str) -> None:
        super().__init__(f"duplicate key: {key}")
        self.key = key


class UnknownKeyError(CommandParseError):
    """A key that the command does not accept was given."""

    def __init__(self, key: str) -> None:
        super().__init__(f"unknown key: {key}")
        self.key = key


def parse_int(text: str) -> int:
    """Parse a signed 32-bit integer."""
    if not _INT_RE.fullmatch(text):
        raise ValueError(f"invalid digit found in string: {text!r}")
    value = int(text)
    if not _I32_MIN <= value <= _I32_MAX:
        raise ValueError(f"number out of range: {text!r}")
    return value


def parse_bool(text: str) -> bool:
    """Parse exactly ``true`` or ``false``."""
    if text == "true":
        return True
    if text == "false":
        return False
    raise ValueError(f"provided string was not `true` or `false`: {text!r}")


@dataclass(frozen=True)
class Subcommand:
    """A command, the words that select it and the options it accepts.

    ``options`` maps each key to the attribute it fills and the converter
    applied to its value.
    """

    name: str
    words: tuple[str, ...] = ()
    options: Mapping[str, tuple[str, Converter]] = field(default_factory=dict)


@dataclass(frozen=True)
class ParsedCommand:
    """The selected command and its arguments; absent ones are ``None``."""

    name: str
    args: dict[str, Any]


class CommandParser:
    """Parses command lines into one of several subcommands.

    A line whose first word selects no subcommand is parsed, whole, as the
    default subcommand.
    """

    def __init__(self, commands: Iterable[Subcommand], default: Subcommand) -> None:
        self._default = default
        self._by_word: dict[str, Subcommand] = {}
        for command in commands:
            for word in command.words:
                self._by_word.setdefault(word, command)

    def parse(self, text: str) -> ParsedCommand:
        parts = split_quoted(text)
        if not parts:
            raise MissingCommandError()
        command = self._by_word.get(parts[0])
        if command is None:
            return self._parse_options(self._default, parts)
        return self._parse_options(command, parts[1:])

    @staticmethod
    def _parse_options(command: Subcommand, parts: Sequence[str]) -> ParsedCommand:
        args: dict[str, Any] = {attr: None for attr, _ in command.options.values()}
        for part in parts:
            if not part.strip():
                continue
            key, sep, value = part.partition("=")
            if not sep:
                raise InvalidArgumentError(part)
            spec = command.options.get(key)
            if spec is None:
                raise UnknownKeyError(key)
            attr, convert = spec
            if args[attr] is not None:
                raise DuplicateKeyError(key)
            args[attr] = convert(value)
        return ParsedCommand(command.name, args)


def _experiment_options(with_mode: bool) -> dict[str, tuple[str, Converter]]:
    options: dict[str, tuple[str, Converter]] = {
        "name": ("name", str),
        "start": ("start", Toolchain.parse),
        "end": ("end", Toolchain.parse),
    }
    if with_mode:
        options["mode"] = ("mode", str)
    options.update(
        {
            "crates": ("crates", str),
            "cap-lints": ("cap_lints", str),
            "p": ("priority", parse_int),
            "ignore-blacklist": ("ignore_blacklist", parse_bool),
            "assign": ("assign", str),
            "requirement": ("requirement", str),
        }
    )
    return options


_NAME_ONLY: dict[str, tuple[str, Converter]] = {"name": ("name", str)}

COMMAND_PARSER = CommandParser(
    [
        Subcommand("run", ("run",), _experiment_options(with_mode=True)),
        Subcommand("check", ("check",), _experiment_options(with_mode=False)),
        Subcommand("abort", ("abort", "cancel"), _NAME_ONLY),
        Subcommand("ping", ("ping",)),
        Subcommand("retry-report", ("retry-report",), _NAME_ONLY),
        Subcommand("retry", ("retry",), _NAME_ONLY),
        Subcommand("reload-acl", ("reload-acl",)),
    ],
    default=Subcommand("edit", (), _experiment_options(with_mode=True)),
)