"""Secrets and agent tokens loaded from a TOML file."""

from __future__ import annotations

import tomllib
from collections.abc import Collection, Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

TOKENS_PATH = "tokens.toml"


@dataclass(frozen=True)
class S3Region:
    """A bucket hosted in an S3 region."""

    region: str


@dataclass(frozen=True)
class CustomRegion:
    """A bucket hosted behind a custom S3-compatible endpoint."""

    url: str


BucketRegion = S3Region | CustomRegion


@dataclass(frozen=True)
class BotTokens:
    """Credentials of the issue-tracker bot."""

    webhooks_secret: str
    api_token: str


@dataclass(frozen=True)
class ReportsBucket:
    """Where generated reports are uploaded to."""

    region: BucketRegion
    bucket: str
    public_url: str
    access_key: str
    secret_key: str


def _table(value: Any, context: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValueError(f"invalid type for {context}: expected a table")
    return value


def _string(table: Mapping[str, Any], key: str, context: str) -> str:
    if key not in table:
        raise ValueError(f"missing field `{key}` in {context}")
    value = table[key]
    if not isinstance(value, str):
        raise ValueError(f"invalid type for `{key}` in {context}: expected a string")
    return value


def _string_fields(
    table: Mapping[str, Any], cls: type, context: str, skip: Collection[str] = ()
) -> dict[str, str]:
    """Read the string fields of ``cls`` from their kebab-case keys in ``table``."""
    return {
        f.name: _string(table, f.name.replace("_", "-"), context)
        for f in fields(cls)
        if f.name not in skip
    }


def _region(value: Any) -> BucketRegion:
    table = _table(value, "region")
    kind = _string(table, "type", "region")
    if kind == "s3":
        return S3Region(_string(table, "region", "region"))
    if kind == "custom":
        return CustomRegion(_string(table, "url", "region"))
    raise ValueError(f"unknown variant `{kind}`, expected `s3` or `custom`")


def _bot(value: Any) -> BotTokens:
    table = _table(value, "bot")
    return BotTokens(**_string_fields(table, BotTokens, "bot"))


def _bucket(value: Any) -> ReportsBucket:
    table = _table(value, "reports-bucket")
    if "region" not in table:
        raise ValueError("missing field `region` in reports-bucket")
    return ReportsBucket(
        region=_region(table["region"]),
        **_string_fields(table, ReportsBucket, "reports-bucket", skip={"region"}),
    )


@dataclass(frozen=True)
class Tokens:
    """All the secrets the server needs."""

    reports_bucket: ReportsBucket
    agents: dict[str, str] = field(default_factory=dict)
    bot: BotTokens | None = None

    @classmethod
    def from_toml(cls, text: str) -> Tokens:
        """Parse the contents of a tokens file."""
        document = tomllib.loads(text)
        if "reports-bucket" not in document:
            raise ValueError("missing field `reports-bucket`")
        if "agents" not in document:
            raise ValueError("missing field `agents`")
        agents = _table(document["agents"], "agents")
        for token, name in agents.items():
            if not isinstance(name, str):
                raise ValueError(f"invalid agent name for token `{token}`")
        bot = document.get("bot")
        return cls(
            reports_bucket=_bucket(document["reports-bucket"]),
            agents=dict(agents),
            bot=_bot(bot) if bot is not None else None,
        )

    @classmethod
    def load(cls, path: str | Path = TOKENS_PATH) -> Tokens:
        """Read and parse the tokens file at ``path``."""
        try:
            content = Path(path).read_text(encoding="utf-8")
        except FileNotFoundError as err:
            raise FileNotFoundError(f"could not find {path}") from err
        return cls.from_toml(content)