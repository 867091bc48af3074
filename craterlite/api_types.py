"""Responses of the agent API and the agent authentication token."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, fields, is_dataclass
from enum import Enum
from http import HTTPStatus
from typing import Any

CONTENT_TYPE = "application/json"


class ApiStatus(Enum):
    """Outcome of an API call, with its wire name and HTTP status."""

    SUCCESS = ("success", HTTPStatus.OK)
    SLOW_DOWN = ("slow-down", HTTPStatus.TOO_MANY_REQUESTS)
    INTERNAL_ERROR = ("internal-error", HTTPStatus.INTERNAL_SERVER_ERROR)
    UNAUTHORIZED = ("unauthorized", HTTPStatus.UNAUTHORIZED)
    NOT_FOUND = ("not-found", HTTPStatus.NOT_FOUND)

    def __init__(self, wire: str, http_status: HTTPStatus) -> None:
        self.wire = wire
        self.http_status = http_status


def _plain(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: _plain(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return _plain(value.value)
    if isinstance(value, Mapping):
        return {str(key): _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_plain(item) for item in value]
    return value


@dataclass(frozen=True)
class ApiResponse:
    """A tagged response sent back to agents."""

    status: ApiStatus
    result: Any = None
    error: str | None = None

    @classmethod
    def success(cls, result: Any) -> ApiResponse:
        return cls(ApiStatus.SUCCESS, result=result)

    @classmethod
    def slow_down(cls) -> ApiResponse:
        return cls(ApiStatus.SLOW_DOWN)

    @classmethod
    def internal_error(cls, error: str) -> ApiResponse:
        return cls(ApiStatus.INTERNAL_ERROR, error=error)

    @classmethod
    def unauthorized(cls) -> ApiResponse:
        return cls(ApiStatus.UNAUTHORIZED)

    @classmethod
    def not_found(cls) -> ApiResponse:
        return cls(ApiStatus.NOT_FOUND)

    def status_code(self) -> int:
        """The HTTP status code this response is sent with."""
        return int(self.status.http_status)

    def to_dict(self) -> dict[str, Any]:
        """The JSON-ready form, tagged by ``status``."""
        body: dict[str, Any] = {"status": self.status.wire}
        if self.status is ApiStatus.SUCCESS:
            body["result"] = _plain(self.result)
        elif self.status is ApiStatus.INTERNAL_ERROR:
            body["error"] = self.error
        return body

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


@dataclass(frozen=True)
class CraterToken:
    """The value of an agent's ``Authorization`` header."""

    token: str

    @classmethod
    def parse(cls, text: str) -> CraterToken:
        return cls(text)

    def __str__(self) -> str:
        return f"CraterToken {self.token}"