"""Human-readable byte sizes such as ``512M`` or ``2GB``."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

_COUNT_RE = re.compile(r"\+?[0-9]+")


class SizeUnit(Enum):
    """Unit of a size, with its display suffix and byte multiplier."""

    BYTES = ("", 1)
    KILOBYTES = ("K", 1024)
    MEGABYTES = ("M", 1024**2)
    GIGABYTES = ("G", 1024**3)
    TERABYTES = ("T", 1024**4)

    def __init__(self, suffix: str, multiplier: int) -> None:
        self.suffix = suffix
        self.multiplier = multiplier


_UNIT_BY_LETTER = {
    unit.suffix.lower(): unit for unit in SizeUnit if unit.suffix
}


@dataclass(frozen=True)
class Size:
    """A count of some unit of bytes."""

    count: int
    unit: SizeUnit = SizeUnit.BYTES

    def __post_init__(self) -> None:
        if not isinstance(self.count, int) or self.count < 0:
            raise ValueError(f"invalid size count: {self.count!r}")

    @classmethod
    def parse(cls, text: str) -> Size:
        """Parse a size like ``1234``, ``12k``, ``3MB`` or ``4Gb``."""
        if not text:
            raise ValueError("empty size")
        if text[-1] in "bB":
            text = text[:-1]
            if not text:
                raise ValueError("empty size")

        unit = _UNIT_BY_LETTER.get(text[-1].lower())
        if unit is None:
            unit, digits = SizeUnit.BYTES, text
        else:
            digits = text[:-1]

        if not _COUNT_RE.fullmatch(digits):
            raise ValueError(f"invalid size number: {digits!r}")
        return cls(int(digits), unit)

    def to_bytes(self) -> int:
        """Return the size in bytes."""
        return self.count * self.unit.multiplier

    def __str__(self) -> str:
        return f"{self.count}{self.unit.suffix}"