"""Toolchain specifications such as ``stable+rustflags=-Dwarnings``."""

from __future__ import annotations

from dataclasses import dataclass

_FILENAME_UNSAFE = frozenset(b'<>:"/\\|?*')


class ToolchainParseError(ValueError):
    """Raised when a toolchain or patch specification is malformed."""

    @classmethod
    def empty_name(cls) -> ToolchainParseError:
        return cls("empty toolchain name")

    @classmethod
    def invalid_source_name(cls, name: str) -> ToolchainParseError:
        return cls(f"invalid toolchain source name: {name}")

    @classmethod
    def invalid_flag(cls, flag: str) -> ToolchainParseError:
        return cls(f"invalid toolchain flag: {flag}")


@dataclass(frozen=True)
class DistSource:
    """A toolchain released through the distribution channels."""

    name: str


@dataclass(frozen=True)
class CiSource:
    """A toolchain built by continuous integration for a commit."""

    sha: str
    alt: bool = False


@dataclass(frozen=True)
class CratePatch:
    """Replacement of a crate by a branch of a git repository."""

    name: str
    repo: str
    branch: str

    @classmethod
    def parse(cls, text: str) -> CratePatch:
        """Parse ``name=repo=branch``."""
        params = text.split("=")
        if len(params) != 3:
            raise ToolchainParseError.invalid_flag(text)
        return cls(*params)

    def __str__(self) -> str:
        return f"{self.name}={self.repo}={self.branch}"


def _is_filename_safe(byte: int) -> bool:
    return 0x20 <= byte < 0x7F and byte not in _FILENAME_UNSAFE


@dataclass(frozen=True)
class Toolchain:
    """A toolchain source together with the flags it is run with."""

    source: DistSource | CiSource
    target: str | None = None
    rustflags: str | None = None
    rustdocflags: str | None = None
    cargoflags: str | None = None
    ci_try: bool = False
    patches: tuple[CratePatch, ...] = ()

    @classmethod
    def parse(cls, text: str) -> Toolchain:
        """Parse a specification such as ``try#<sha>+target=<triple>``."""
        raw_source, *parts = text.split("+")

        ci_try = False
        source: DistSource | CiSource
        if "#" in raw_source:
            source_name, _, sha = raw_source.partition("#")
            if not sha:
                raise ToolchainParseError.empty_name()
            if source_name == "try":
                ci_try = True
            elif source_name != "master":
                raise ToolchainParseError.invalid_source_name(source_name)
            source = CiSource(sha, alt=False)
        elif not raw_source:
            raise ToolchainParseError.empty_name()
        else:
            source = DistSource(raw_source)

        flags: dict[str, str] = {}
        patches: list[CratePatch] = []
        for part in parts:
            flag, sep, value = part.partition("=")
            if not sep:
                raise ToolchainParseError.invalid_flag(part)
            if not value:
                raise ToolchainParseError.invalid_flag(flag)
            if flag == "patch":
                patches.append(CratePatch.parse(value))
            elif flag in ("rustflags", "rustdocflags", "cargoflags", "target"):
                flags[flag] = value
            else:
                raise ToolchainParseError.invalid_flag(flag)

        return cls(source=source, ci_try=ci_try, patches=tuple(patches), **flags)

    def to_path_component(self) -> str:
        """Return the name percent-encoded so it is a valid file name."""
        return "".join(
            chr(byte) if _is_filename_safe(byte) else f"%{byte:02X}"
            for byte in str(self).encode("utf-8")
        )

    def __str__(self) -> str:
        if isinstance(self.source, DistSource):
            pieces = [self.source.name]
        elif isinstance(self.source, CiSource):
            prefix = "try" if self.ci_try else "master"
            pieces = [f"{prefix}#{self.source.sha}"]
        else:
            raise TypeError(f"unsupported toolchain source: {self.source!r}")

        for flag in ("target", "rustflags", "rustdocflags", "cargoflags"):
            value = getattr(self, flag)
            if value is not None:
                pieces.append(f"{flag}={value}")
        pieces.extend(f"patch={patch}" for patch in self.patches)
        return "+".join(pieces)