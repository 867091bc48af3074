"""Splitting of command lines that may contain quotes and escapes."""


class UnbalancedQuotesError(ValueError):
    """A double quote was opened and never closed."""

    def __init__(self) -> None:
        super().__init__("unbalanced quotes")


def split_quoted(text: str) -> list[str]:
    """Split on spaces and tabs, honouring double quotes and backslash escapes.

    Consecutive separators yield empty segments, as does a trailing one.
    """
    segments: list[str] = []
    buffer: list[str] = []
    quoted = False
    escaped = False

    for char in text:
        if escaped:
            buffer.append(char)
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == '"':
            quoted = not quoted
        elif char in " \t" and not quoted:
            segments.append("".join(buffer))
            buffer = []
        else:
            buffer.append(char)

    if quoted:
        raise UnbalancedQuotesError()
    segments.append("".join(buffer))
    return segments