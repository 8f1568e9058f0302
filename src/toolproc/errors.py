"""toolproc exception types.

toolproc v0.1.0
"""

from __future__ import annotations

from typing import Any, Sequence

__all__ = [
    "ToolprocError",
    "LaunchError",
    "ParserError",
]


class ToolprocError(Exception):
    """Base exception for toolproc."""
    pass


class LaunchError(ToolprocError):
    """The executable could not be found or started.

    This is a spawn-time failure, distinct from a non-zero exit code.

    Attributes:
        argv: Argument vector that failed to launch
    """

    def __init__(self, argv: Sequence[str], message: str) -> None:
        self.argv = list(argv)
        self.message = message
        super().__init__(f"failed to launch {self.argv[0] if self.argv else '<empty>'}: {message}")


class ParserError(ToolprocError):
    """A configured output parser raised while handling a line.

    Attributes:
        line: The decoded line being parsed
        stream: Name of the stream the line came from (stdout/stderr)
        results: Items collected before the failure
    """

    def __init__(self, line: str, stream: str, message: str) -> None:
        self.line = line
        self.stream = stream
        self.message = message
        self.results: list[Any] = []
        super().__init__(f"[{stream}] failed to parse {line!r}: {message}")
