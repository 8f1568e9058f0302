"""Generic text line parsers."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

__all__ = [
    "NonEmptyLineParser",
    "RawLineParser",
    "RegexParser",
]


class RawLineParser:
    """Returns every line unchanged."""

    def parse_line(self, line: str) -> str:
        return line


class NonEmptyLineParser:
    """Returns stripped lines, skipping blank ones."""

    def parse_line(self, line: str) -> str | None:
        stripped = line.strip()
        return stripped or None


@dataclass
class RegexParser:
    """Returns a capture group of lines matching a pattern.

    Lines that do not match yield no item.

    Attributes:
        pattern: Regular expression (searched, not anchored)
        group: Group index or name to return (0 = whole match)
    """

    pattern: str
    group: int | str = 0
    _regex: re.Pattern[str] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._regex = re.compile(self.pattern)

    def parse_line(self, line: str) -> str | None:
        match = self._regex.search(line)
        if match is None:
            return None
        return match.group(self.group)
