"""Output parser interface.

toolproc parsers v0.1.0

A parser turns one decoded line of tool output into zero or one typed item.
It is the only extension point through which callers turn raw tool text
(device listings, package listings, ...) into structured data.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Protocol, TypeVar, runtime_checkable

__all__ = [
    "FunctionParser",
    "OutputParser",
    "T",
]

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


@runtime_checkable
class OutputParser(Protocol[T_co]):
    """Maps one line of text to zero-or-one item.

    Implementations return None when the line carries no item
    (headers, blank lines, banners).
    """

    def parse_line(self, line: str) -> T_co | None:
        """Parse a single line.

        Args:
            line: Decoded line without its line terminator

        Returns:
            The parsed item, or None for no item
        """
        ...


@dataclass(frozen=True)
class FunctionParser(Generic[T]):
    """Adapts a plain callable to the OutputParser interface.

    Example:
        parser = FunctionParser(str.upper)
        parser.parse_line("abc")  # -> "ABC"
    """

    func: Callable[[str], T | None]

    def parse_line(self, line: str) -> T | None:
        return self.func(line)
