"""Output parsers.

A parser maps one line of tool output to zero or one typed item. Use
create_parser() to look one up by name.
"""

from __future__ import annotations

from typing import Any, Callable

from .adb import (
    AdbDevice,
    AdbDevicesParser,
    PackageEntry,
    PackageListParser,
    PackagePathParser,
)
from .base import FunctionParser, OutputParser
from .text import NonEmptyLineParser, RawLineParser, RegexParser

__all__ = [
    "AdbDevice",
    "AdbDevicesParser",
    "FunctionParser",
    "NonEmptyLineParser",
    "OutputParser",
    "PARSERS",
    "PackageEntry",
    "PackageListParser",
    "PackagePathParser",
    "RawLineParser",
    "RegexParser",
    "create_parser",
]

PARSERS: dict[str, Callable[[], OutputParser[Any]]] = {
    "lines": RawLineParser,
    "nonempty": NonEmptyLineParser,
    "adb-devices": AdbDevicesParser,
    "packages": PackageListParser,
    "package-paths": PackagePathParser,
}


def create_parser(name: str) -> OutputParser[Any]:
    """Create a parser by name.

    Args:
        name: One of PARSERS

    Returns:
        A new parser instance

    Raises:
        ValueError: If the name is unknown
    """
    factory = PARSERS.get(name.lower())
    if factory is None:
        raise ValueError(
            f"unknown parser: {name} (available: {', '.join(sorted(PARSERS))})"
        )
    return factory()
