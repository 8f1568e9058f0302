"""Incremental reader for one child process output stream.

toolproc runtime module v0.1.0

This module provides:
- StreamReader: polls a RawStream without blocking, splits lines, parses them
- ReaderState: IDLE -> POLLING -> DRAINING -> DONE
- MirrorSink: text-stream-like echo target

Key design points:
- read_available() never blocks; it only reads what the stream reports
- Partial lines and split multi-byte characters are carried to the next call
- read_remaining() is the single blocking drain after process exit; it
  flushes the unterminated tail so no bytes are lost
"""

from __future__ import annotations

import codecs
import logging
from enum import Enum
from typing import Any, Generic, Protocol

from ..errors import ParserError
from ..parsers.base import OutputParser, T
from .line_buffer import LineBuffer
from .pipes import RawStream

__all__ = [
    "MirrorSink",
    "ReaderState",
    "StreamReader",
]

logger = logging.getLogger(__name__)


class MirrorSink(Protocol):
    """Passive echo target, e.g. sys.stdout or io.StringIO."""

    def write(self, text: str, /) -> Any:
        ...


class ReaderState(str, Enum):
    """Reader lifecycle."""

    IDLE = "idle"
    POLLING = "polling"
    DRAINING = "draining"
    DONE = "done"


class StreamReader(Generic[T]):
    """Reads, mirrors, and parses one output stream.

    Owns its LineBuffer and decoder exclusively; one reader per stream per
    execution.

    Args:
        stream: Raw byte stream
        parser: Line parser (None = lines are consumed but yield no items)
        mirror: Echo target for raw text (None = no echo)
        name: Stream name for errors and logs
        encoding: Text encoding of the stream
    """

    def __init__(
        self,
        stream: RawStream,
        parser: OutputParser[T] | None = None,
        mirror: MirrorSink | None = None,
        *,
        name: str = "stdout",
        encoding: str = "utf-8",
    ) -> None:
        self._stream = stream
        self._parser = parser
        self._mirror = mirror
        self.name = name
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = LineBuffer()
        self._state = ReaderState.IDLE
        self.lines_read = 0

    @property
    def state(self) -> ReaderState:
        return self._state

    @property
    def pending(self) -> str:
        """Text waiting for its line terminator."""
        return self._buffer.pending

    def read_available(self) -> list[T]:
        """Consume whatever the stream has right now.

        Returns:
            Items parsed from lines completed during this call
        """
        if self._state in (ReaderState.DRAINING, ReaderState.DONE):
            return []
        self._state = ReaderState.POLLING

        items: list[T] = []
        # A read may return fewer bytes than reported; keep going until the
        # stream reports nothing more
        while True:
            available = self._stream.available()
            if available <= 0:
                break

            data = self._stream.read(available)
            if not data:
                break

            text = self._decoder.decode(data)
            self._mirror_text(text)
            try:
                items += self._parse_lines(self._buffer.append(text))
            except ParserError as e:
                e.results = items + e.results
                raise
        return items

    def read_remaining(self) -> list[T]:
        """Drain the stream to end of file and flush every pending line.

        Must be called exactly once, after the process has exited.

        Returns:
            Items parsed from all remaining lines, including a final line
            without trailing newline

        Raises:
            RuntimeError: If called more than once
        """
        if self._state in (ReaderState.DRAINING, ReaderState.DONE):
            raise RuntimeError(f"{self.name} has already been drained")
        self._state = ReaderState.DRAINING

        data = self._stream.read_all()
        text = self._decoder.decode(data, final=True)
        self._mirror_text(text)

        lines = self._buffer.append(text)
        lines.extend(self._buffer.drain())
        items = self._parse_lines(lines)

        self._state = ReaderState.DONE
        logger.debug(f"{self.name} done: {self.lines_read} lines")
        return items

    def _mirror_text(self, text: str) -> None:
        if self._mirror is None or not text:
            return
        self._mirror.write(text)
        flush = getattr(self._mirror, "flush", None)
        if flush is not None:
            flush()

    def _parse_lines(self, lines: list[str]) -> list[T]:
        self.lines_read += len(lines)
        if self._parser is None:
            return []

        items: list[T] = []
        for line in lines:
            try:
                item = self._parser.parse_line(line)
            except Exception as e:
                error = ParserError(line, self.name, str(e) or type(e).__name__)
                error.results = items
                raise error from e
            if item is not None:
                items.append(item)
        return items
