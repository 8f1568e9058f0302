"""Partial-line accumulator for one output stream."""

from __future__ import annotations

__all__ = ["LineBuffer"]


class LineBuffer:
    """Accumulates decoded text and releases complete lines.

    Only newline-terminated lines leave the buffer through append(); the
    unterminated tail is kept until more text arrives or drain() is called
    at end of stream.

    Example:
        buffer = LineBuffer()
        buffer.append("line1\\nli")   # -> ["line1"]
        buffer.append("ne2\\n")       # -> ["line2"]
        buffer.drain()               # -> []
    """

    __slots__ = ("_fragments", "_size")

    def __init__(self) -> None:
        # Text after the last newline, joined only once a newline arrives
        self._fragments: list[str] = []
        self._size = 0

    @property
    def pending(self) -> str:
        """Text received after the last newline."""
        return "".join(self._fragments)

    def __len__(self) -> int:
        return self._size

    def append(self, text: str) -> list[str]:
        """Add text and return every line it completes.

        Args:
            text: Newly decoded text

        Returns:
            Completed lines without their line terminator
        """
        if not text:
            return []

        self._fragments.append(text)
        if "\n" not in text:
            self._size += len(text)
            return []

        *lines, tail = "".join(self._fragments).split("\n")
        self._fragments = [tail] if tail else []
        self._size = len(tail)
        return [_strip_cr(line) for line in lines]

    def drain(self) -> list[str]:
        """Release the unterminated tail as a final line.

        Returns:
            [tail] if any text is pending, otherwise []
        """
        tail = self.pending
        self._fragments = []
        self._size = 0
        if not tail:
            return []
        return [_strip_cr(tail)]


def _strip_cr(line: str) -> str:
    # CRLF output from Windows tools
    return line[:-1] if line.endswith("\r") else line
