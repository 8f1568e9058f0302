"""Pytest configuration and fixtures."""

from __future__ import annotations

import sys
from collections import deque
from pathlib import Path
from typing import Iterable

import pytest

# Project root
PROJECT_ROOT = Path(__file__).parent.parent

# Add src to the Python path
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

FAKE_TOOL = Path(__file__).parent / "fixtures" / "fake_tool.py"


class FakeStream:
    """Scripted RawStream.

    Each chunk becomes visible to available() in turn; tail is only
    delivered by read_all(), like output that arrives after process exit.

    Args:
        chunks: Byte chunks revealed one per availability check
        tail: Bytes only read_all() returns
        max_read: Cap on bytes returned per read() (short reads)
    """

    def __init__(
        self,
        chunks: Iterable[bytes] = (),
        tail: bytes = b"",
        max_read: int | None = None,
    ) -> None:
        self._chunks = deque(chunk for chunk in chunks if chunk)
        self.tail = tail
        self.max_read = max_read
        self.available_calls = 0
        self.read_calls = 0
        self.read_all_calls = 0
        self.closed = False

    def available(self) -> int:
        self.available_calls += 1
        return len(self._chunks[0]) if self._chunks else 0

    def read(self, size: int) -> bytes:
        self.read_calls += 1
        if not self._chunks:
            return b""
        chunk = self._chunks[0]
        count = min(size, len(chunk))
        if self.max_read is not None:
            count = min(count, self.max_read)
        data, rest = chunk[:count], chunk[count:]
        if rest:
            self._chunks[0] = rest
        else:
            self._chunks.popleft()
        return data

    def read_all(self) -> bytes:
        self.read_all_calls += 1
        data = b"".join(self._chunks) + self.tail
        self._chunks.clear()
        self.tail = b""
        return data

    def close(self) -> None:
        self.closed = True


class RecordingParser:
    """Parser mapping "lineN" to "parsedLineN" and recording every call."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def parse_line(self, line: str) -> str:
        self.calls.append(line)
        return "parsed" + line[:1].upper() + line[1:]


class RecordingSink:
    """Mirror sink recording every write."""

    def __init__(self) -> None:
        self.writes: list[str] = []
        self.flushes = 0

    def write(self, text: str) -> int:
        self.writes.append(text)
        return len(text)

    def flush(self) -> None:
        self.flushes += 1

    @property
    def text(self) -> str:
        return "".join(self.writes)


@pytest.fixture
def fake_tool() -> list[str]:
    """Argument vector prefix running the fake tool."""
    return [sys.executable, str(FAKE_TOOL)]


@pytest.fixture
def parser() -> RecordingParser:
    return RecordingParser()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture(autouse=True)
def clean_config(monkeypatch: pytest.MonkeyPatch):
    """Isolate tests from TOOLPROC_* variables and the cached config."""
    from toolproc import config

    for name in (
        "TOOLPROC_POLL_INTERVAL",
        "TOOLPROC_ENCODING",
        "TOOLPROC_TERM_TIMEOUT",
        "TOOLPROC_KILL_TIMEOUT",
        "TOOLPROC_LOG_DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)
    config.reload_config()
    yield
    config._config = None
