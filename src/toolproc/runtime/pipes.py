"""Raw byte stream adapters for child process pipes.

toolproc runtime module v0.1.0

This module provides:
- RawStream: the byte-level protocol StreamReader consumes
- PipeStream: RawStream over a subprocess pipe

Availability is reported without blocking:
- POSIX: FIONREAD ioctl on the pipe descriptor
- Windows: PeekNamedPipe on the pipe handle

Availability may under-report what the child eventually writes, so callers
poll repeatedly and finish with a blocking read_all().
"""

from __future__ import annotations

import logging
import os
import struct
import sys
from typing import BinaryIO, Protocol, runtime_checkable

__all__ = [
    "IS_WINDOWS",
    "PipeStream",
    "RawStream",
]

logger = logging.getLogger(__name__)

IS_WINDOWS = sys.platform == "win32"

# Chunk size for the final blocking drain
READ_CHUNK_SIZE = 65536


@runtime_checkable
class RawStream(Protocol):
    """Byte stream with a non-blocking availability check."""

    def available(self) -> int:
        """Bytes readable right now without blocking."""
        ...

    def read(self, size: int) -> bytes:
        """Read at most size bytes; may return fewer."""
        ...

    def read_all(self) -> bytes:
        """Block until end of stream and return everything left."""
        ...

    def close(self) -> None:
        ...


class PipeStream:
    """RawStream over a pipe file object from subprocess.Popen.

    Reads go straight to the descriptor with os.read so no bytes are held
    back in a Python-level buffer where available() cannot see them.

    Args:
        file: Binary pipe (e.g. process.stdout)
        name: Stream name used in log messages
    """

    def __init__(self, file: BinaryIO, name: str = "pipe") -> None:
        self._file = file
        self._fd = file.fileno()
        self.name = name
        self._eof = False

    @property
    def closed(self) -> bool:
        return self._file.closed

    def available(self) -> int:
        if self._eof or self._file.closed:
            return 0
        if IS_WINDOWS:
            return _peek_named_pipe(self._fd)
        return _fionread(self._fd)

    def read(self, size: int) -> bytes:
        if size <= 0 or self._eof:
            return b""
        data = os.read(self._fd, size)
        if not data:
            self._eof = True
        return data

    def read_all(self) -> bytes:
        if self._eof:
            return b""
        chunks: list[bytes] = []
        while True:
            chunk = os.read(self._fd, READ_CHUNK_SIZE)
            if not chunk:
                break
            chunks.append(chunk)
        self._eof = True
        data = b"".join(chunks)
        logger.debug(f"Drained {len(data)} bytes from {self.name}")
        return data

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()


def _fionread(fd: int) -> int:
    """Return the number of bytes queued on a POSIX pipe."""
    import fcntl
    import termios

    result = fcntl.ioctl(fd, termios.FIONREAD, b"\0\0\0\0")
    return struct.unpack("i", result)[0]


def _peek_named_pipe(fd: int) -> int:
    """Return the number of bytes queued on a Windows anonymous pipe."""
    import ctypes
    import msvcrt
    from ctypes import wintypes

    handle = msvcrt.get_osfhandle(fd)
    available = wintypes.DWORD()
    kernel32 = ctypes.windll.kernel32
    if not kernel32.PeekNamedPipe(handle, None, 0, None, ctypes.byref(available), None):
        # Broken pipe: the writer is gone, read_all() picks up the rest
        return 0
    return available.value
