"""Runtime module for running external tools and parsing their output.

This module provides process launching, non-blocking per-stream reading with
line buffering, and the poll-then-drain aggregation that guarantees every
byte a tool writes is parsed exactly once.
"""

from __future__ import annotations

from .line_buffer import LineBuffer
from .pipes import PipeStream, RawStream
from .process_runner import ProcessRunner, ProcessSpec
from .stream_reader import MirrorSink, ReaderState, StreamReader
from .system_process import ExecutionContext, ProcessResult, SystemProcess

__all__ = [
    "ExecutionContext",
    "LineBuffer",
    "MirrorSink",
    "PipeStream",
    "ProcessResult",
    "ProcessRunner",
    "ProcessSpec",
    "RawStream",
    "ReaderState",
    "StreamReader",
    "SystemProcess",
]
