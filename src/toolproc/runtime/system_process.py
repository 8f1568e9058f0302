"""Runs an external tool and collects its parsed output.

toolproc runtime module v0.1.0

This module provides:
- SystemProcess: launches a tool, polls stdout/stderr while it runs, drains
  both after it exits, and returns the ordered parsed items plus exit code
- ProcessResult: the collected items and exit status

Key design points:
- Two phases: poll while alive, then exactly one unconditional drain per
  stream; the drain catches output written between the last poll and exit
- Fixed order: stdout before stderr, in both phases
- execute() runs the blocking work on a worker thread (anyio) so the
  caller's event loop is never blocked
- Every execution owns its own ExecutionContext; nothing is shared
"""

from __future__ import annotations

import dataclasses
import logging
import subprocess
import threading
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Generic

import anyio

from ..config import get_config
from ..errors import LaunchError, ParserError
from ..parsers.base import OutputParser, T
from .pipes import PipeStream
from .process_runner import ProcessRunner, ProcessSpec
from .stream_reader import MirrorSink, StreamReader

__all__ = [
    "ExecutionContext",
    "ProcessResult",
    "SystemProcess",
]

logger = logging.getLogger(__name__)


@dataclass
class ProcessResult(Generic[T]):
    """Result of one tool invocation.

    Attributes:
        items: Parsed items in collection order
        exit_code: Process exit code
        argv: The argument vector that was run
        duration_sec: Wall time from launch to drain completion
    """

    items: list[T]
    exit_code: int
    argv: list[str] = field(default_factory=list)
    duration_sec: float = 0.0

    @property
    def success(self) -> bool:
        return self.exit_code == 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dict."""
        return {
            "argv": self.argv,
            "exit_code": self.exit_code,
            "success": self.success,
            "duration_sec": round(self.duration_sec, 3),
            "items": [_item_to_json(item) for item in self.items],
        }


def _item_to_json(item: Any) -> Any:
    if dataclasses.is_dataclass(item) and not isinstance(item, type):
        return dataclasses.asdict(item)
    return item


@dataclass
class ExecutionContext:
    """Per-execution state.

    Attributes:
        process: Child process (set once launched)
        items: Items collected so far
        cancel_requested: Set by the async caller on cancellation
    """

    process: subprocess.Popen[bytes] | None = None
    items: list[Any] = field(default_factory=list)
    cancel_requested: threading.Event = field(default_factory=threading.Event)


class SystemProcess(Generic[T]):
    """An external tool invocation with parsed output.

    Example:
        process = SystemProcess(
            ["adb", "devices", "-l"],
            stdout_parser=AdbDevicesParser(),
            command_echo=sys.stderr,
            stdout_mirror=sys.stdout,
        )
        result = await process.execute()
        for device in result.items:
            ...

    Args:
        argv: Argument vector; argv[0] is the executable
        stdout_parser: Parser for stdout lines (None = no items from stdout)
        stderr_parser: Parser for stderr lines (None = no items from stderr)
        command_echo: Receives the command line before launch
        stdout_mirror: Receives raw stdout text as it is read
        stderr_mirror: Receives raw stderr text as it is read
        cwd: Working directory
        env: Environment (None = inherit)
        poll_interval: Sleep between polls in seconds (default from config)
        encoding: Output encoding (default from config)
        runner: Process launcher (default ProcessRunner())
    """

    def __init__(
        self,
        argv: list[str],
        stdout_parser: OutputParser[T] | None = None,
        stderr_parser: OutputParser[T] | None = None,
        *,
        command_echo: MirrorSink | None = None,
        stdout_mirror: MirrorSink | None = None,
        stderr_mirror: MirrorSink | None = None,
        cwd: Path | str | None = None,
        env: Mapping[str, str] | None = None,
        poll_interval: float | None = None,
        encoding: str | None = None,
        runner: ProcessRunner | None = None,
    ) -> None:
        config = get_config()
        self.spec = ProcessSpec(
            argv=list(argv),
            cwd=Path(cwd) if cwd is not None else None,
            env=env,
        )
        self._stdout_parser = stdout_parser
        self._stderr_parser = stderr_parser
        self._command_echo = command_echo
        self._stdout_mirror = stdout_mirror
        self._stderr_mirror = stderr_mirror
        self.poll_interval = poll_interval if poll_interval is not None else config.poll_interval
        self.encoding = encoding or config.encoding
        self._runner = runner or ProcessRunner()

    @property
    def argv(self) -> list[str]:
        return self.spec.argv

    async def execute(self) -> ProcessResult[T]:
        """Run the tool without blocking the event loop.

        Returns:
            Parsed items and exit code

        Raises:
            LaunchError: If the executable cannot be started
            ParserError: If a parser fails (results collected so far are
                attached to the error)

        Cancellation terminates the child and re-raises the native
        cancellation exception. Items collected before the cancel are not
        returned; their count is logged with the cancellation warning.
        """
        ctx = ExecutionContext()
        try:
            return await anyio.to_thread.run_sync(
                self._run, ctx, abandon_on_cancel=True
            )
        except anyio.get_cancelled_exc_class():
            logger.warning(
                f"{self.argv[0]} execution cancelled "
                f"(process_alive={ctx.process is not None and ctx.process.poll() is None}, "
                f"items_collected={len(ctx.items)})"
            )
            ctx.cancel_requested.set()
            with anyio.CancelScope(shield=True):
                if ctx.process is not None:
                    await anyio.to_thread.run_sync(self._runner.terminate, ctx.process)
            raise

    def run(self) -> ProcessResult[T]:
        """Run the tool on the calling thread, blocking until it exits.

        Returns:
            Parsed items and exit code
        """
        return self._run(ExecutionContext())

    def _run(self, ctx: ExecutionContext) -> ProcessResult[T]:
        start_time = time.monotonic()
        logger.info(f"Executing: {' '.join(self.argv)}")

        process = self._runner.launch(self.spec, self._command_echo)
        ctx.process = process

        if process.stdout is None or process.stderr is None:
            self._runner.terminate(process)
            raise LaunchError(self.argv, "stdout/stderr pipes were not created")
        stdout_stream = PipeStream(process.stdout, "stdout")
        stderr_stream = PipeStream(process.stderr, "stderr")

        try:
            stdout = StreamReader(
                stdout_stream,
                self._stdout_parser,
                self._stdout_mirror,
                name="stdout",
                encoding=self.encoding,
            )
            stderr = StreamReader(
                stderr_stream,
                self._stderr_parser,
                self._stderr_mirror,
                name="stderr",
                encoding=self.encoding,
            )

            try:
                while process.poll() is None:
                    if ctx.cancel_requested.is_set():
                        self._runner.terminate(process)
                        break
                    ctx.items += stdout.read_available()
                    ctx.items += stderr.read_available()
                    if self.poll_interval > 0:
                        time.sleep(self.poll_interval)

                ctx.items += stdout.read_remaining()
                ctx.items += stderr.read_remaining()
            except ParserError as e:
                e.results = ctx.items + e.results
                logger.error(f"{self.argv[0]} parser failed: {e}")
                raise

            exit_code = process.wait()
            duration = time.monotonic() - start_time
            logger.debug(
                f"Subprocess completed pid={process.pid} "
                f"returncode={exit_code} items={len(ctx.items)} "
                f"lines={stdout.lines_read}+{stderr.lines_read}"
            )
            return ProcessResult(
                items=list(ctx.items),
                exit_code=exit_code,
                argv=list(self.argv),
                duration_sec=duration,
            )
        finally:
            self._runner.terminate(process)
            stdout_stream.close()
            stderr_stream.close()
