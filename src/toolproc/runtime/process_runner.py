"""Process launcher with reliable termination.

toolproc runtime module v0.1.0

This module provides:
- ProcessSpec: what to run (argument vector, working directory, environment)
- ProcessRunner: launches the child with piped stdout/stderr and
  terminates it gracefully (terminate -> timeout -> kill)

Key design points:
- The argument vector is passed verbatim; no shell is involved
- stdin is DEVNULL so the child never inherits the caller's stdin
- Spawn failures surface as LaunchError, never as an exit code
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..config import get_config
from ..errors import LaunchError
from .stream_reader import MirrorSink

__all__ = [
    "ProcessRunner",
    "ProcessSpec",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessSpec:
    """Specification for a subprocess to run.

    Attributes:
        argv: Command line arguments (first element is the executable)
        cwd: Working directory for the process (None = inherit)
        env: Environment variables (None = inherit parent)
    """

    argv: list[str]
    cwd: Path | None = None
    env: Mapping[str, str] | None = None


class ProcessRunner:
    """Starts external tools and tears them down.

    Example:
        runner = ProcessRunner()
        process = runner.launch(ProcessSpec(argv=["adb", "devices"]))
        try:
            ...
        finally:
            runner.terminate(process)

    Args:
        term_timeout: Seconds to wait after terminate() (default from config)
        kill_timeout: Seconds to wait after kill() (default from config)
    """

    def __init__(
        self,
        term_timeout: float | None = None,
        kill_timeout: float | None = None,
    ) -> None:
        config = get_config()
        self.term_timeout = term_timeout if term_timeout is not None else config.term_timeout
        self.kill_timeout = kill_timeout if kill_timeout is not None else config.kill_timeout

    def launch(
        self,
        spec: ProcessSpec,
        command_echo: MirrorSink | None = None,
    ) -> subprocess.Popen[bytes]:
        """Start the process described by spec.

        Args:
            spec: Process specification
            command_echo: Receives the space-joined argv as one line before
                the process starts

        Returns:
            Running process with stdout and stderr pipes

        Raises:
            ValueError: If argv is empty
            LaunchError: If the executable cannot be found or started
        """
        if not spec.argv:
            raise ValueError("argv must not be empty")

        if command_echo is not None:
            command_echo.write(" ".join(spec.argv) + "\n")
            flush = getattr(command_echo, "flush", None)
            if flush is not None:
                flush()

        try:
            process = subprocess.Popen(
                list(spec.argv),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                **self._build_subprocess_kwargs(spec),
            )
        except FileNotFoundError as e:
            raise LaunchError(spec.argv, "executable not found") from e
        except PermissionError as e:
            raise LaunchError(spec.argv, "permission denied") from e
        except OSError as e:
            raise LaunchError(spec.argv, str(e)) from e

        logger.debug(
            f"Started subprocess pid={process.pid} "
            f"argv={spec.argv[0]} cwd={spec.cwd}"
        )
        return process

    def _build_subprocess_kwargs(self, spec: ProcessSpec) -> dict[str, Any]:
        """Build optional Popen kwargs.

        Args:
            spec: Process specification

        Returns:
            Dict of kwargs for subprocess.Popen
        """
        kwargs: dict[str, Any] = {}
        if spec.cwd is not None:
            kwargs["cwd"] = spec.cwd
        if spec.env is not None:
            kwargs["env"] = dict(spec.env)
        return kwargs

    def terminate(self, process: subprocess.Popen[bytes]) -> None:
        """Terminate the process gracefully, then forcefully if needed.

        Termination strategy:
        1. terminate() (SIGTERM on POSIX, TerminateProcess on Windows)
        2. Wait up to term_timeout for exit
        3. kill() if still running
        4. Wait up to kill_timeout

        Args:
            process: The subprocess to terminate
        """
        if process.poll() is not None:
            return

        pid = process.pid
        logger.debug(f"Terminating subprocess pid={pid}")

        try:
            process.terminate()
            try:
                process.wait(timeout=self.term_timeout)
                logger.debug(
                    f"Subprocess terminated gracefully pid={pid} "
                    f"returncode={process.returncode}"
                )
                return
            except subprocess.TimeoutExpired:
                pass

            logger.warning(f"Force killing subprocess pid={pid}")
            process.kill()
            try:
                process.wait(timeout=self.kill_timeout)
                logger.debug(
                    f"Subprocess killed pid={pid} "
                    f"returncode={process.returncode}"
                )
            except subprocess.TimeoutExpired:
                logger.warning(f"Subprocess did not exit after kill pid={pid}")

        except ProcessLookupError:
            logger.debug(f"Subprocess already exited pid={pid}")
