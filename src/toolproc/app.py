"""toolproc command-line entry point.

Runs one external tool, mirrors its output live, and prints the parsed
items once it exits.

Usage:
    toolproc [--parser NAME] [--echo-command] [--quiet] [--json] -- ARGV...

Examples:
    toolproc --parser adb-devices -- adb devices -l
    toolproc --parser packages --json -- adb shell pm list packages -f
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
from typing import Any, Sequence

from . import __version__
from .config import get_config
from .errors import LaunchError, ParserError
from .parsers import PARSERS, create_parser
from .runtime import ProcessResult, SystemProcess

__all__ = ["main", "run_cli"]

logger = logging.getLogger(__name__)

# Shell convention for "command not found"
EXIT_LAUNCH_FAILED = 127
EXIT_PARSER_FAILED = 1
EXIT_INTERRUPTED = 130


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="toolproc",
        description="Run a command-line tool and print its parsed output.",
    )
    parser.add_argument(
        "--parser",
        default="lines",
        choices=sorted(PARSERS),
        help="parser for stdout lines (default: lines)",
    )
    parser.add_argument(
        "--stderr-parser",
        default=None,
        choices=sorted(PARSERS),
        help="parser for stderr lines (default: none)",
    )
    parser.add_argument(
        "--echo-command",
        action="store_true",
        help="print the command line to stderr before running it",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="do not mirror the tool's output",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="print the result as one JSON document",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=None,
        help="seconds between polls (default: TOOLPROC_POLL_INTERVAL or 0.01)",
    )
    parser.add_argument("--cwd", default=None, help="working directory for the tool")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("command", nargs="+", help="tool and its arguments")
    return parser


def _format_item(item: Any) -> str:
    if dataclasses.is_dataclass(item) and not isinstance(item, type):
        return json.dumps(dataclasses.asdict(item), ensure_ascii=False)
    return str(item)


def _print_result(result: ProcessResult[Any], as_json: bool) -> None:
    if as_json:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2, default=str))
        return
    for item in result.items:
        print(_format_item(item))


async def _run(args: argparse.Namespace) -> int:
    command = list(args.command)
    if command and command[0] == "--":
        command = command[1:]
    if not command:
        logger.error("no command given")
        return 2

    process: SystemProcess[Any] = SystemProcess(
        command,
        stdout_parser=create_parser(args.parser),
        stderr_parser=create_parser(args.stderr_parser) if args.stderr_parser else None,
        command_echo=sys.stderr if args.echo_command else None,
        stdout_mirror=None if args.quiet else sys.stderr,
        stderr_mirror=None if args.quiet else sys.stderr,
        cwd=args.cwd,
        poll_interval=args.poll_interval,
    )

    try:
        result = await process.execute()
    except LaunchError as e:
        logger.error(str(e))
        return EXIT_LAUNCH_FAILED
    except ParserError as e:
        logger.error(str(e))
        logger.info(f"{len(e.results)} items parsed before the failure")
        return EXIT_PARSER_FAILED

    _print_result(result, args.json)
    return result.exit_code


def _configure_logging() -> None:
    config = get_config()
    log_handlers: list[logging.Handler] = []

    if config.log_debug and config.log_file:
        file_handler = logging.FileHandler(config.log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )
        log_handlers.append(file_handler)
        log_level = logging.DEBUG
    else:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )
        log_handlers.append(stderr_handler)
        log_level = logging.WARNING

    # Keep third-party loggers quiet; only toolproc follows log_level
    logging.basicConfig(level=logging.WARNING, handlers=log_handlers)
    logging.getLogger("toolproc").setLevel(log_level)


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse arguments, run the tool and return the exit code."""
    args = build_arg_parser().parse_args(argv)
    try:
        return asyncio.run(_run(args))
    except KeyboardInterrupt:
        logger.warning("Interrupted, tool terminated")
        return EXIT_INTERRUPTED


def main() -> None:
    """Main entry point."""
    _configure_logging()
    sys.exit(run_cli())


if __name__ == "__main__":
    main()
