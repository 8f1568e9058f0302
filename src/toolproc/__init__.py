"""toolproc - run command-line tools and parse their output.

Environment variables:
    TOOLPROC_POLL_INTERVAL: Sleep between polls (default 0.01 s)
    TOOLPROC_ENCODING: Output encoding (default utf-8)
    TOOLPROC_LOG_DEBUG: Debug log to a temp file (default false)

Usage:
    toolproc --parser adb-devices -- adb devices -l
"""

__version__ = "0.1.0"

from .errors import LaunchError, ParserError, ToolprocError
from .parsers import FunctionParser, OutputParser, create_parser
from .runtime import ProcessResult, SystemProcess

__all__ = [
    "__version__",
    "FunctionParser",
    "LaunchError",
    "OutputParser",
    "ParserError",
    "ProcessResult",
    "SystemProcess",
    "ToolprocError",
    "create_parser",
]
