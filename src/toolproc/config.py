"""toolproc environment configuration.

Environment variables:
    TOOLPROC_POLL_INTERVAL: Sleep between poll iterations, in seconds
        - default 0.01, clamped to 0-1
        - 0 = pure spin loop

    TOOLPROC_ENCODING: Encoding used to decode tool output
        - default utf-8, undecodable bytes are replaced

    TOOLPROC_TERM_TIMEOUT: Seconds to wait after terminate() before kill()
        - default 2.0

    TOOLPROC_KILL_TIMEOUT: Seconds to wait after kill()
        - default 1.0

    TOOLPROC_LOG_DEBUG: Debug logging
        - true/1/yes = debug log written to a temp file
        - false/0/no = INFO log to stderr (default)
"""

from __future__ import annotations

import codecs
import os
import tempfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

__all__ = ["Config", "load_config", "get_config", "reload_config"]

DEFAULT_POLL_INTERVAL = 0.01
DEFAULT_ENCODING = "utf-8"
DEFAULT_TERM_TIMEOUT = 2.0
DEFAULT_KILL_TIMEOUT = 1.0


def _parse_bool(value: str | None, default: bool = False) -> bool:
    """Parse a boolean environment variable."""
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def _parse_float(
    value: str | None,
    default: float,
    minimum: float = 0.0,
    maximum: float | None = None,
) -> float:
    """Parse a float environment variable, falling back to default.

    Args:
        value: Raw environment value
        default: Value used when unset or invalid
        minimum: Lower clamp
        maximum: Upper clamp (None = unbounded)

    Returns:
        Parsed and clamped value
    """
    if not value:
        return default
    try:
        parsed = float(value)
    except ValueError:
        return default
    parsed = max(minimum, parsed)
    if maximum is not None:
        parsed = min(parsed, maximum)
    return parsed


def _parse_encoding(value: str | None) -> str:
    """Parse TOOLPROC_ENCODING; unknown codecs fall back to utf-8."""
    if not value or not value.strip():
        return DEFAULT_ENCODING
    try:
        return codecs.lookup(value.strip()).name
    except LookupError:
        return DEFAULT_ENCODING


@dataclass
class Config:
    """toolproc configuration.

    Attributes:
        poll_interval: Sleep between poll iterations (seconds)
        encoding: Output encoding
        term_timeout: Wait after terminate() (seconds)
        kill_timeout: Wait after kill() (seconds)
        log_debug: Debug logging to a temp file
        log_file: Log file path (set when log_debug=True)
    """

    poll_interval: float = DEFAULT_POLL_INTERVAL
    encoding: str = DEFAULT_ENCODING
    term_timeout: float = DEFAULT_TERM_TIMEOUT
    kill_timeout: float = DEFAULT_KILL_TIMEOUT
    log_debug: bool = False
    log_file: str | None = None

    def __repr__(self) -> str:
        return (
            f"Config(poll_interval={self.poll_interval}, "
            f"encoding={self.encoding}, "
            f"term_timeout={self.term_timeout}, "
            f"kill_timeout={self.kill_timeout}, "
            f"log_debug={self.log_debug}, "
            f"log_file={self.log_file})"
        )


def _generate_log_file_path() -> str:
    """Build a timestamped log file path under the system temp directory."""
    log_dir = Path(tempfile.gettempdir()) / "toolproc"
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f"toolproc_debug_{timestamp}.log"

    return str(log_file.resolve())


def load_config() -> Config:
    """Load configuration from environment variables."""
    log_debug = _parse_bool(os.environ.get("TOOLPROC_LOG_DEBUG"), default=False)
    log_file = _generate_log_file_path() if log_debug else None

    return Config(
        poll_interval=_parse_float(
            os.environ.get("TOOLPROC_POLL_INTERVAL"), DEFAULT_POLL_INTERVAL, maximum=1.0
        ),
        encoding=_parse_encoding(os.environ.get("TOOLPROC_ENCODING")),
        term_timeout=_parse_float(
            os.environ.get("TOOLPROC_TERM_TIMEOUT"), DEFAULT_TERM_TIMEOUT
        ),
        kill_timeout=_parse_float(
            os.environ.get("TOOLPROC_KILL_TIMEOUT"), DEFAULT_KILL_TIMEOUT
        ),
        log_debug=log_debug,
        log_file=log_file,
    )


# Global configuration (lazily loaded)
_config: Config | None = None


def get_config() -> Config:
    """Return the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config() -> Config:
    """Reload configuration (used by tests)."""
    global _config
    _config = load_config()
    return _config
