"""Build audit log - Notification progress written into the build's own log.

Two logging channels are used throughout the package: the stdlib ``logging``
module for operators, and the build's own log (visible to end users on the
build result page). This module covers the second channel.
"""

from __future__ import annotations

import threading
from datetime import datetime
from pathlib import Path
from typing import Protocol

LOG_PREFIX = "[BAMBOO-SERVER-NOTIFICATION] "

# Default max line length for truncation
DEFAULT_MAX_LINE_LENGTH = 2000


class BuildLogger(Protocol):
    """A single build's log."""

    def add_build_log_entry(self, message: str) -> None:
        """Append an informational line."""
        ...

    def add_error_log_entry(self, message: str) -> None:
        """Append an error line."""
        ...


class BuildLoggerManager(Protocol):
    """Looks up build logs by plan key."""

    def get_logger(self, plan_key: str) -> BuildLogger | None:
        """Return the logger for ``plan_key`` if one exists."""
        ...


class BuildAuditLog:
    """Writes prefixed notification lines to one plan's build log.

    Lines are dropped silently when there is no manager, no plan key, or the
    manager has no logger for the plan.
    """

    def __init__(self, manager: BuildLoggerManager | None, plan_key: str | None):
        self.manager = manager
        self.plan_key = plan_key

    def _logger(self) -> BuildLogger | None:
        if self.manager is None or self.plan_key is None:
            return None
        return self.manager.get_logger(self.plan_key)

    def info(self, message: str) -> None:
        build_logger = self._logger()
        if build_logger is not None:
            build_logger.add_build_log_entry(LOG_PREFIX + message)

    def error(self, message: str) -> None:
        build_logger = self._logger()
        if build_logger is not None:
            build_logger.add_error_log_entry(LOG_PREFIX + message)


# =============================================================================
# File-backed implementation
# =============================================================================


class FileBuildLogger:
    """Appends build log lines to a file with compact, truncated output."""

    def __init__(self, log_file: Path, max_line_length: int = DEFAULT_MAX_LINE_LENGTH):
        """Initialize logger.

        Args:
            log_file: Path to the log file. Parent directories are created on
                first write.
            max_line_length: Maximum line length before truncation.
        """
        self.log_file = log_file
        self.max_line_length = max_line_length
        self._lock = threading.Lock()

    def _truncate(self, text: str) -> str:
        """Truncate text to max line length per line."""
        lines = text.split("\n")
        truncated_lines = []
        for line in lines:
            if len(line) > self.max_line_length:
                truncated_lines.append(line[: self.max_line_length - 3] + "...")
            else:
                truncated_lines.append(line)
        return "\n".join(truncated_lines)

    def add_build_log_entry(self, message: str) -> None:
        self._write("INFO", message)

    def add_error_log_entry(self, message: str) -> None:
        self._write("ERROR", message)

    def _write(self, level: str, message: str) -> None:
        """Write a timestamped line to the log file."""
        timestamp = datetime.now().strftime("%d-%b-%Y %H:%M:%S")
        line = f"{level}\t{timestamp}\t{self._truncate(message)}"
        with self._lock:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.log_file, "a", encoding="utf-8") as f:
                f.write(line + "\n")


class FileBuildLoggerManager:
    """Hands out one FileBuildLogger per plan key under a log directory."""

    def __init__(self, log_dir: Path, max_line_length: int = DEFAULT_MAX_LINE_LENGTH):
        self.log_dir = log_dir
        self.max_line_length = max_line_length
        self._loggers: dict[str, FileBuildLogger] = {}
        self._lock = threading.Lock()

    def get_logger(self, plan_key: str) -> FileBuildLogger:
        with self._lock:
            if plan_key not in self._loggers:
                self._loggers[plan_key] = FileBuildLogger(
                    self.log_dir / f"{plan_key}.log", self.max_line_length
                )
            return self._loggers[plan_key]
