"""
Local Store - Logging Module
Provides the leveled message sink used by every store component.
"""
from __future__ import annotations

import sys
from datetime import datetime
from enum import StrEnum
from pathlib import Path

from .conf import LOG_FILE


class LogLevel(StrEnum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    ERROR = "ERROR"


class StoreLogger:
    """Append timestamped log lines to a file and, optionally, stderr."""

    def __init__(self, log_file: Path | str = LOG_FILE, enabled: bool = True, to_stderr: bool = True) -> None:
        self.log_file = Path(log_file)
        self.enabled = enabled
        self.to_stderr = to_stderr
        self._first_line = True

    @classmethod
    def from_config(cls, config) -> "StoreLogger":
        return cls(config.log_file, enabled=config.log_enabled, to_stderr=config.log_to_stderr)

    # =========================================================================
    # LOGGING
    # =========================================================================

    def log(self, message: str, level: LogLevel = LogLevel.DEBUG) -> None:
        """Write one log line if logging is enabled."""
        if not self.enabled:
            return
        if self._first_line:
            self._first_line = False
            self._write(LogLevel.INFO, "--- New Local Store Session ---")
        self._write(level, message)

    def debug(self, message: str) -> None:
        self.log(message, LogLevel.DEBUG)

    def info(self, message: str) -> None:
        self.log(message, LogLevel.INFO)

    def error(self, message: str) -> None:
        self.log(message, LogLevel.ERROR)

    def _write(self, level: LogLevel, message: str) -> None:
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        log_line = f"[{timestamp}] {level.value} {message}\n"
        if self.to_stderr:
            sys.stderr.write(log_line)
        try:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.log_file, "a", encoding="utf-8") as f:
                f.write(log_line)
        except OSError as e:
            # Never let logging break a store operation.
            sys.stderr.write(f"[local-store] could not write log file {self.log_file}: {e}\n")

    # =========================================================================
    # LOG FILE HELPERS
    # =========================================================================

    def read(self) -> str:
        """Return the log file contents, or an empty string if there is none."""
        if self.log_file.exists():
            return self.log_file.read_text(encoding="utf-8")
        return ""

    def print_log(self) -> None:
        """Print the contents of the log file to stdout."""
        if self.log_file.exists():
            log_contents = self.log_file.read_text(encoding="utf-8")
            if log_contents:
                print(log_contents, end="")
            else:
                print("[Local Store log is empty]")
        else:
            print("[Local Store log file does not exist]")

    def clear(self) -> None:
        """Delete the log file."""
        if self.log_file.exists():
            self.log_file.unlink()
