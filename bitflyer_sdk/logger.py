"""Logging interface and implementations."""

import logging
import sys
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional, TextIO


class LogLevel(str, Enum):
    """Log level enumeration."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    NONE = "none"


class Logger(ABC):
    """Abstract logger interface."""

    @abstractmethod
    def debug(self, message: str, *args: Any) -> None:
        """Log debug message."""
        pass

    @abstractmethod
    def info(self, message: str, *args: Any) -> None:
        """Log info message."""
        pass

    @abstractmethod
    def warn(self, message: str, *args: Any) -> None:
        """Log warning message."""
        pass

    @abstractmethod
    def error(self, message: str, *args: Any) -> None:
        """Log error message."""
        pass


class ConsoleLogger(Logger):
    """Console logger with configurable log levels."""

    _LEVELS = {
        LogLevel.DEBUG: 0,
        LogLevel.INFO: 1,
        LogLevel.WARN: 2,
        LogLevel.ERROR: 3,
        LogLevel.NONE: 4,
    }

    def __init__(
        self,
        level: LogLevel = LogLevel.INFO,
        prefix: str = "[bitFlyer SDK]",
        stream: Optional[TextIO] = None,
    ):
        """
        Initialize console logger.

        Args:
            level: Minimum log level to display
            prefix: Prefix for log messages
            stream: Output stream, stdout when omitted
        """
        self.level = LogLevel(level)
        self.prefix = prefix
        self._stream = stream

    def _should_log(self, level: LogLevel) -> bool:
        return self._LEVELS[level] >= self._LEVELS[self.level]

    def _emit(self, level: LogLevel, message: str, args: tuple) -> None:
        if not self._should_log(level):
            return
        line = f"{self.prefix} {level.value.upper()}: {message}"
        # Resolve stdout lazily so capture tools that swap sys.stdout still work
        print(line, *args, file=self._stream or sys.stdout)

    def debug(self, message: str, *args: Any) -> None:
        self._emit(LogLevel.DEBUG, message, args)

    def info(self, message: str, *args: Any) -> None:
        self._emit(LogLevel.INFO, message, args)

    def warn(self, message: str, *args: Any) -> None:
        self._emit(LogLevel.WARN, message, args)

    def error(self, message: str, *args: Any) -> None:
        self._emit(LogLevel.ERROR, message, args)

    def set_level(self, level: LogLevel) -> None:
        """Set log level."""
        self.level = LogLevel(level)

    def get_level(self) -> LogLevel:
        """Get current log level."""
        return self.level


class StdlibLogger(Logger):
    """Forwards SDK log lines to a :mod:`logging` logger."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger("bitflyer_sdk")

    @staticmethod
    def _join(message: str, args: tuple) -> str:
        if not args:
            return message
        return " ".join([message, *(str(arg) for arg in args)])

    def debug(self, message: str, *args: Any) -> None:
        self._logger.debug(self._join(message, args))

    def info(self, message: str, *args: Any) -> None:
        self._logger.info(self._join(message, args))

    def warn(self, message: str, *args: Any) -> None:
        self._logger.warning(self._join(message, args))

    def error(self, message: str, *args: Any) -> None:
        self._logger.error(self._join(message, args))


class NoopLogger(Logger):
    """No-op logger that discards all log messages."""

    def debug(self, message: str, *args: Any) -> None:
        pass

    def info(self, message: str, *args: Any) -> None:
        pass

    def warn(self, message: str, *args: Any) -> None:
        pass

    def error(self, message: str, *args: Any) -> None:
        pass
