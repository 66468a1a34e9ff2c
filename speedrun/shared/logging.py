import logging
import sys
from enum import Enum
from typing import Dict, Optional, TextIO

from speedrun.const import LIBRARY_LOG_LEVELS

RESET = "\x1b[0m"
BOLD = "\x1b[1m"
DIM = "\x1b[2m"
RED = "\x1b[31m"
GREEN = "\x1b[32m"
YELLOW = "\x1b[33m"
CYAN = "\x1b[36m"
WHITE = "\x1b[37m"
BG_BLUE = "\x1b[44m"


class EventType(str, Enum):
    """Tags carried by console log events."""
    PHASE = "phase"
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"
    PROGRESS = "progress"


def event(event_type: EventType) -> Dict[str, EventType]:
    """Build the ``extra`` mapping that tags a log record with an event type."""
    return {"event": event_type}


def use_color(stream: Optional[TextIO]) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


class ProgressWriter:
    """Owns the single transient progress line on the terminal.

    The line is redrawn in place on every update and must be cleared before
    any permanent line is written; ``ConsoleEventHandler`` does that.
    """

    def __init__(self, stream: Optional[TextIO] = None, width: int = 80, color: Optional[bool] = None):
        self.stream = stream
        self.width = width
        self.color = use_color(stream) if color is None else color
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def update(self, message: str) -> None:
        if self.stream is None:
            return
        prefix = f"{YELLOW} [~~]{RESET}" if self.color else " [~~]"
        self.stream.write(f"\r{prefix} {message}{' ' * 20}")
        self.stream.flush()
        self._active = True

    def clear(self) -> None:
        if self.stream is None or not self._active:
            return
        self.stream.write(f"\r{' ' * self.width}\r")
        self.stream.flush()
        self._active = False


class ConsoleEventFormatter(logging.Formatter):
    """Prefix each record with the marker of its event tag."""

    PLAIN_PREFIXES = {
        EventType.PHASE: " >> ",
        EventType.SUCCESS: " [OK] ",
        EventType.ERROR: " [ERR]",
        EventType.INFO: " [..]",
        EventType.PROGRESS: " [~~]",
    }
    COLOR_PREFIXES = {
        EventType.PHASE: f"{BOLD}{BG_BLUE}{WHITE} >> {RESET}",
        EventType.SUCCESS: f"{GREEN} [OK] {RESET}",
        EventType.ERROR: f"{RED} [ERR]{RESET}",
        EventType.INFO: f"{DIM} [..]{RESET}",
        EventType.PROGRESS: f"{YELLOW} [~~]{RESET}",
    }

    def __init__(self, color: bool = False):
        super().__init__(fmt="%(message)s")
        self.color = color

    @staticmethod
    def event_type(record: logging.LogRecord) -> EventType:
        tagged = getattr(record, "event", None)
        if tagged is not None:
            return EventType(tagged)
        if record.levelno >= logging.ERROR:
            return EventType.ERROR
        return EventType.INFO

    def format(self, record: logging.LogRecord) -> str:
        prefixes = self.COLOR_PREFIXES if self.color else self.PLAIN_PREFIXES
        return f"{prefixes[self.event_type(record)]} {super().format(record)}"


class ConsoleEventHandler(logging.StreamHandler):
    """Stream handler that clears the progress line before every record."""

    def __init__(self, stream: Optional[TextIO] = None, progress_writer: Optional[ProgressWriter] = None):
        super().__init__(stream if stream is not None else sys.stdout)
        self.progress_writer = progress_writer

    def emit(self, record: logging.LogRecord) -> None:
        if self.progress_writer is not None:
            self.progress_writer.clear()
        super().emit(record)


class LoggingManager:
    """Manager for logging setup and logger retrieval."""

    @classmethod
    def setup_logging(
        cls,
        level: str = "INFO",
        progress_writer: Optional[ProgressWriter] = None,
        library_log_levels: Optional[Dict[str, str]] = None,
        color: Optional[bool] = None,
    ) -> None:
        """Setup console event logging for the application.

        Args:
            level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            progress_writer: Writer owning the transient progress line, cleared
                before each permanent log line
            library_log_levels: Levels for noisy third-party loggers
            color: Force ANSI colours on or off; defaults to TTY detection
        """
        # Convert string level to logging level
        numeric_level = getattr(logging, level.upper(), logging.INFO)

        stream = progress_writer.stream if progress_writer and progress_writer.stream else sys.stdout
        console_handler = ConsoleEventHandler(stream, progress_writer)
        console_handler.setFormatter(ConsoleEventFormatter(use_color(stream) if color is None else color))
        console_handler.setLevel(numeric_level)

        # Configure root logger
        root_logger = logging.getLogger()
        root_logger.setLevel(numeric_level)
        root_logger.addHandler(console_handler)

        # Set levels for noisy libraries
        levels = library_log_levels if library_log_levels is not None else LIBRARY_LOG_LEVELS
        for logger_name, lib_level in levels.items():
            logging.getLogger(logger_name).setLevel(getattr(logging, lib_level.upper(), logging.WARNING))

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Get a logger instance.

        Args:
            name: Logger name, typically __name__

        Returns:
            Configured logger instance
        """
        return logging.getLogger(name)
