"""Queue-based logging runtime shared by the whole process.

Every ``carrots.*`` logger propagates to the ``carrots`` logger, which
holds a single QueueHandler. A QueueListener thread owns the console and
rotating-file handlers, so request handlers on the event loop never wait
for log I/O.

    Application -> QueueHandler -> queue -> QueueListener thread
                                              |
                                    console + rotating file
"""

import atexit
import logging
import queue
import sys
import threading
from dataclasses import dataclass, field
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path

from carrots.constants import (
    LOG_BACKUP_COUNT,
    LOG_CONSOLE_DATE_FORMAT,
    LOG_CONSOLE_FORMAT,
    LOG_FILE_DATE_FORMAT,
    LOG_FILE_FORMAT,
    LOG_ROTATION_THRESHOLD_BYTES,
)
from carrots.logger.formatters import ConsoleFormatter

ROOT_LOGGER_NAME = "carrots"


class LoggingSetupError(Exception):
    """Raised when the log file cannot be opened."""


@dataclass
class LoggingRuntime:
    """Queue, listener and flags of the running logging setup."""

    lock: threading.Lock = field(default_factory=threading.Lock)
    log_queue: queue.SimpleQueue | None = None
    listener: QueueListener | None = None
    config_applied: bool = False

    @property
    def started(self) -> bool:
        """Whether the listener thread is running."""
        return self.listener is not None

    @property
    def handlers(self) -> tuple[logging.Handler, ...]:
        """Handlers owned by the listener."""
        if self.listener is None:
            return ()
        return tuple(self.listener.handlers)


_runtime = LoggingRuntime()


def get_runtime() -> LoggingRuntime:
    """Return the process-wide logging runtime."""
    return _runtime


def level_number(name: str, default: int = logging.INFO) -> int:
    """Map a level name such as "debug" to its number."""
    return logging.getLevelNamesMapping().get(name.upper(), default)


def _console_handler(level: str) -> logging.StreamHandler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        ConsoleFormatter(
            LOG_CONSOLE_FORMAT,
            LOG_CONSOLE_DATE_FORMAT,
            use_color=sys.stdout.isatty(),
        )
    )
    handler.setLevel(level_number(level))
    return handler


def _file_handler(log_file: Path, level: str) -> RotatingFileHandler:
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            log_file,
            maxBytes=LOG_ROTATION_THRESHOLD_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
    except OSError as e:
        msg = f"Cannot open log file {log_file}: {e}"
        raise LoggingSetupError(msg) from e
    handler.setFormatter(
        logging.Formatter(LOG_FILE_FORMAT, datefmt=LOG_FILE_DATE_FORMAT)
    )
    handler.setLevel(level_number(level))
    return handler


def setup_logging(
    console_level: str,
    file_level: str,
    log_file: Path,
    *,
    file_logging: bool = True,
) -> None:
    """Start the logging runtime; a no-op once it is running.

    Args:
        console_level: Console log level (e.g. "INFO")
        file_level: File log level (e.g. "DEBUG")
        log_file: Path of the rotating log file
        file_logging: Also write records to ``log_file``

    Raises:
        LoggingSetupError: If the log file cannot be opened

    """
    with _runtime.lock:
        if _runtime.started:
            return

        handlers: list[logging.Handler] = [_console_handler(console_level)]
        if file_logging:
            handlers.append(_file_handler(log_file, file_level))

        root = logging.getLogger(ROOT_LOGGER_NAME)
        root.setLevel(logging.DEBUG)
        root.propagate = False
        for stale in root.handlers[:]:
            root.removeHandler(stale)
            stale.close()

        log_queue: queue.SimpleQueue = queue.SimpleQueue()
        listener = QueueListener(log_queue, *handlers, respect_handler_level=True)
        listener.start()
        root.addHandler(QueueHandler(log_queue))

        _runtime.log_queue = log_queue
        _runtime.listener = listener


def set_handler_levels(console_level: int, file_level: int) -> None:
    """Change handler levels without adding or removing handlers."""
    for handler in _runtime.handlers:
        if isinstance(handler, RotatingFileHandler):
            handler.setLevel(file_level)
        elif isinstance(handler, logging.StreamHandler):
            handler.setLevel(console_level)
    _runtime.config_applied = True


def clear_logger_state() -> None:
    """Stop the listener and detach every handler.

    Stopping the listener drains the queue, so every record logged before
    the call has been written when it returns. The next get_logger() call
    starts a fresh runtime.
    """
    with _runtime.lock:
        listener = _runtime.listener
        _runtime.listener = None
        _runtime.log_queue = None
        _runtime.config_applied = False
        if listener is not None:
            listener.stop()
            for handler in listener.handlers:
                handler.close()

        root = logging.getLogger(ROOT_LOGGER_NAME)
        for handler in root.handlers[:]:
            root.removeHandler(handler)
            handler.close()


atexit.register(clear_logger_state)
