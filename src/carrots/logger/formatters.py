"""Console formatting.

INFO records are printed as the bare message so the startup banner and
refresh summaries read cleanly; every other level gets the timestamp,
logger name and a coloured level name.
"""

import logging

from carrots.constants import LOG_COLORS


def colorize_level(levelname: str) -> str:
    """Wrap a level name in its ANSI colour, if it has one."""
    color = LOG_COLORS.get(levelname)
    if color is None:
        return levelname
    return f"{color}{levelname}{LOG_COLORS['RESET']}"


class ConsoleFormatter(logging.Formatter):
    """Bare messages for INFO, structured lines for everything else.

    Example Output:
        INFO:     "Serving acme/desktop on http://0.0.0.0:3000"
        WARNING:  "12:30:45 - carrots.core.cache - WARNING - Release fetch
                  failed; serving backup history"
    """

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        *,
        use_color: bool = True,
    ) -> None:
        """Initialize the formatter.

        Args:
            fmt: Format string for structured lines
            datefmt: Date format string for timestamps
            use_color: Colour the level name with ANSI codes

        """
        super().__init__(fmt, datefmt)
        self.use_color = use_color

    def formatMessage(self, record: logging.LogRecord) -> str:  # noqa: N802
        """Render the record without exception text."""
        if record.levelno == logging.INFO:
            return record.message
        if not self.use_color:
            return super().formatMessage(record)
        # Colour a copy; file handlers format the same record
        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = colorize_level(record.levelname)
        return super().formatMessage(colored)
