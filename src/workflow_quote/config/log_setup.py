"""
Logging configuration. Call setup_logging() once at app startup.
"""
import logging
import os
from datetime import datetime


class ConsoleFormatter(logging.Formatter):
    """Readable one-line console format."""

    def format(self, record):
        ts = datetime.now().strftime("%H:%M:%S")
        line = f"{ts} [{record.levelname[0]}] {record.name}: {record.getMessage()}"
        if record.exc_info and record.exc_info[0]:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(level=None):
    """
    Configure the root logger with a console handler.

    Args:
        level: Override log level (default: from LOG_LEVEL env or INFO)
    """
    if level is None:
        level = os.environ.get("LOG_LEVEL", "INFO")
    level = str(level).upper()

    root = logging.getLogger()
    root.setLevel(getattr(logging, level, logging.INFO))

    # Avoid stacking handlers when reloaded (uvicorn --reload, streamlit reruns)
    for handler in list(root.handlers):
        if getattr(handler, "_workflow_quote", False):
            root.removeHandler(handler)

    console = logging.StreamHandler()
    console.setFormatter(ConsoleFormatter())
    console._workflow_quote = True
    root.addHandler(console)

    # Quiet noisy libraries
    logging.getLogger("multipart").setLevel(logging.WARNING)

    logging.getLogger(__name__).debug("Logging configured at %s", level)
