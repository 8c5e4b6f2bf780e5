import logging
import sys
import os
from pathlib import Path
from typing import Optional

from rich.logging import RichHandler

PLAIN_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(log_level: str = "INFO", log_file: Optional[Path] = None):
    """
    Configure console logging with Rich and optional plain file output.
    Set NO_RICH_LOGGING to get plain stdout lines (containers, journald).
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    if os.environ.get("NO_RICH_LOGGING"):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
        handlers = [handler]
    else:
        handlers = [RichHandler(rich_tracebacks=True, markup=False)]

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=handlers,
        force=True,
    )

    # Request lines from httpx drown out alert delivery logs
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name: str):
    return logging.getLogger(f"logsentinel.{name}")
