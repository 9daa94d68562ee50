"""Logging setup for the automation runtime."""

import logging
import sys
from pathlib import Path

from rich.logging import RichHandler

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s:%(funcName)s:%(lineno)d - %(message)s"


def setup_logging(
    level: str = "INFO",
    log_file: Path | str | None = None,
    enable_color: bool = True,
) -> logging.Logger:
    """Configure the root logger and return the package logger.

    Args:
        level: Root log level name. DEBUG surfaces per-action skip notices.
        log_file: Optional file that receives every record at INFO and above.
        enable_color: Use a rich console handler instead of a plain stderr stream.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()

    if enable_color:
        console: logging.Handler = RichHandler(rich_tracebacks=True, show_path=False)
        console.setFormatter(logging.Formatter("%(name)s - %(message)s"))
    else:
        console = logging.StreamHandler(stream=sys.stderr)
        console.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(console)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_path, encoding="utf-8")
        fh.setLevel(logging.INFO)
        fh.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(fh)

    logger = logging.getLogger("autoturn")
    logger.debug("Logging initialized (level=%s, file=%s)", level, log_file)
    return logger
