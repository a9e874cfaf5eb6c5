# ===== utils.py =====
import logging
import os
import sys
from typing import Optional

LOG_FORMAT = "[%(asctime)s] %(levelname)s - %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(name: str, level=logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Set up a logger with console and optional file output.

    Calling it again for the same name reuses the existing handlers, so the
    CLI can reconfigure the level without printing every line twice.

    Args:
        name: Logger name
        level: Logging level (int or name such as "DEBUG")
        log_file: Optional path to log file

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    if not any(getattr(h, "_titanic_console", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)
        handler._titanic_console = True
        logger.addHandler(handler)

    if log_file:
        log_file = os.path.abspath(log_file)
        known = {getattr(h, "baseFilename", None) for h in logger.handlers}
        if log_file not in known:
            ensure_parent_dir(log_file)
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger


def ensure_parent_dir(path) -> str:
    """Create the directory holding ``path`` if it doesn't exist."""
    directory = os.path.dirname(os.path.abspath(str(path)))
    if not os.path.exists(directory):
        os.makedirs(directory, exist_ok=True)
    return directory
