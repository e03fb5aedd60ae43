import logging
import sys
from logging.handlers import RotatingFileHandler
from . import settings

# Third-party loggers that are too chatty at INFO during the line-item fan-out.
NOISY_LOGGERS = ("urllib3", "requests")


def setup_logger(
    name: str | None = None, log_level: int | str = settings.LOG_LEVEL, log_to_file: bool = True
) -> logging.Logger:
    """
    Configures a logger for a report run: a minimal console stream for the
    operator plus a rotating file under `LOG_DIR` with timestamps and module names.

    Calling it twice for the same name returns the already-configured logger.
    """
    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    if logger.hasHandlers():
        return logger

    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    # Console: just the message, the operator is watching a prompt
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    if not log_to_file:
        return logger

    # File: full context, rotated at 5 MB
    settings.LOG_DIR.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        settings.LOG_DIR / settings.LOG_FILENAME,
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(threadName)s - %(name)s - %(levelname)s - %(message)s")
    )
    logger.addHandler(file_handler)

    return logger
