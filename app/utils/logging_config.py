import logging
import sys

from app.settings import settings


def setup_logging() -> logging.Logger:
    """
    Sets up the shared application logger with a single stdout handler.
    """
    logger = logging.getLogger("support_desk")
    if logger.handlers:
        return logger
    logger.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)

    console_handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    console_handler.setFormatter(formatter)

    logger.addHandler(console_handler)
    return logger


logger = setup_logging()
