import logging
import sys

from home.settings import settings

# Client libraries that log every request at INFO.
NOISY_LOGGERS = ("httpx", "httpcore", "hpack", "aiosqlite")


def setup_logging(name: str = "home") -> logging.Logger:
    """
    Configures the service logger once: stdout handler, DEBUG level when the
    DEBUG setting is on, and quieter third-party client loggers.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    logger.addHandler(console_handler)

    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return logger


logger = setup_logging()
