"""Process-wide logging setup."""
import logging
import sys

from selfiq.core.settings import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str | None = None) -> logging.Logger:
    """Configure the root logger once and return the application logger.

    Safe to call repeatedly (tests import the app many times); a second call
    only adjusts the level.
    """
    log_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(log_level)
    if not any(getattr(h, "_selfiq_handler", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._selfiq_handler = True
        root.addHandler(handler)
    # SQL echo is controlled by SQL_DEBUG; keep the engine logger quiet otherwise
    if not settings.sql_debug:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    return logging.getLogger("selfiq")
