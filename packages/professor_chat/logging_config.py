"""Process-wide logging setup, called once by each entry point."""
import logging
import sys
from typing import Optional

from packages.professor_chat.config import Settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(settings: Settings, name: Optional[str] = None) -> logging.Logger:
    """
    Send log records at ``settings.app_log_level`` and above to stdout.

    Library modules only call ``logging.getLogger(__name__)``; their records
    reach the handler installed here through propagation.

    Args:
        settings: Settings already built by the entry point
        name: Logger to configure; the root logger when omitted

    Returns:
        The configured logger
    """
    level = getattr(logging, settings.app_log_level.upper())

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Repeated calls replace the handler instead of stacking another one
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)

    return logger
