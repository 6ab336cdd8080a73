# app/utils/logger.py
import logging
import sys
from app.utils.config import settings

LOGGER_NAME = "pte_practice"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logger(level_name: str = settings.log_level) -> logging.Logger:
    """
    (Re)configures the application logger with a single stdout handler.
    Called at import and again by the maintenance scripts when --verbose is set.
    """
    app_logger = logging.getLogger(LOGGER_NAME)
    app_logger.setLevel(getattr(logging, level_name.upper(), logging.INFO))

    # Hot-reloads and repeated calls would otherwise stack handlers.
    if app_logger.handlers:
        app_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    app_logger.addHandler(handler)

    # Keep messages away from the root logger (uvicorn installs its own handlers there).
    app_logger.propagate = False
    return app_logger


def get_logger(component: str) -> logging.Logger:
    """Child logger such as `pte_practice.scripts.import`; shares the app handler."""
    return logging.getLogger(f"{LOGGER_NAME}.{component}")


logger = configure_logger()
