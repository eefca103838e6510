import logging
import logging.config
from typing import Optional

from modelbase.config import get_settings

def setup_logging(level: Optional[str] = None):
    """
    Configure global log format

    Repository log events on the "modelbase" logger:
    - DEBUG: batch inserts
    - INFO: upsert falling back to update after a duplicate key
    - WARNING: executor failures wrapped into ExecutorError, query timeouts

    Args:
        level: Level of the "modelbase" logger, defaults to Settings.LOG_LEVEL
            (DEBUG when Settings.DEBUG is on)
    """
    settings = get_settings()
    repository_level = level or ("DEBUG" if settings.DEBUG else settings.LOG_LEVEL)

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "root": {
                "handlers": ["console"],
                "level": "WARNING",
                "propagate": True,
            },
            # SQL statements are echoed through the engine's echo flag (Settings.DEBUG)
            "sqlalchemy.engine": {
                "handlers": ["console"],
                "level": "WARNING",
                "propagate": False,
            },
            "modelbase": {
                "handlers": ["console"],
                "level": repository_level,
                "propagate": False,
            },
        },
    }

    logging.config.dictConfig(logging_config)
