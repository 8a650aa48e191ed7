# talleres_api/core/logging.py
import logging
import logging.config

from talleres_api.core.config import settings

_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"


def setup_logging(level: str | None = None) -> None:
    """Configura el logging de la aplicación (consola)."""
    level = (level or settings.LOG_LEVEL).upper()
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": _FORMAT},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
            },
        },
        "loggers": {
            "talleres_api": {"handlers": ["console"], "level": level, "propagate": False},
            "uvicorn.error": {"level": level},
            # SQL solo en modo debug
            "sqlalchemy.engine": {"level": "INFO" if level == "DEBUG" else "WARNING"},
        },
        "root": {"handlers": ["console"], "level": "WARNING"},
    })
