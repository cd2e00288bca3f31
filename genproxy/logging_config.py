import logging.config

from genproxy.config import settings


def build_logging_config(level: str = "INFO") -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,  # keep uvicorn/fastapi loggers
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": "DEBUG",
                "formatter": "default",
            },
        },
        "root": {"level": "WARNING", "handlers": ["console"]},
        "loggers": {
            "uvicorn.error": {"level": "INFO", "handlers": ["console"], "propagate": False},
            "uvicorn.access": {"level": "INFO", "handlers": ["console"], "propagate": False},
            "genproxy": {"level": level.upper(), "handlers": ["console"], "propagate": False},
        },
    }


def setup_logging(level: str | None = None) -> None:
    logging.config.dictConfig(build_logging_config(level or settings.log_level))
