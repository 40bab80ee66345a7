from logging.config import dictConfig

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(level: str = "INFO") -> None:
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": LOG_FORMAT,
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "loggers": {
                # Keep SQL echo at the engine's own level
                "sqlalchemy.engine": {"level": "WARNING", "propagate": True},
            },
            "root": {
                "level": level,
                "handlers": ["console"],
            },
        }
    )
