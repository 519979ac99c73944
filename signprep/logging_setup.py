"""Root logger configuration for the desktop application."""

from __future__ import annotations

from datetime import datetime
import logging
import logging.config
import os

from pytz import timezone

from signprep.config import AppConfig


class TimezoneFormatter(logging.Formatter):
    def __init__(self, tz_name, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.tz = timezone(tz_name)

    def formatTime(self, record, datefmt=None):
        dt = datetime.fromtimestamp(record.created, self.tz)
        return dt.strftime(datefmt) if datefmt else dt.isoformat()


def build_logging_config(config: AppConfig) -> dict:
    loglevel = logging.DEBUG if config.debug else logging.INFO
    handlers: dict[str, dict] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "level": loglevel,
            "stream": "ext://sys.stderr",
        },
    }
    if config.log_dir:
        handlers["file"] = {
            "class": "logging.FileHandler",
            "formatter": "standard",
            "level": loglevel,
            "filename": os.path.join(config.log_dir, "signprep.log"),
            "encoding": "utf-8",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "()": TimezoneFormatter,
                "format": "%(asctime)s - %(levelname)s - %(name)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
                "tz_name": config.timezone,
            },
        },
        "handlers": handlers,
        "root": {
            "handlers": list(handlers),
            "level": loglevel,
        },
    }


def setup_logging(config: AppConfig) -> logging.Logger:
    if config.log_dir and not os.path.exists(config.log_dir):
        os.makedirs(config.log_dir)

    logging.config.dictConfig(build_logging_config(config))

    # PyMuPDF and pypdf are chatty about recoverable structure problems.
    logging.getLogger("pypdf").setLevel(logging.DEBUG if config.debug else logging.ERROR)
    logging.getLogger("fitz").setLevel(logging.DEBUG if config.debug else logging.WARNING)

    return logging.getLogger("signprep")
