import os
import sys

from loguru import logger

from app.core.config import LOG_DIR

LOG_FORMAT = "{time} | {level} | {extra[log_type]} | {message}"

# Category sinks, selected with logger.bind(log_type=...)
CATEGORY_SINKS = {
    "booking": "bookings.log",
    "payment": "payments.log",
    "expiry": "expiry.log",
    "email": "emails.log",
}

os.makedirs(LOG_DIR, exist_ok=True)

logger.remove()
logger.configure(extra={"log_type": "app"})

logger.add(sys.stderr, level="INFO", format=LOG_FORMAT)

# General application log
logger.add(
    f"{LOG_DIR}/app.log",
    rotation="1 week",
    retention="4 weeks",
    level="INFO",
    enqueue=True,
    format=LOG_FORMAT,
)


def _category_filter(log_type: str):
    return lambda record: record["extra"].get("log_type") == log_type


for _log_type, _filename in CATEGORY_SINKS.items():
    logger.add(
        f"{LOG_DIR}/{_filename}",
        rotation="1 week",
        retention="4 weeks",
        level="INFO",
        enqueue=True,
        filter=_category_filter(_log_type),
        format=LOG_FORMAT,
    )

# Error logs
logger.add(
    f"{LOG_DIR}/errors.log",
    rotation="1 week",
    retention="8 weeks",
    level="ERROR",
    enqueue=True,
    format=LOG_FORMAT,
)


def get_logger(log_type: str | None = None):
    if log_type:
        return logger.bind(log_type=log_type)
    return logger
