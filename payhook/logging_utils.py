import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Iterator, Optional

from pythonjsonlogger import jsonlogger


# Context variable holding the delivery being processed (e.g. a request ID)
delivery_id_ctx: ContextVar[Optional[str]] = ContextVar("delivery_id", default=None)


def get_delivery_id() -> Optional[str]:
    """Get the current delivery ID from context."""
    return delivery_id_ctx.get()


@contextmanager
def bind_delivery_id(delivery_id: str) -> Iterator[None]:
    """
    Attach a delivery ID to every log record emitted inside the block.

    Example:
        >>> with bind_delivery_id(request_id):
        ...     event = construct_event(body, header)
    """
    token = delivery_id_ctx.set(delivery_id)
    try:
        yield
    finally:
        delivery_id_ctx.reset(token)


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter to ensure ISO-8601 timestamps and delivery_id."""

    def add_fields(self, log_record, record, message_dict):
        super(CustomJsonFormatter, self).add_fields(log_record, record, message_dict)
        # Ensure timestamp is in ISO-8601 format with Z suffix
        if not log_record.get('ts'):
            now = datetime.fromtimestamp(record.created, tz=timezone.utc)
            log_record['ts'] = now.strftime('%Y-%m-%dT%H:%M:%S.%f')[:-3] + 'Z'
        log_record['level'] = record.levelname

        if 'delivery_id' not in log_record:
            delivery_id = delivery_id_ctx.get()
            if delivery_id:
                log_record['delivery_id'] = delivery_id


def setup_logging(log_level: str = "INFO", logger_name: str = "payhook"):
    """
    Setup structured JSON logging for webhook verification.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        logger_name: Logger to configure; pass "" for the root logger

    Returns:
        The configured logger
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(log_level.upper())

    # Remove existing handlers
    logger.handlers = []

    json_handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        '%(ts)s %(level)s %(name)s %(message)s'
    )
    json_handler.setFormatter(formatter)

    logger.addHandler(json_handler)

    return logger
