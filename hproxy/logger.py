import logging
from typing import Any, Optional

import structlog
from structlog.types import EventDict, Processor


def drop_color_message_key(_, __, event_dict: EventDict) -> EventDict:
    """
    Some servers embedding the engine log the message a second time in the extra
    `color_message`. This processor drops the key from the event dict if it exists.
    """
    event_dict.pop("color_message", None)
    return event_dict


def setup_logging(json_logs: bool = False, log_level: str = "INFO"):
    """Configure structlog for the hproxy package"""

    # Check if the root logger already has StreamHandlers with structlog formatters
    root_logger = logging.getLogger()
    for handler in root_logger.handlers:
        if (isinstance(handler, logging.StreamHandler) and
            isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter)):
            # structlog is already set up, don't interfere
            return

    timestamper = structlog.processors.TimeStamper(fmt="iso")

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.stdlib.ExtraAdder(),
        drop_color_message_key,
        timestamper,
        structlog.processors.StackInfoRenderer(),
    ]

    if json_logs:
        # Format the exception only for JSON logs, as we want to pretty-print them when
        # using the ConsoleRenderer
        shared_processors.append(structlog.processors.format_exc_info)

    structlog.configure(
        processors=shared_processors
        + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    log_renderer: structlog.types.Processor
    if json_logs:
        log_renderer = structlog.processors.JSONRenderer()
    else:
        log_renderer = structlog.dev.ConsoleRenderer()

    formatter = structlog.stdlib.ProcessorFormatter(
        # These run ONLY on `logging` entries that do NOT originate within
        # structlog.
        foreign_pre_chain=shared_processors,
        # These run on ALL entries after the pre_chain is done.
        processors=[
            # Remove _record & _from_structlog.
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            log_renderer,
        ],
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    # Clear any existing handlers and add our structured logging handler
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level.upper())


class HProxyStructLogger:
    """
    Structured logger for the hproxy package.

    Components bind their name once and log events with keyword fields,
    e.g. `get_hproxy_logger().bind(component="RemoteSync").warning("Remote call failed", ...)`.
    Values bound with `structlog.contextvars` are merged into every event.
    """

    def __init__(self, log_name: str = "hproxy", logger=None):
        self.log_name = log_name
        self.logger = logger if logger is not None else structlog.stdlib.get_logger(log_name)

    def bind(self, **new_values: Any) -> "HProxyStructLogger":
        """Return a logger with `new_values` attached to every event."""
        return HProxyStructLogger(self.log_name, self.logger.bind(**new_values))

    def debug(self, event: Optional[str] = None, *args: Any, **kw: Any):
        self.logger.debug(event, *args, **kw)

    def info(self, event: Optional[str] = None, *args: Any, **kw: Any):
        self.logger.info(event, *args, **kw)

    def warning(self, event: Optional[str] = None, *args: Any, **kw: Any):
        self.logger.warning(event, *args, **kw)

    warn = warning

    def error(self, event: Optional[str] = None, *args: Any, **kw: Any):
        self.logger.error(event, *args, **kw)

    def critical(self, event: Optional[str] = None, *args: Any, **kw: Any):
        self.logger.critical(event, *args, **kw)

    def exception(self, event: Optional[str] = None, *args: Any, **kw: Any):
        self.logger.exception(event, *args, **kw)


_root_logger: Optional[HProxyStructLogger] = None


def get_hproxy_logger() -> HProxyStructLogger:
    """Return the package logger, creating it on first use."""
    global _root_logger
    if _root_logger is None:
        _root_logger = HProxyStructLogger("hproxy")
    return _root_logger


def init_logger(config):
    """
    Initialize the structured logger for hproxy package.

    Args:
        config: Configuration object with logging settings

    Returns:
        HProxyStructLogger: Configured structured logger instance
    """
    setup_logging(json_logs=config.JSON_LOGS, log_level=config.LOG_LEVEL)
    return get_hproxy_logger()
