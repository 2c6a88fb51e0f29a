# /mobilehub/utils/logging.py

import logging
import sys
import structlog
from mobilehub.config.settings import settings

# This utility sets up structured logging (JSON format in production)
# for consistent and machine-readable logs across the application.

def setup_logging():
    """
    Configures structured logging using structlog, integrated with Python's
    standard logging so Gunicorn/Uvicorn and service loggers share one output.
    """
    shared_processors = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.environment == "development":
        final_processor = structlog.dev.ConsoleRenderer()
    else:
        final_processor = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=final_processor,
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    # Lifespan can run more than once per process (tests); avoid stacking handlers.
    root_logger.handlers = [h for h in root_logger.handlers if not isinstance(h.formatter, structlog.stdlib.ProcessorFormatter)]
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
