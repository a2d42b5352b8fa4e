"""Prometheus metrics and structured logging setup."""

import logging

import structlog
from prometheus_client import Counter

from app.core.config import settings

STAGE_WRITES = Counter(
    "ledger_stage_writes_total",
    "Stage records accepted by the ledger.",
    ["stage"],
)

LEDGER_REJECTIONS = Counter(
    "ledger_rejections_total",
    "Ledger operations rejected by a precondition.",
    ["operation", "error"],
)


def setup_structured_logging():
    """Configure structlog for JSON output in production, console in dev."""
    is_prod = settings.ENVIRONMENT == "production"

    shared_processors = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if is_prod:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[*shared_processors, renderer],
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.INFO)
