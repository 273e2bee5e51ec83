# cart_core/logs.py
# Логирование через structlog поверх stdlib logging.
# По умолчанию — цветная консоль в stderr, при CART_LOG_JSON=1 — JSON-строки.

from __future__ import annotations

import logging
import sys

import structlog


def configure_logging(*, level: str = "INFO", log_json: bool = False) -> None:
    """Настраивает structlog; level — уровень логгера cart_core"""
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if log_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    # ============ Уровни ============

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    logging.getLogger("cart_core").setLevel(getattr(logging, level.upper(), logging.INFO))
    # streamlit шумит на INFO
    logging.getLogger("streamlit").setLevel(logging.WARNING)
