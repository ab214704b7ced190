"""Structured logging for the scoring engine.

One processor chain for structlog events and for plain stdlib records from
the host application:
- JSON lines in production, ConsoleRenderer in dev
- UTC ISO timestamps
- Context variables bound by the caller (request_id, user_id) merged in
- Exceptions rendered as structured tracebacks in JSON mode

The domain layer only logs anomalies (e.g. unknown stored visibility
values); `tribe_engine.domain` gets its own level so a host can silence
those warnings without losing service-level events.
"""

import logging
import logging.config

import structlog

from tribe_engine.core.config import Settings, get_settings

DOMAIN_LOGGER = "tribe_engine.domain"


def configure_structlog(
    log_level: str = "INFO",
    json_logs: bool = True,
    domain_log_level: str = "WARNING",
) -> None:
    """Route structlog and stdlib logging through one renderer on stdout.

    Call this once at process start, before the service layer is first used
    (structlog caches the processor chain on first use).

    Args:
        log_level: Root log level ("DEBUG", "INFO", "WARNING", "ERROR")
        json_logs: True for JSON lines, False for ConsoleRenderer
        domain_log_level: Level for tribe_engine.domain loggers
    """
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_logs:
        render_chain = [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    else:
        render_chain = [structlog.dev.ConsoleRenderer()]

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processors": [
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    *render_chain,
                ],
                "foreign_pre_chain": shared_processors,
            },
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "formatter": "structured",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            DOMAIN_LOGGER: {"level": domain_log_level},
        },
        "root": {"handlers": ["stdout"], "level": log_level},
    })

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def configure_from_settings(settings: Settings | None = None) -> None:
    """Configure logging from Settings (TRIBE_ENGINE_LOG_LEVEL, TRIBE_ENGINE_JSON_LOGS,
    TRIBE_ENGINE_DOMAIN_LOG_LEVEL).

    Debug mode forces DEBUG everywhere and console output.
    """
    settings = settings or get_settings()
    if settings.debug:
        configure_structlog(log_level="DEBUG", json_logs=False, domain_log_level="DEBUG")
    else:
        configure_structlog(
            log_level=settings.log_level.upper(),
            json_logs=settings.json_logs,
            domain_log_level=settings.domain_log_level.upper(),
        )
