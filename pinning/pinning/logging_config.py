"""Structured logging configuration."""

import logging
import sys
from pathlib import Path

import structlog

# Event keys whose values are provider secrets
CREDENTIAL_KEYS = frozenset({"jwt", "api_key", "api_secret", "authorization", "pinata_jwt"})
REDACTED = "***"


def redact_credentials(logger, method_name: str, event_dict: dict) -> dict:
    """Mask provider credentials passed as event keys or auth headers."""
    for key in list(event_dict):
        if key.lower() in CREDENTIAL_KEYS and event_dict[key]:
            event_dict[key] = REDACTED

    headers = event_dict.get("headers")
    if isinstance(headers, dict) and "Authorization" in headers:
        event_dict["headers"] = {**headers, "Authorization": REDACTED}
    return event_dict


def add_service_name(service_name: str):
    """Build a processor that stamps every event with the service name."""

    def processor(logger, method_name: str, event_dict: dict) -> dict:
        event_dict.setdefault("service", service_name)
        return event_dict

    return processor


def configure_logging(
    log_level: str = "INFO",
    log_file: Path | None = None,
    format_type: str = "console",
    service_name: str | None = None,
) -> structlog.BoundLogger:
    """Configure structured logging with console and optional file output.

    Credentials are masked before rendering, in both outputs.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file (JSON format)
        format_type: 'console' for human-readable, 'json' for structured
        service_name: Stamped on every event when set

    Returns:
        Configured structlog logger
    """
    level = getattr(logging, log_level.upper())

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

    # uvicorn and urllib3 log through the stdlib; keep them on the same stream
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
        level=level,
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_credentials,
    ]
    if service_name:
        shared_processors.append(add_service_name(service_name))

    if format_type == "json":
        renderers = [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    else:
        renderers = [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]

    structlog.configure(
        processors=shared_processors + renderers,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=structlog.processors.JSONRenderer(),
                foreign_pre_chain=shared_processors,
            )
        )
        logging.getLogger().addHandler(file_handler)

    logger = structlog.get_logger()
    logger.debug("logging_configured", level=log_level, format=format_type, log_file=str(log_file) if log_file else None)
    return logger
