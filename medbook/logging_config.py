"""Structured logging for medbook.

JSON log lines via structlog. The edit-session id travels through
structlog's contextvars, so every repository and store event logged
inside an open session carries it without passing loggers around.
Profile values never reach the logs: personal fields are masked.
"""
import logging
import sys
import uuid
from contextlib import contextmanager

import structlog

# Event keys that may carry a user's personal data
PERSONAL_FIELDS = frozenset({"name", "email", "phone", "cpf", "birth_date", "address", "emergency_contact"})

_configured_level = None


def mask_personal_fields(logger, method_name, event_dict):
    """structlog processor: replace personal profile values with '***'."""
    for key in PERSONAL_FIELDS.intersection(event_dict):
        event_dict[key] = "***"
    return event_dict


def setup_structured_logging(log_level: str = "INFO"):
    """
    Configure structlog and the stdlib root logger.

    Calling it again with the same level is a no-op; a different level
    only adjusts the root logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    global _configured_level

    level = getattr(logging, log_level.upper())
    if _configured_level == level:
        return

    if _configured_level is None:
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.stdlib.add_log_level,
                structlog.stdlib.add_logger_name,
                mask_personal_fields,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer()
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    else:
        logging.getLogger().setLevel(level)

    _configured_level = level


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Logger for a medbook module (usually __name__)."""
    return structlog.get_logger(name)


def generate_session_id() -> str:
    """Generate unique edit-session ID for log correlation."""
    return f"sess-{uuid.uuid4().hex[:12]}"


@contextmanager
def session_log_context(session_id: str):
    """Bind session_id to every log event emitted inside the block."""
    with structlog.contextvars.bound_contextvars(session_id=session_id):
        yield
