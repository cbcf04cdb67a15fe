"""
edge_gate.observability.logging

Structured logging configuration for the gate.

Responsibilities:
- Configure `structlog` for JSON logs.
- Stamp every event with the gate's security posture (auth mode, fail policy,
  directory strategy) so a deny or fail-open line can be read without the config.
- Redact credential material that a caller passes as an event field by mistake.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from edge_gate.settings import Settings

# Event keys that must never reach a log sink verbatim.
_REDACTED_KEYS = frozenset({"password", "signature", "secret", "cookie", "authorization"})


def configure_logging(*, settings: Settings) -> None:
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            gate_posture(settings),
            redact_credentials,
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def gate_posture(settings: Settings):
    posture = {
        "service": settings.service_name,
        "env": settings.env,
        "auth_mode": settings.resolved_auth_mode,
        "fail_policy": settings.fail_policy,
        "directory_strategy": settings.directory_strategy,
    }

    def processor(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        for key, value in posture.items():
            event_dict.setdefault(key, value)
        return event_dict

    return processor


def redact_credentials(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    for key in _REDACTED_KEYS.intersection(event_dict):
        event_dict[key] = "[redacted]"
    return event_dict


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


# --- Module Notes -----------------------------------------------------------
# Request-scoped metadata is bound via contextvars in `observability.middleware`.
