from __future__ import annotations

import logging
from typing import Any, Dict

# LogRecord attributes that must not be overwritten through `extra`
RESERVED_LOG_KEYS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime"}

_DEFAULT_LOGGER = "hal_restful.observability"


def _clean_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {
        k: v for k, v in fields.items() if k not in RESERVED_LOG_KEYS and v is not None
    }


def log_event(
    event: str,
    logger: logging.Logger | None = None,
    *,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    """Emit `event` as the message with `fields` attached as record extras."""
    log = logger or logging.getLogger(_DEFAULT_LOGGER)
    if not log.isEnabledFor(level):
        return
    log.log(level, event, extra=_clean_fields(fields))


__all__ = ["log_event", "RESERVED_LOG_KEYS"]
