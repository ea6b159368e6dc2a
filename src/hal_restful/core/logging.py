import logging
from typing import Any

LOG_EXTRA_FIELDS = (
    "request_id",
    "method",
    "path",
    "status",
    "entity_type",
    "rel",
    "route",
    "page",
    "page_count",
    "items",
    "error_type",
    "duration_ms",
)


class LogfmtFormatter(logging.Formatter):
    """logfmt-style formatter; extras that are absent are skipped."""

    def format(self, record: logging.LogRecord) -> str:
        kv: list[str] = [
            f"level={record.levelname.lower()}",
            f"logger={record.name}",
        ]

        msg = record.getMessage()
        if msg:
            kv.append(f"event={self._fmt_val(msg)}")

        for key in LOG_EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is None:
                continue
            kv.append(f"{key}={self._fmt_val(val)}")

        if record.exc_info and record.exc_info[0] is not None:
            kv.append(f"exc_type={record.exc_info[0].__name__}")

        return " ".join(kv)

    @staticmethod
    def _fmt_val(val: Any) -> str:
        if isinstance(val, (int, float, bool)):
            return str(val)
        s = str(val)
        if not s or " " in s or "=" in s or '"' in s:
            s = '"' + s.replace('"', '\\"') + '"'
        return s


def setup_logging(level: str = "INFO", logger_name: str = "hal_restful") -> None:
    """Attach a single logfmt handler to the package logger."""

    log = logging.getLogger(logger_name)
    for h in list(log.handlers):
        log.removeHandler(h)

    handler = logging.StreamHandler()
    handler.setFormatter(LogfmtFormatter())
    log.addHandler(handler)
    log.setLevel(getattr(logging, level.upper(), logging.INFO))


__all__ = ["setup_logging", "LogfmtFormatter", "LOG_EXTRA_FIELDS"]
