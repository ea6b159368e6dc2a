"""API-Problem error descriptors."""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional, Union

from .errors import ProblemError

DEFAULT_DESCRIBED_BY = "http://www.w3.org/Protocols/rfc2616/rfc2616-sec10.html"

RESERVED_KEYS = ("describedBy", "title", "httpStatus", "detail")

# Only these codes get a derived title; anything else renders as "Unknown".
STATUS_TITLES: Dict[int, str] = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    406: "Not Acceptable",
    409: "Conflict",
    410: "Gone",
    412: "Precondition Failed",
    415: "Unsupported Media Type",
    422: "Unprocessable Entity",
    429: "Too Many Requests",
    500: "Internal Server Error",
    501: "Not Implemented",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout",
}

_NORMALIZED_NAMES = {
    "describedby": "describedBy",
    "described_by": "describedBy",
    "httpstatus": "httpStatus",
    "http_status": "httpStatus",
    "title": "title",
    "detail": "detail",
}


def _status_from_exception(exc: BaseException) -> int:
    for attr in ("status_code", "code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            if 100 <= value <= 599:
                return value
            break
    return 500


def _detail_from_exception(exc: BaseException, include_stack_trace: bool) -> str:
    if not include_stack_trace:
        return str(exc)

    parts = []
    seen = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        parts.append(str(current))
        parts.append("".join(traceback.format_tb(current.__traceback__)))
        current = current.__cause__ or current.__context__
    return "\n".join(parts).strip()


@dataclass(frozen=True)
class ApiProblem:
    """
    Problem-API payload.

    detail may be a message or an exception; in the latter case the message,
    status and (optionally) stack trace are derived from it at render time.
    """

    http_status: Optional[int]
    detail: Union[str, BaseException]
    described_by: str = DEFAULT_DESCRIBED_BY
    title: Optional[str] = None
    additional: Mapping[str, Any] = field(default_factory=dict)
    include_stack_trace: bool = False

    def __post_init__(self) -> None:
        if self.described_by is None:
            object.__setattr__(self, "described_by", DEFAULT_DESCRIBED_BY)
        object.__setattr__(self, "additional", dict(self.additional or {}))

    @classmethod
    def from_exception(
        cls, exc: BaseException, *, include_stack_trace: bool = False
    ) -> "ApiProblem":
        if isinstance(exc, ProblemError):
            return cls(
                http_status=None,
                detail=exc,
                described_by=exc.described_by or DEFAULT_DESCRIBED_BY,
                title=exc.title,
                additional=exc.additional_details,
                include_stack_trace=include_stack_trace,
            )
        return cls(
            http_status=None, detail=exc, include_stack_trace=include_stack_trace
        )

    def with_stack_trace(self, flag: bool = True) -> "ApiProblem":
        return replace(self, include_stack_trace=bool(flag))

    @property
    def status(self) -> int:
        """Explicit status wins; otherwise derived from an exception detail."""
        if self.http_status is not None:
            return self.http_status
        if isinstance(self.detail, BaseException):
            return _status_from_exception(self.detail)
        return 500

    @property
    def detail_message(self) -> str:
        if isinstance(self.detail, BaseException):
            return _detail_from_exception(self.detail, self.include_stack_trace)
        return str(self.detail)

    @property
    def resolved_title(self) -> str:
        if self.title is not None:
            return self.title
        if self.described_by == DEFAULT_DESCRIBED_BY and self.status in STATUS_TITLES:
            return STATUS_TITLES[self.status]
        return "Unknown"

    def to_dict(self) -> Dict[str, Any]:
        problem = {
            "describedBy": self.described_by,
            "title": self.resolved_title,
            "httpStatus": self.status,
            "detail": self.detail_message,
        }
        extras = {k: v for k, v in self.additional.items() if k not in problem}
        return {**problem, **extras}

    def get(self, name: str) -> Any:
        key = _NORMALIZED_NAMES.get(name.lower())
        if key is not None:
            return self.to_dict()[key]
        if name in self.additional:
            return self.additional[name]
        if name.lower() in self.additional:
            return self.additional[name.lower()]
        raise KeyError(f"Invalid property name {name!r}")


__all__ = [
    "ApiProblem",
    "DEFAULT_DESCRIBED_BY",
    "RESERVED_KEYS",
    "STATUS_TITLES",
]
