from typing import Any, Dict, Optional


class HalError(Exception):
    """Base error for hal_restful failures."""


class LinkConflictError(HalError, ValueError):
    """Raised when a link is given both a route and a URL."""


class IncompleteLinkError(HalError, ValueError):
    """Raised when a link has neither a route nor a URL at render time."""


class InvalidLinkError(HalError, ValueError):
    pass


class MetadataError(HalError):
    pass


class HydratorNotFoundError(HalError):
    pass


class ExtractionError(HalError):
    pass


class MissingIdentifierError(ExtractionError):
    """Raised when an entity has no value for its identifier field."""


class InvalidResourceError(HalError, TypeError):
    pass


class InvalidCollectionError(HalError, TypeError):
    pass


class InvalidPageError(HalError, ValueError):
    pass


class ProblemError(HalError):
    """
    Exception that knows how to describe itself as an API problem.
    - status_code becomes httpStatus
    - additional_details are merged into the payload
    - described_by/title override the defaults when given
    """

    default_status: int = 500

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        additional_details: Optional[Dict[str, Any]] = None,
        described_by: Optional[str] = None,
        title: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = (
            status_code if status_code is not None else self.default_status
        )
        self.additional_details = dict(additional_details or {})
        self.described_by = described_by
        self.title = title


class CreationError(ProblemError):
    default_status = 422


class UpdateError(ProblemError):
    default_status = 422


__all__ = [
    "HalError",
    "LinkConflictError",
    "IncompleteLinkError",
    "InvalidLinkError",
    "MetadataError",
    "HydratorNotFoundError",
    "ExtractionError",
    "MissingIdentifierError",
    "InvalidResourceError",
    "InvalidCollectionError",
    "InvalidPageError",
    "ProblemError",
    "CreationError",
    "UpdateError",
]
