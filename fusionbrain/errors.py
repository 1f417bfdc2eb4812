"""Error taxonomy for the FusionBrain API client.

Every failure the library raises derives from :class:`FusionBrainError`.
HTTP and transport failures are classified into a closed set of
:class:`ErrorKind` values per operation; malformed response bodies raise
:class:`ResponseValidationError`.
"""

from __future__ import annotations

import enum
from typing import Any

import httpx

__all__ = [
    "ErrorKind",
    "FusionBrainError",
    "FusionBrainApiError",
    "FusionBrainConfigError",
    "ResponseValidationError",
    "classify",
    "OP_IS_READY",
    "OP_GENERATE",
    "OP_CHECK_TASK",
    "OP_GET_MODELS",
    "OP_GET_STYLES",
]

# Operation names carried by every classified error
OP_IS_READY = "is_ready"
OP_GENERATE = "generate"
OP_CHECK_TASK = "check_task"
OP_GET_MODELS = "get_models"
OP_GET_STYLES = "get_styles"


class ErrorKind(enum.Enum):
    """Closed set of failure causes."""
    UNAUTHORIZED = "UNAUTHORIZED"
    EXPIRED = "EXPIRED"
    LONG_PROMPT_OR_BAD_REQUEST = "LONG_PROMPT_OR_BAD_REQUEST"
    MODEL_NOT_READY = "MODEL_NOT_READY"
    UNSUPPORTED_MEDIA = "UNSUPPORTED_MEDIA"
    UNEXPECTED = "UNEXPECTED"
    VALIDATION_FAILED = "VALIDATION_FAILED"


# HTTP status -> kind, per operation. Anything not listed is UNEXPECTED.
_STATUS_KINDS: dict[str, dict[int, ErrorKind]] = {
    OP_IS_READY: {
        401: ErrorKind.UNAUTHORIZED,
    },
    OP_GENERATE: {
        400: ErrorKind.LONG_PROMPT_OR_BAD_REQUEST,
        401: ErrorKind.UNAUTHORIZED,
        415: ErrorKind.UNSUPPORTED_MEDIA,
    },
    OP_CHECK_TASK: {
        401: ErrorKind.UNAUTHORIZED,
        404: ErrorKind.EXPIRED,
    },
    OP_GET_MODELS: {
        401: ErrorKind.UNAUTHORIZED,
    },
    # styles are served from a public CDN without auth
    OP_GET_STYLES: {},
}

_MESSAGES = {
    ErrorKind.UNAUTHORIZED: (
        "Request failed with Unauthorized error. "
        "Ensure you've provided correct api and secret keys."
    ),
    ErrorKind.EXPIRED: "task is expired and removed already",
    ErrorKind.LONG_PROMPT_OR_BAD_REQUEST: (
        "most likely prompt (+ negative prompt) is too long. If it's short, "
        "the API has probably changed and the library needs an update"
    ),
    ErrorKind.UNSUPPORTED_MEDIA: (
        "the API has probably changed and the library needs an update"
    ),
    ErrorKind.MODEL_NOT_READY: "model is not ready",
}


def classify(operation: str, status_code: int | None) -> ErrorKind:
    """Map an operation and an observed HTTP status to an error kind.

    ``status_code`` is ``None`` when no response was received at all
    (timeouts, connection errors); those are always ``UNEXPECTED``.
    """
    if status_code is None:
        return ErrorKind.UNEXPECTED
    return _STATUS_KINDS.get(operation, {}).get(status_code, ErrorKind.UNEXPECTED)


class FusionBrainError(Exception):
    """Base class for all errors raised by the library."""


class FusionBrainConfigError(FusionBrainError, ValueError):
    """Missing or placeholder credentials."""


class FusionBrainApiError(FusionBrainError):
    """A classified failure of a single API operation.

    Attributes:
        kind: One of :class:`ErrorKind`.
        operation: Name of the client operation that failed.
        status_code: HTTP status, or None for transport failures.
        body: Raw response body for UNEXPECTED and MODEL_NOT_READY, else None.
    """

    def __init__(
        self,
        kind: ErrorKind,
        operation: str,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        self.kind = kind
        self.operation = operation
        self.status_code = status_code
        self.body = body
        super().__init__(f"{operation}: {message}")

    @classmethod
    def _fixed(cls, kind: ErrorKind, operation: str, status_code: int | None) -> FusionBrainApiError:
        return cls(kind, operation, _MESSAGES[kind], status_code=status_code)

    @classmethod
    def unauthorized(cls, operation: str) -> FusionBrainApiError:
        return cls._fixed(ErrorKind.UNAUTHORIZED, operation, 401)

    @classmethod
    def expired(cls, operation: str) -> FusionBrainApiError:
        return cls._fixed(ErrorKind.EXPIRED, operation, 404)

    @classmethod
    def bad_request(cls, operation: str) -> FusionBrainApiError:
        return cls._fixed(ErrorKind.LONG_PROMPT_OR_BAD_REQUEST, operation, 400)

    @classmethod
    def unsupported_media(cls, operation: str) -> FusionBrainApiError:
        return cls._fixed(ErrorKind.UNSUPPORTED_MEDIA, operation, 415)

    @classmethod
    def model_not_ready(cls, operation: str, body: str) -> FusionBrainApiError:
        return cls(
            ErrorKind.MODEL_NOT_READY,
            operation,
            f"{_MESSAGES[ErrorKind.MODEL_NOT_READY]}:\n{body}",
            body=body,
        )

    @classmethod
    def unexpected(cls, operation: str, exc: httpx.HTTPError) -> FusionBrainApiError:
        """Build an UNEXPECTED error from a transport or HTTP failure.

        The caller is expected to ``raise ... from exc`` so the transport
        error stays reachable through ``__cause__``.
        """
        status_code = None
        body = None
        message = str(exc)
        if isinstance(exc, httpx.HTTPStatusError):
            status_code = exc.response.status_code
            body = exc.response.text
            message = f"{message}:\n{body}"
        return cls(
            ErrorKind.UNEXPECTED,
            operation,
            message,
            status_code=status_code,
            body=body,
        )

    @classmethod
    def from_http_error(cls, operation: str, exc: httpx.HTTPError) -> FusionBrainApiError:
        """Classify an httpx failure raised while running ``operation``."""
        status_code = None
        if isinstance(exc, httpx.HTTPStatusError):
            status_code = exc.response.status_code

        kind = classify(operation, status_code)
        factories = {
            ErrorKind.UNAUTHORIZED: cls.unauthorized,
            ErrorKind.EXPIRED: cls.expired,
            ErrorKind.LONG_PROMPT_OR_BAD_REQUEST: cls.bad_request,
            ErrorKind.UNSUPPORTED_MEDIA: cls.unsupported_media,
        }
        if kind in factories:
            return factories[kind](operation)
        return cls.unexpected(operation, exc)


class ResponseValidationError(FusionBrainError):
    """A response body does not match the structure of the expected entity.

    Attributes:
        entity: Name of the entity being parsed (``Task``, ``ModelInfo``...).
        fields: Required JSON key -> ``(expected type, found valid)``.
        data: The offending decoded payload.
        index: Position of the offending element within a listing, if any.
    """

    kind = ErrorKind.VALIDATION_FAILED

    def __init__(
        self,
        entity: str,
        fields: dict[str, tuple[str, bool]],
        data: Any = None,
        detail: str = "",
        index: int | None = None,
    ) -> None:
        self.entity = entity
        self.fields = fields
        self.data = data
        self.index = index
        lines = [detail or f"{entity}: passed object doesn't match required structure:"]
        for name, (expected, ok) in fields.items():
            lines.append(f"{name} ({expected}) - {'found' if ok else 'missing'}")
        super().__init__("\n".join(lines))

    @property
    def missing(self) -> list[str]:
        """JSON keys that were absent or mistyped."""
        return [name for name, (_, ok) in self.fields.items() if not ok]
