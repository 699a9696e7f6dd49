"""RebookError — base exception class and the error taxonomy."""

from __future__ import annotations


class RebookError(Exception):
    """Base error for all Rebook operations.

    Attributes:
        message: Human-readable error description.
        status_code: Suggested HTTP status code.
        code: Machine-readable error code string.
    """

    default_message = "rebook error"
    default_status_code = 500
    default_code = "rebook-error"

    def __init__(
        self,
        message: str | None = None,
        *,
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        message = message if message is not None else self.default_message
        super().__init__(message)
        self.message = message
        self.status_code = status_code if status_code is not None else self.default_status_code
        self.code = code if code is not None else self.default_code


class ValidationError(RebookError):
    """Malformed input the client can fix."""

    default_status_code = 400
    default_code = "validation-error"


class ConflictError(RebookError):
    """The resource already exists."""

    default_status_code = 409
    default_code = "conflict"


class AuthError(RebookError):
    """Bad credentials, or a missing/invalid/expired session token."""

    default_status_code = 401
    default_code = "unauthorized"


class ForbiddenError(RebookError):
    """Valid session, but the resource belongs to another account."""

    default_status_code = 403
    default_code = "forbidden"


class NotFoundError(RebookError):
    """The requested resource does not exist."""

    default_status_code = 404
    default_code = "not-found"


class QuotaExceededError(RebookError):
    """The per-account contact limit has been reached."""

    default_status_code = 400
    default_code = "quota-exceeded"


class InternalError(RebookError):
    """Unexpected storage or runtime failure.

    The message is always generic; the underlying exception is chained as
    ``__cause__`` for server-side diagnostics only.
    """

    default_message = "internal server error"
    default_status_code = 500
    default_code = "internal-error"


def classify(exc: BaseException) -> RebookError:
    """Map any exception onto the taxonomy.

    ``RebookError`` instances pass through unchanged; anything else becomes
    an ``InternalError`` chained to the original.
    """
    if isinstance(exc, RebookError):
        return exc
    err = InternalError()
    err.__cause__ = exc
    return err
