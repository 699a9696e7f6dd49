"""Concrete errors raised by the engine and the API.

Each is a subclass carrying its message and code, so every ``raise``
produces a fresh instance with its own traceback.
"""

from __future__ import annotations

from rebook.errors.rebook_errors import (
    AuthError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    QuotaExceededError,
    ValidationError,
)

# -- Authentication --------------------------------------------------------


class ErrMissingToken(AuthError):
    default_message = "access token required"
    default_code = "missing-token"


class ErrInvalidToken(AuthError):
    default_message = "invalid or expired token"
    default_code = "invalid-token"


class ErrInvalidCredentials(AuthError):
    default_message = "invalid phone number or passcode"
    default_code = "invalid-credentials"


# -- Validation ------------------------------------------------------------


class ErrInvalidPhoneNumber(ValidationError):
    default_message = "invalid phone number format"
    default_code = "invalid-phone-number"


class ErrInvalidPasscode(ValidationError):
    default_message = "passcode must be exactly 6 digits"
    default_code = "invalid-passcode"


class ErrInvalidContactName(ValidationError):
    default_message = "name is required and cannot exceed 50 characters"
    default_code = "invalid-contact-name"


# -- Account ---------------------------------------------------------------


class ErrPhoneNumberTaken(ConflictError):
    default_message = "phone number already registered"
    default_code = "phone-number-taken"


class ErrAccountNotFound(NotFoundError):
    default_message = "user not found"
    default_code = "account-not-found"


# -- Contact ---------------------------------------------------------------


class ErrContactNotFound(NotFoundError):
    default_message = "contact not found"
    default_code = "contact-not-found"


class ErrContactForbidden(ForbiddenError):
    default_message = "contact belongs to another account"
    default_code = "contact-forbidden"


class ErrContactLimitReached(QuotaExceededError):
    default_message = "maximum 5 contacts allowed per user"
    default_code = "contact-limit-reached"
