"""V1 API request/response Pydantic schemas.

These define the HTTP contract and are independent of the SQLAlchemy models;
endpoint code maps ORM objects onto them. JSON field names are camelCase.
"""

from __future__ import annotations

from datetime import datetime  # noqa: TC003 - Pydantic needs this at runtime
from typing import TYPE_CHECKING, Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from rebook.engine.models.account import CONTACT_LIMIT
from rebook.errors.rebook_errors import ValidationError
from rebook.utils.validation import (
    normalize_contact_name,
    normalize_phone_number,
    validate_passcode,
)

if TYPE_CHECKING:
    from collections.abc import Callable


def _as_value_error(fn: Callable[[object], str]) -> Callable[[str], str]:
    """Adapt a domain validator so pydantic reports its message as a field error."""

    def _validator(value: str) -> str:
        try:
            return fn(value)
        except ValidationError as exc:
            raise ValueError(exc.message) from None

    return _validator


PhoneNumber = Annotated[str, AfterValidator(_as_value_error(normalize_phone_number))]
Passcode = Annotated[str, AfterValidator(_as_value_error(validate_passcode))]
ContactName = Annotated[str, AfterValidator(_as_value_error(normalize_contact_name))]


class _CamelModel(BaseModel):
    """Base for response bodies: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class _RequestModel(_CamelModel):
    """Base for request bodies: unknown fields are rejected."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        str_strip_whitespace=True,
    )


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class FieldError(BaseModel):
    """One failed field in a request body."""

    field: str
    message: str


class ErrorResponse(BaseModel):
    """Standard error body."""

    error: str
    code: str
    details: list[FieldError] | None = None


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class CredentialsRequest(_RequestModel):
    """POST /auth/register and POST /auth/login."""

    phone_number: PhoneNumber
    passcode: Passcode


class AccountResponse(_CamelModel):
    """Serialised account (never includes the passcode hash)."""

    id: str
    phone_number: str
    is_active: bool = True
    last_login: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RegisterResponse(_CamelModel):
    message: str = "User registered successfully"
    user_id: str


class LoginResponse(_CamelModel):
    message: str = "Login successful"
    token: str
    expires_in: int = Field(description="Token lifetime in seconds")
    user: AccountResponse


class VerifyResponse(_CamelModel):
    valid: bool = True
    user: AccountResponse


# ---------------------------------------------------------------------------
# Contact
# ---------------------------------------------------------------------------


class ContactCreateRequest(_RequestModel):
    """POST /contacts — add a contact."""

    name: ContactName
    phone_number: PhoneNumber


class ContactUpdateRequest(_RequestModel):
    """PUT /contacts/{contact_id} — change name and/or phone number."""

    name: ContactName | None = None
    phone_number: PhoneNumber | None = None


class ContactResponse(_CamelModel):
    """Serialised contact for API responses."""

    id: str
    name: str
    phone_number: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ContactListResponse(_CamelModel):
    contacts: list[ContactResponse]
    count: int
    limit: int = CONTACT_LIMIT


class ContactMutationResponse(_CamelModel):
    message: str
    contact: ContactResponse


class MessageResponse(_CamelModel):
    message: str
