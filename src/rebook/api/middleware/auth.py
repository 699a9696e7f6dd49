"""Authentication middleware — ``Authorization: Bearer <token>``.

Resolves the session token into a :class:`UserContext` that route handlers
use as the caller's identity.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from rebook.errors.definitions import ErrMissingToken

if TYPE_CHECKING:
    from rebook.engine.client import RebookEngine

AUTH_HEADER = "Authorization"
AUTH_SCHEME = "bearer"


@dataclass(frozen=True)
class UserContext:
    """Authenticated caller attached to the request."""

    account_id: str
    phone_number: str


def extract_bearer_token(header_value: str) -> str:
    """Return the token part of a ``Bearer <token>`` header.

    Raises:
        AuthError: If the header is empty or uses another scheme.
    """
    scheme, _, token = header_value.strip().partition(" ")
    if scheme.lower() != AUTH_SCHEME or not token.strip():
        raise ErrMissingToken()
    return token.strip()


def authenticate_request(engine: RebookEngine, *, authorization: str = "") -> UserContext:
    """Authenticate a request from its ``Authorization`` header.

    Args:
        engine: The Rebook engine.
        authorization: Raw value of the ``Authorization`` header.

    Returns:
        UserContext with the token's account ID and phone number.

    Raises:
        AuthError: If the header is missing or the token is invalid/expired.
    """
    token = extract_bearer_token(authorization)
    claims = engine.session_service.validate(token)
    return UserContext(account_id=claims.account_id, phone_number=claims.phone_number)
