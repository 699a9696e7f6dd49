"""Session service — signed, time-bounded bearer tokens (JWT)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import jwt

from rebook.errors.definitions import ErrInvalidToken, ErrMissingToken

if TYPE_CHECKING:
    from collections.abc import Callable

    from rebook.config.settings import AuthConfig
    from rebook.engine.models.account import Account

logger = logging.getLogger(__name__)

CLAIM_PHONE_NUMBER = "phone_number"
_REQUIRED_CLAIMS = ["sub", "iat", "exp", CLAIM_PHONE_NUMBER]


@dataclass(frozen=True)
class SessionClaims:
    """Decoded contents of a valid session token."""

    account_id: str
    phone_number: str
    issued_at: datetime
    expires_at: datetime


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class SessionService:
    """Mints and validates session tokens.

    No server-side revocation list: a token stays valid until its ``exp``
    claim passes or the secret changes.
    """

    def __init__(
        self,
        config: AuthConfig,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._secret = config.secret_key
        self._algorithm = config.algorithm
        self._ttl = timedelta(hours=config.token_ttl_hours)
        self._clock = clock

    @property
    def ttl(self) -> timedelta:
        """Lifetime of newly issued tokens."""
        return self._ttl

    def issue(self, account: Account) -> str:
        """Return a signed token for *account* expiring ``ttl`` from now."""
        issued_at = self._clock()
        payload = {
            "sub": account.id,
            CLAIM_PHONE_NUMBER: account.phone_number,
            "iat": issued_at,
            "exp": issued_at + self._ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def validate(self, token: str | None) -> SessionClaims:
        """Verify signature and expiry and return the embedded claims.

        Expiry is judged against the service clock, the same one ``issue``
        stamps tokens with.

        Raises:
            AuthError: If the token is absent, malformed, forged or expired.
        """
        if not token:
            raise ErrMissingToken()
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": _REQUIRED_CLAIMS, "verify_exp": False},
            )
            issued_at = datetime.fromtimestamp(payload["iat"], tz=UTC)
            expires_at = datetime.fromtimestamp(payload["exp"], tz=UTC)
        except (jwt.InvalidTokenError, TypeError, ValueError, OverflowError, OSError):
            logger.info("Rejected invalid session token")
            raise ErrInvalidToken() from None

        if expires_at <= self._clock():
            logger.info("Rejected expired session token")
            raise ErrInvalidToken()

        return SessionClaims(
            account_id=str(payload["sub"]),
            phone_number=str(payload[CLAIM_PHONE_NUMBER]),
            issued_at=issued_at,
            expires_at=expires_at,
        )
