"""Credential service — phone number + passcode accounts.

- Register an account (bcrypt-hashed passcode, unique phone number)
- Verify a login attempt without revealing whether the account exists
- Re-hash a passcode for an existing account
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from rebook.engine.models.account import Account
from rebook.engine.models.base import utcnow
from rebook.errors.definitions import (
    ErrAccountNotFound,
    ErrInvalidCredentials,
    ErrPhoneNumberTaken,
)
from rebook.errors.rebook_errors import ValidationError
from rebook.utils.crypto import DEFAULT_ROUNDS, hash_passcode, verify_passcode
from rebook.utils.validation import normalize_phone_number, validate_passcode

if TYPE_CHECKING:
    from rebook.datastore.client import Datastore
    from rebook.metrics.collector import EngineMetrics

logger = logging.getLogger(__name__)


class CredentialService:
    """Owns the phone number → passcode hash mapping.

    bcrypt hashing and comparison are CPU-bound and run in a worker thread.
    """

    def __init__(
        self,
        datastore: Datastore,
        *,
        bcrypt_rounds: int = DEFAULT_ROUNDS,
        metrics: EngineMetrics | None = None,
    ) -> None:
        self._ds = datastore
        self._rounds = bcrypt_rounds
        self._metrics = metrics
        self._dummy_hash: str | None = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def register(self, phone_number: str, passcode: str) -> Account:
        """Create a new account.

        Args:
            phone_number: E.164-like phone number.
            passcode: Exactly six digits.

        Returns:
            The persisted Account.

        Raises:
            ValidationError: If either input is malformed.
            ConflictError: If the phone number is already registered.
        """
        phone_number = normalize_phone_number(phone_number)
        validate_passcode(passcode)

        passcode_hash = await asyncio.to_thread(hash_passcode, passcode, rounds=self._rounds)
        account = Account(
            id=uuid.uuid4().hex,
            phone_number=phone_number,
            passcode_hash=passcode_hash,
        )

        try:
            async with self._ds.transaction() as session:
                existing = await session.execute(
                    select(Account.id).where(Account.phone_number == phone_number)
                )
                if existing.scalar_one_or_none() is not None:
                    raise ErrPhoneNumberTaken()
                session.add(account)
        except IntegrityError as exc:
            # A concurrent registration won the unique index.
            raise ErrPhoneNumberTaken() from exc

        logger.info("Registered account %s", account.id)
        if self._metrics is not None:
            self._metrics.record_registration()
        return account

    async def verify(self, phone_number: str, passcode: str) -> Account:
        """Check a login attempt and stamp ``last_login_at`` on success.

        Every failure mode (malformed input, unknown phone number, wrong
        passcode, inactive account) raises the same generic error.

        Raises:
            AuthError: ``invalid phone number or passcode``.
        """
        try:
            phone_number = normalize_phone_number(phone_number)
            validate_passcode(passcode)
        except ValidationError:
            self._record_login(success=False)
            raise ErrInvalidCredentials() from None

        async with self._ds.transaction() as session:
            result = await session.execute(
                select(Account).where(Account.phone_number == phone_number)
            )
            account = result.scalar_one_or_none()
            # Unknown numbers still pay for one bcrypt comparison.
            stored_hash = account.passcode_hash if account is not None else await self._dummy()
            matches = await asyncio.to_thread(verify_passcode, passcode, stored_hash)
            if account is None or not matches or not account.is_active:
                logger.warning("Login failed for unknown or mismatched credentials")
                self._record_login(success=False)
                raise ErrInvalidCredentials()
            account.last_login_at = utcnow()

        logger.info("Account %s logged in", account.id)
        self._record_login(success=True)
        return account

    async def get_account(self, account_id: str) -> Account:
        """Get an account by ID.

        Raises:
            NotFoundError: If no such account exists.
        """
        async with self._ds.session() as session:
            account = await session.get(Account, account_id)
        if account is None:
            raise ErrAccountNotFound()
        return account

    async def set_passcode(self, account_id: str, passcode: str) -> Account:
        """Replace an account's passcode hash.

        Raises:
            ValidationError: If the passcode is not six digits.
            NotFoundError: If no such account exists.
        """
        validate_passcode(passcode)
        passcode_hash = await asyncio.to_thread(hash_passcode, passcode, rounds=self._rounds)

        async with self._ds.transaction() as session:
            account = await session.get(Account, account_id)
            if account is None:
                raise ErrAccountNotFound()
            account.passcode_hash = passcode_hash

        logger.info("Passcode changed for account %s", account_id)
        return account

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _dummy(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = await asyncio.to_thread(
                hash_passcode, uuid.uuid4().hex[:6], rounds=self._rounds
            )
        return self._dummy_hash

    def _record_login(self, *, success: bool) -> None:
        if self._metrics is not None:
            self._metrics.record_login(success=success)
