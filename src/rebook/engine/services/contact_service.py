"""Contact service — per-account emergency contacts.

- List contacts (newest first)
- Add a contact, never exceeding ``CONTACT_LIMIT`` per account
- Update / remove a contact, only on behalf of its owner
"""

from __future__ import annotations

import contextlib
import logging
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import delete, func, select, update

from rebook.engine.models.account import CONTACT_LIMIT, Account
from rebook.engine.models.contact import Contact
from rebook.errors.definitions import (
    ErrAccountNotFound,
    ErrContactForbidden,
    ErrContactLimitReached,
    ErrContactNotFound,
)
from rebook.utils.validation import normalize_contact_name, normalize_phone_number

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from rebook.datastore.client import Datastore
    from rebook.metrics.collector import EngineMetrics

logger = logging.getLogger(__name__)


class ContactService:
    """Business logic for emergency contacts.

    The quota is enforced by a conditional increment of
    ``Account.contact_count`` in the same transaction as the insert. The
    UPDATE takes the owner's row (PostgreSQL) or the write lock (SQLite)
    before anything is read, so concurrent adds for one owner are serialized
    and the CHECK constraint backs the limit up at the database level.
    """

    def __init__(self, datastore: Datastore, *, metrics: EngineMetrics | None = None) -> None:
        self._ds = datastore
        self._metrics = metrics

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def list_contacts(self, owner_id: str) -> list[Contact]:
        """Return the owner's contacts, newest first."""
        stmt = (
            select(Contact)
            .where(Contact.account_id == owner_id)
            .order_by(Contact.created_at.desc())
        )
        async with self._ds.session() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def count_contacts(self, owner_id: str) -> int:
        """Return the number of live contacts the owner has."""
        async with self._ds.session() as session:
            return await self._count(session, owner_id)

    async def add_contact(self, owner_id: str, name: str, phone_number: str) -> Contact:
        """Create a contact for *owner_id*.

        Args:
            owner_id: The owning account ID.
            name: Display name, trimmed to 1-50 characters.
            phone_number: E.164-like phone number.

        Returns:
            The persisted Contact.

        Raises:
            ValidationError: If name or phone number is malformed.
            NotFoundError: If the owner account does not exist.
            QuotaExceededError: If the owner already has ``CONTACT_LIMIT`` contacts.
        """
        name = normalize_contact_name(name)
        phone_number = normalize_phone_number(phone_number)

        timer = self._metrics.track_add_contact() if self._metrics else contextlib.nullcontext()
        with timer:
            async with self._ds.transaction() as session:
                claimed = await session.execute(
                    update(Account)
                    .where(
                        Account.id == owner_id,
                        Account.contact_count < CONTACT_LIMIT,
                    )
                    .values(contact_count=Account.contact_count + 1)
                    .execution_options(synchronize_session=False)
                )
                if claimed.rowcount == 0:  # type: ignore[union-attr]
                    await self._raise_claim_failure(session, owner_id)

                # Re-validate against the rows themselves inside the same transaction.
                if await self._count(session, owner_id) >= CONTACT_LIMIT:
                    self._reject_quota(owner_id)

                contact = Contact(
                    id=uuid.uuid4().hex,
                    account_id=owner_id,
                    name=name,
                    phone_number=phone_number,
                )
                session.add(contact)

        logger.info("Account %s added contact %s", owner_id, contact.id)
        return contact

    async def update_contact(
        self,
        owner_id: str,
        contact_id: str,
        *,
        name: str | None = None,
        phone_number: str | None = None,
    ) -> Contact:
        """Change the name and/or phone number of an owned contact.

        Fields left as ``None`` keep their current value.

        Raises:
            ValidationError: If a supplied field is malformed.
            NotFoundError: If the contact does not exist.
            ForbiddenError: If the contact belongs to another account.
        """
        if name is not None:
            name = normalize_contact_name(name)
        if phone_number is not None:
            phone_number = normalize_phone_number(phone_number)

        async with self._ds.transaction() as session:
            contact = await self._get_owned(session, owner_id, contact_id)
            if name is not None:
                contact.name = name
            if phone_number is not None:
                contact.phone_number = phone_number

        logger.info("Account %s updated contact %s", owner_id, contact_id)
        return contact

    async def remove_contact(self, owner_id: str, contact_id: str) -> None:
        """Delete an owned contact.

        Raises:
            NotFoundError: If the contact does not exist (including a second removal).
            ForbiddenError: If the contact belongs to another account.
        """
        async with self._ds.transaction() as session:
            deleted = await session.execute(
                delete(Contact)
                .where(Contact.id == contact_id, Contact.account_id == owner_id)
                .execution_options(synchronize_session=False)
            )
            if deleted.rowcount == 0:  # type: ignore[union-attr]
                # Nothing removed: report why without having touched the row.
                await self._get_owned(session, owner_id, contact_id)
                raise ErrContactNotFound()
            await session.execute(
                update(Account)
                .where(Account.id == owner_id, Account.contact_count > 0)
                .values(contact_count=Account.contact_count - 1)
                .execution_options(synchronize_session=False)
            )

        logger.info("Account %s removed contact %s", owner_id, contact_id)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    @staticmethod
    async def _count(session: AsyncSession, owner_id: str) -> int:
        result = await session.execute(
            select(func.count()).select_from(Contact).where(Contact.account_id == owner_id)
        )
        return int(result.scalar_one())

    @staticmethod
    async def _get_owned(session: AsyncSession, owner_id: str, contact_id: str) -> Contact:
        contact = await session.get(Contact, contact_id)
        if contact is None:
            raise ErrContactNotFound()
        if contact.account_id != owner_id:
            logger.warning("Account %s denied access to contact %s", owner_id, contact_id)
            raise ErrContactForbidden()
        return contact

    async def _raise_claim_failure(self, session: AsyncSession, owner_id: str) -> None:
        """Tell a missing owner apart from one already at quota."""
        exists = await session.execute(select(Account.id).where(Account.id == owner_id))
        if exists.scalar_one_or_none() is None:
            raise ErrAccountNotFound()
        self._reject_quota(owner_id)

    def _reject_quota(self, owner_id: str) -> None:
        logger.info("Account %s is at the %d contact limit", owner_id, CONTACT_LIMIT)
        if self._metrics is not None:
            self._metrics.record_quota_rejection()
        raise ErrContactLimitReached()
