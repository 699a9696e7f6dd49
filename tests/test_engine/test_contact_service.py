"""Tests for ContactService — quota, ownership and ordering."""

from __future__ import annotations

import asyncio

import pytest
from sqlalchemy import select

from rebook.engine.client import RebookEngine
from rebook.engine.models import CONTACT_LIMIT, Account, Contact
from rebook.errors.definitions import (
    ErrAccountNotFound,
    ErrContactForbidden,
    ErrContactLimitReached,
    ErrContactNotFound,
    ErrInvalidContactName,
    ErrInvalidPhoneNumber,
)
from rebook.errors.rebook_errors import (
    ForbiddenError,
    NotFoundError,
    QuotaExceededError,
    ValidationError,
)
from rebook.metrics.collector import EngineMetrics


async def _register(engine: RebookEngine, phone_number: str = "+14155550000") -> str:
    account = await engine.credential_service.register(phone_number, "123456")
    return account.id


async def _fill(engine: RebookEngine, owner_id: str, n: int = CONTACT_LIMIT) -> list[Contact]:
    return [
        await engine.contact_service.add_contact(owner_id, f"Contact {i}", f"+1415555010{i}")
        for i in range(n)
    ]


async def _stored_count(engine: RebookEngine, owner_id: str) -> int:
    async with engine.datastore.session() as session:
        account = await session.get(Account, owner_id)
        return account.contact_count


# ===================================================================
# Add
# ===================================================================


class TestAddContact:
    async def test_add(self, engine: RebookEngine) -> None:
        owner = await _register(engine)
        contact = await engine.contact_service.add_contact(owner, "  Mom ", "+14155550001")
        assert contact.id
        assert contact.account_id == owner
        assert contact.name == "Mom"
        assert contact.phone_number == "+14155550001"
        assert contact.created_at is not None
        assert await engine.contact_service.count_contacts(owner) == 1

    async def test_duplicate_contacts_are_allowed(self, engine: RebookEngine) -> None:
        owner = await _register(engine)
        a = await engine.contact_service.add_contact(owner, "Mom", "+14155550001")
        b = await engine.contact_service.add_contact(owner, "Mom", "+14155550001")
        assert a.id != b.id

    async def test_add_until_limit(self, engine: RebookEngine) -> None:
        owner = await _register(engine)
        await _fill(engine, owner)
        assert await engine.contact_service.count_contacts(owner) == CONTACT_LIMIT

        with pytest.raises(QuotaExceededError) as exc_info:
            await engine.contact_service.add_contact(owner, "Sixth", "+14155550199")
        assert exc_info.value.code == ErrContactLimitReached.default_code
        assert await engine.contact_service.count_contacts(owner) == CONTACT_LIMIT
        assert await _stored_count(engine, owner) == CONTACT_LIMIT

    async def test_quota_is_per_account(self, engine: RebookEngine) -> None:
        first = await _register(engine, "+14155550000")
        second = await _register(engine, "+14155559999")
        await _fill(engine, first)
        contact = await engine.contact_service.add_contact(second, "Dad", "+14155550002")
        assert contact.account_id == second

    async def test_unknown_owner(self, engine: RebookEngine) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            await engine.contact_service.add_contact("missing", "Mom", "+14155550001")
        assert exc_info.value.code == ErrAccountNotFound.default_code

    @pytest.mark.parametrize("name", ["", "   ", "x" * 51])
    async def test_invalid_name(self, engine: RebookEngine, name: str) -> None:
        owner = await _register(engine)
        with pytest.raises(ValidationError) as exc_info:
            await engine.contact_service.add_contact(owner, name, "+14155550001")
        assert exc_info.value.code == ErrInvalidContactName.default_code
        assert await _stored_count(engine, owner) == 0

    async def test_invalid_phone_number(self, engine: RebookEngine) -> None:
        owner = await _register(engine)
        with pytest.raises(ValidationError) as exc_info:
            await engine.contact_service.add_contact(owner, "Mom", "call me")
        assert exc_info.value.code == ErrInvalidPhoneNumber.default_code

    async def test_quota_metrics(self, config_factory) -> None:
        metrics = EngineMetrics()
        engine = RebookEngine(config_factory(), metrics=metrics)
        await engine.initialize()
        try:
            owner = await _register(engine)
            await _fill(engine, owner)
            with pytest.raises(QuotaExceededError):
                await engine.contact_service.add_contact(owner, "Sixth", "+14155550199")
        finally:
            await engine.close()

        registry = metrics.registry
        assert registry.get_sample_value("rebook_contact_quota_rejections_total") == 1.0
        assert registry.get_sample_value("rebook_add_contact_histogram_count") == 6.0


# ===================================================================
# List
# ===================================================================


class TestListContacts:
    async def test_empty(self, engine: RebookEngine) -> None:
        owner = await _register(engine)
        assert await engine.contact_service.list_contacts(owner) == []
        assert await engine.contact_service.count_contacts(owner) == 0

    async def test_newest_first(self, engine: RebookEngine) -> None:
        owner = await _register(engine)
        added = await _fill(engine, owner, 3)
        listed = await engine.contact_service.list_contacts(owner)
        assert [c.id for c in listed] == [c.id for c in reversed(added)]

    async def test_only_own_contacts(self, engine: RebookEngine) -> None:
        first = await _register(engine, "+14155550000")
        second = await _register(engine, "+14155559999")
        await _fill(engine, first, 2)
        await engine.contact_service.add_contact(second, "Dad", "+14155550002")

        listed = await engine.contact_service.list_contacts(second)
        assert [c.name for c in listed] == ["Dad"]


# ===================================================================
# Update
# ===================================================================


class TestUpdateContact:
    async def test_update_both_fields(self, engine: RebookEngine) -> None:
        owner = await _register(engine)
        contact = await engine.contact_service.add_contact(owner, "Mom", "+14155550001")
        updated = await engine.contact_service.update_contact(
            owner, contact.id, name="Mother", phone_number="+14155550002"
        )
        assert updated.name == "Mother"
        assert updated.phone_number == "+14155550002"

        [stored] = await engine.contact_service.list_contacts(owner)
        assert stored.name == "Mother"

    async def test_partial_update(self, engine: RebookEngine) -> None:
        owner = await _register(engine)
        contact = await engine.contact_service.add_contact(owner, "Mom", "+14155550001")
        updated = await engine.contact_service.update_contact(owner, contact.id, name="Mother")
        assert updated.name == "Mother"
        assert updated.phone_number == "+14155550001"

    async def test_update_by_non_owner(self, engine: RebookEngine) -> None:
        owner = await _register(engine, "+14155550000")
        intruder = await _register(engine, "+14155559999")
        contact = await engine.contact_service.add_contact(owner, "Mom", "+14155550001")

        with pytest.raises(ForbiddenError) as exc_info:
            await engine.contact_service.update_contact(intruder, contact.id, name="Hacked")
        assert exc_info.value.code == ErrContactForbidden.default_code

        [stored] = await engine.contact_service.list_contacts(owner)
        assert stored.name == "Mom"

    async def test_update_missing(self, engine: RebookEngine) -> None:
        owner = await _register(engine)
        with pytest.raises(NotFoundError) as exc_info:
            await engine.contact_service.update_contact(owner, "missing", name="X")
        assert exc_info.value.code == ErrContactNotFound.default_code

    async def test_update_invalid_name(self, engine: RebookEngine) -> None:
        owner = await _register(engine)
        contact = await engine.contact_service.add_contact(owner, "Mom", "+14155550001")
        with pytest.raises(ValidationError):
            await engine.contact_service.update_contact(owner, contact.id, name="")


# ===================================================================
# Remove
# ===================================================================


class TestRemoveContact:
    async def test_remove(self, engine: RebookEngine) -> None:
        owner = await _register(engine)
        contact = await engine.contact_service.add_contact(owner, "Mom", "+14155550001")
        await engine.contact_service.remove_contact(owner, contact.id)
        assert await engine.contact_service.count_contacts(owner) == 0
        assert await _stored_count(engine, owner) == 0

    async def test_second_removal_is_not_found(self, engine: RebookEngine) -> None:
        owner = await _register(engine)
        contact = await engine.contact_service.add_contact(owner, "Mom", "+14155550001")
        await engine.contact_service.remove_contact(owner, contact.id)
        with pytest.raises(NotFoundError) as exc_info:
            await engine.contact_service.remove_contact(owner, contact.id)
        assert exc_info.value.code == ErrContactNotFound.default_code
        assert await _stored_count(engine, owner) == 0

    async def test_remove_by_non_owner(self, engine: RebookEngine) -> None:
        owner = await _register(engine, "+14155550000")
        intruder = await _register(engine, "+14155559999")
        contact = await engine.contact_service.add_contact(owner, "Mom", "+14155550001")

        with pytest.raises(ForbiddenError):
            await engine.contact_service.remove_contact(intruder, contact.id)
        assert await engine.contact_service.count_contacts(owner) == 1
        assert await _stored_count(engine, owner) == 1

    async def test_remove_frees_a_slot(self, engine: RebookEngine) -> None:
        owner = await _register(engine)
        added = await _fill(engine, owner)
        await engine.contact_service.remove_contact(owner, added[0].id)

        contact = await engine.contact_service.add_contact(owner, "Sixth", "+14155550199")
        assert contact.name == "Sixth"
        assert await engine.contact_service.count_contacts(owner) == CONTACT_LIMIT

    async def test_contacts_removed_with_account(self, engine: RebookEngine) -> None:
        owner = await _register(engine)
        await _fill(engine, owner, 2)
        async with engine.datastore.transaction() as session:
            await session.delete(await session.get(Account, owner))

        async with engine.datastore.session() as session:
            remaining = await session.execute(select(Contact).where(Contact.account_id == owner))
            assert remaining.scalars().all() == []


# ===================================================================
# Concurrency
# ===================================================================


class TestConcurrentAdds:
    async def test_quota_holds_under_concurrent_adds(self, tmp_path, config_factory) -> None:
        """Concurrent adds on a file database never push an owner past the limit."""
        dsn = f"sqlite+aiosqlite:///{tmp_path / 'concurrent.db'}"
        engine = RebookEngine(config_factory(dsn))
        await engine.initialize()
        try:
            owner = await _register(engine)
            results = await asyncio.gather(
                *(
                    engine.contact_service.add_contact(owner, f"C{i}", f"+1415555020{i}")
                    for i in range(10)
                ),
                return_exceptions=True,
            )
            added = [r for r in results if isinstance(r, Contact)]
            rejected = [r for r in results if isinstance(r, QuotaExceededError)]

            assert len(added) == CONTACT_LIMIT
            assert len(rejected) == 10 - CONTACT_LIMIT
            assert await engine.contact_service.count_contacts(owner) == CONTACT_LIMIT
            assert await _stored_count(engine, owner) == CONTACT_LIMIT
        finally:
            await engine.close()
