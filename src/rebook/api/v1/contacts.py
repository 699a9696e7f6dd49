"""V1 contact endpoints.

Emergency contact CRUD for the authenticated account.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from rebook.api.dependencies import get_engine, require_user
from rebook.api.middleware.auth import UserContext  # noqa: TC001
from rebook.api.v1.schemas import (
    ContactCreateRequest,
    ContactListResponse,
    ContactMutationResponse,
    ContactResponse,
    ContactUpdateRequest,
    MessageResponse,
)
from rebook.engine.client import RebookEngine  # noqa: TC001

router = APIRouter(prefix="/contacts", tags=["contacts"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _contact_resp(c: object) -> ContactResponse:
    return ContactResponse(
        id=c.id,
        name=c.name,
        phone_number=c.phone_number,
        created_at=c.created_at,
        updated_at=c.updated_at,
    )


def _mutation(message: str, c: object) -> dict:
    return ContactMutationResponse(message=message, contact=_contact_resp(c)).model_dump(
        mode="json", by_alias=True
    )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.get("")
async def list_contacts(
    ctx: Annotated[UserContext, Depends(require_user)],
    engine: Annotated[RebookEngine, Depends(get_engine)],
) -> dict:
    """List the caller's contacts, newest first."""
    contacts = await engine.contact_service.list_contacts(ctx.account_id)
    return ContactListResponse(
        contacts=[_contact_resp(c) for c in contacts],
        count=len(contacts),
    ).model_dump(mode="json", by_alias=True)


@router.post("", status_code=201)
async def add_contact(
    ctx: Annotated[UserContext, Depends(require_user)],
    engine: Annotated[RebookEngine, Depends(get_engine)],
    body: ContactCreateRequest,
) -> dict:
    """Add a contact (at most five per account)."""
    contact = await engine.contact_service.add_contact(
        ctx.account_id, body.name, body.phone_number
    )
    return _mutation("Contact added successfully", contact)


@router.put("/{contact_id}")
async def update_contact(
    contact_id: str,
    ctx: Annotated[UserContext, Depends(require_user)],
    engine: Annotated[RebookEngine, Depends(get_engine)],
    body: ContactUpdateRequest,
) -> dict:
    """Change a contact's name and/or phone number."""
    contact = await engine.contact_service.update_contact(
        ctx.account_id,
        contact_id,
        name=body.name,
        phone_number=body.phone_number,
    )
    return _mutation("Contact updated successfully", contact)


@router.delete("/{contact_id}")
async def delete_contact(
    contact_id: str,
    ctx: Annotated[UserContext, Depends(require_user)],
    engine: Annotated[RebookEngine, Depends(get_engine)],
) -> dict:
    """Remove a contact."""
    await engine.contact_service.remove_contact(ctx.account_id, contact_id)
    return MessageResponse(message="Contact deleted successfully").model_dump(by_alias=True)
