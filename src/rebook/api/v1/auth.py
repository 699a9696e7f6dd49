"""V1 auth endpoints.

Registration, login (throttled per client address) and token verification.
"""

# No ``from __future__ import annotations`` here: slowapi wraps ``login`` and
# FastAPI resolves the wrapper's annotations against slowapi's globals.

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from rebook.api.dependencies import get_engine, require_user
from rebook.api.middleware.auth import UserContext
from rebook.api.middleware.rate_limit import LOGIN_LIMIT, limiter
from rebook.api.v1.schemas import (
    AccountResponse,
    CredentialsRequest,
    LoginResponse,
    RegisterResponse,
    VerifyResponse,
)
from rebook.engine.client import RebookEngine
from rebook.engine.models.account import Account

router = APIRouter(prefix="/auth", tags=["auth"])


def _account_resp(account: Account) -> AccountResponse:
    return AccountResponse(
        id=account.id,
        phone_number=account.phone_number,
        is_active=account.is_active,
        last_login=account.last_login_at,
        created_at=account.created_at,
        updated_at=account.updated_at,
    )


@router.post("/register", status_code=201)
async def register(
    engine: Annotated[RebookEngine, Depends(get_engine)],
    body: CredentialsRequest,
) -> dict:
    """Create an account for a phone number."""
    account = await engine.credential_service.register(body.phone_number, body.passcode)
    return RegisterResponse(user_id=account.id).model_dump(mode="json", by_alias=True)


@router.post("/login")
@limiter.limit(LOGIN_LIMIT)
async def login(
    request: Request,
    engine: Annotated[RebookEngine, Depends(get_engine)],
    body: CredentialsRequest,
) -> dict:
    """Exchange phone number and passcode for a session token."""
    account = await engine.credential_service.verify(body.phone_number, body.passcode)
    sessions = engine.session_service
    return LoginResponse(
        token=sessions.issue(account),
        expires_in=int(sessions.ttl.total_seconds()),
        user=_account_resp(account),
    ).model_dump(mode="json", by_alias=True)


@router.get("/verify")
async def verify(
    ctx: Annotated[UserContext, Depends(require_user)],
    engine: Annotated[RebookEngine, Depends(get_engine)],
) -> dict:
    """Confirm the bearer token and return the account it belongs to."""
    account = await engine.credential_service.get_account(ctx.account_id)
    return VerifyResponse(user=_account_resp(account)).model_dump(mode="json", by_alias=True)
