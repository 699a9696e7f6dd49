"""FastAPI dependency injection helpers.

Provides ``Depends()``-compatible callables for engine access and
authentication in route handlers.

Usage in a route::

    @router.get("/contacts")
    async def list_contacts(
        ctx: Annotated[UserContext, Depends(require_user)],
        engine: Annotated[RebookEngine, Depends(get_engine)],
    ) -> ...:
        ...
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header, Request

from rebook.api.middleware.auth import UserContext, authenticate_request
from rebook.engine.client import RebookEngine  # noqa: TC001
from rebook.errors.rebook_errors import InternalError

# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


def get_engine(request: Request) -> RebookEngine:
    """Retrieve the engine from ``app.state``.

    The engine is stored on ``app.state.engine`` during lifespan startup.

    Raises:
        InternalError: If the engine is not initialized.
    """
    engine: RebookEngine | None = getattr(request.app.state, "engine", None)
    if engine is None:
        raise InternalError()
    return engine


# ---------------------------------------------------------------------------
# Auth context
# ---------------------------------------------------------------------------


def require_user(
    engine: Annotated[RebookEngine, Depends(get_engine)],
    authorization: Annotated[str, Header()] = "",
) -> UserContext:
    """Resolve the caller from ``Authorization: Bearer <token>``.

    Raises:
        AuthError: 401 if the token is missing, invalid or expired.
    """
    return authenticate_request(engine, authorization=authorization)
