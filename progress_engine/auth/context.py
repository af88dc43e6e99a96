"""AuthContext and the FastAPI dependency that builds it.

Pairs the caller's user id with the request's AsyncSession so routers can hand
both to a service in one argument.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Annotated
from uuid import UUID

from fastapi import Depends

from progress_engine.auth.dependencies import _get_user_id
from progress_engine.database.session import DbSession


if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


class AuthContext:
    """Request-scoped user id and session."""

    def __init__(self, user_id: UUID, session: AsyncSession) -> None:
        self.user_id = user_id
        self.session = session


async def get_auth_context(
    user_id: Annotated[UUID, Depends(_get_user_id)],
    session: DbSession,
) -> AuthContext:
    """Build an AuthContext for the current request."""
    return AuthContext(user_id=user_id, session=session)


CurrentAuth = Annotated[AuthContext, Depends(get_auth_context)]
