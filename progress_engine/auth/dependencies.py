"""FastAPI authentication dependencies."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, Request

from progress_engine.auth.config import require_user_id


async def _get_user_id(request: Request) -> UUID:
    """Get user ID dependency for FastAPI routes.

    Returns
    -------
        UUID: The caller's user id or DEFAULT_USER_ID in single-user mode
    """
    if getattr(request.state, "user_id", None) is not None:
        return request.state.user_id
    user_id = require_user_id(request)
    request.state.user_id = user_id
    return user_id


# Usage: async def my_route(user_id: UserId) -> Response:
UserId = Annotated[UUID, Depends(_get_user_id)]
