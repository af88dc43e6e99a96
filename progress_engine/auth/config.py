"""Identity collaborator.

The engine never authenticates. It trusts whatever the upstream identity
gateway put on the request, or runs in single-user mode.
"""

import logging
from uuid import UUID

from fastapi import Request

from progress_engine.auth.exceptions import (
    InvalidIdentityError,
    MissingIdentityError,
    UnknownAuthProviderError,
)
from progress_engine.config.settings import get_settings


logger = logging.getLogger(__name__)

# Identity used when AUTH_PROVIDER is "none"
DEFAULT_USER_ID = UUID("00000000-0000-0000-0000-000000000001")


def get_current_user_id(request: Request) -> UUID | None:
    """
    Resolve the caller's user id, or None when the gateway sent nothing.

    Single-user mode: always DEFAULT_USER_ID.
    Header mode: the trusted header set by the gateway, parsed as a UUID.
    """
    settings = get_settings()

    if settings.AUTH_PROVIDER == "none":
        if settings.ENVIRONMENT == "production":
            logger.error("AUTH_PROVIDER='none' is not allowed in production!")
            error_msg = "Single-user mode (AUTH_PROVIDER='none') is not allowed in production."
            raise ValueError(error_msg)
        return DEFAULT_USER_ID

    if settings.AUTH_PROVIDER == "header":
        raw = request.headers.get(settings.AUTH_USER_HEADER)
        if not raw:
            return None
        try:
            return UUID(raw.strip())
        except ValueError as e:
            logger.warning(f"Rejected malformed {settings.AUTH_USER_HEADER} header")
            raise InvalidIdentityError(settings.AUTH_USER_HEADER) from e

    logger.error(f"Unknown auth provider: {settings.AUTH_PROVIDER}")
    raise UnknownAuthProviderError(settings.AUTH_PROVIDER)


def require_user_id(request: Request) -> UUID:
    """Like get_current_user_id, but an absent identity is an error."""
    user_id = get_current_user_id(request)
    if user_id is None:
        raise MissingIdentityError(get_settings().AUTH_USER_HEADER)
    return user_id
