"""Authentication module exports."""

from progress_engine.auth.config import DEFAULT_USER_ID, get_current_user_id
from progress_engine.auth.context import AuthContext, CurrentAuth
from progress_engine.auth.dependencies import UserId


__all__ = [
    "DEFAULT_USER_ID",
    "AuthContext",
    "CurrentAuth",
    "UserId",
    "get_current_user_id",
]
