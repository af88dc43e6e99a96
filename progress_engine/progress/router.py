"""Content progress API endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter

from progress_engine.auth import CurrentAuth
from progress_engine.exceptions import ResourceNotFoundError

from .schemas import ProgressResponse, ProgressUpdate
from .service import ProgressService


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/progress", tags=["progress"])


@router.get("/{content_id}")
async def get_progress(
    content_id: UUID,
    auth: CurrentAuth,
) -> ProgressResponse:
    """Get progress for a single content item."""
    progress = await ProgressService(auth.session).get_progress(auth.user_id, content_id)
    if progress is None:
        raise ResourceNotFoundError("ContentProgress", str(content_id))
    return ProgressResponse.model_validate(progress)


@router.put("/{content_id}")
async def update_progress(
    content_id: UUID,
    update: ProgressUpdate,
    auth: CurrentAuth,
) -> ProgressResponse:
    """Update progress for a content item."""
    progress = await ProgressService(auth.session).update_progress(
        user_id=auth.user_id,
        content_id=content_id,
        percent=update.progress_percentage,
        time_spent_delta_seconds=update.time_spent_delta_seconds,
        position=update.last_position,
    )
    return ProgressResponse.model_validate(progress)
