"""Progress tracker for individual pieces of content."""

from progress_engine.progress.models import ContentProgress
from progress_engine.progress.router import router
from progress_engine.progress.schemas import ProgressResponse, ProgressUpdate
from progress_engine.progress.service import ProgressService


__all__ = [
    "ContentProgress",
    "ProgressResponse",
    "ProgressService",
    "ProgressUpdate",
    "router",
]
