"""Catalog collaborator: read-only course structure (course -> sections -> lessons)."""

from progress_engine.catalog.service import CatalogService
from progress_engine.catalog.structure import CourseStructure, LessonRef, SectionRef


__all__ = [
    "CatalogService",
    "CourseStructure",
    "LessonRef",
    "SectionRef",
]
