"""Public exports for rectifier data models."""

from __future__ import annotations

from .auth import AuthenticationResult
from .dto import (
    Note,
    NoteFilter,
    NoteMetadata,
    Notebook,
    NotesMetadataPage,
    Resource,
)

__all__ = [
    "AuthenticationResult",
    "Note",
    "NoteFilter",
    "NoteMetadata",
    "Notebook",
    "NotesMetadataPage",
    "Resource",
]
