"""
Schemas.

Pydantic models shared by the store, repository, controller and views.
"""

from notekeep.schemas.note import Note, NoteDraft, NoteFilter, Theme, ViewMode

__all__ = [
    "Note",
    "NoteDraft",
    "NoteFilter",
    "Theme",
    "ViewMode",
]
