"""
Note Schemas.

Pydantic models for persisted note records and the UI enums that
select which notes are shown and how.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from notekeep.core.utils import now_ms


class NoteFilter(str, Enum):
    """Category filter applied to the note list."""

    ALL = "all"
    PINNED = "pinned"
    ARCHIVED = "archived"


class ViewMode(str, Enum):
    """Layout of the note list."""

    GRID = "grid"
    LIST = "list"


class Theme(str, Enum):
    """Colour theme preference, persisted independently of notes."""

    LIGHT = "light"
    DARK = "dark"


class Note(BaseModel):
    """
    A single persisted note record.

    The timestamp is persisted as ``updatedAt`` (milliseconds since the
    epoch). Unknown keys found in stored records are kept so that a
    load/save cycle never drops data written by another client.
    """

    id: str = Field(min_length=1, description="Opaque unique identifier")
    title: str = Field(default="", description="Note title")
    body: str = Field(default="", description="Markdown source")
    tags: list[str] = Field(default_factory=list, description="Tags, duplicates allowed")
    pinned: bool = Field(default=False, description="Pinned notes sort first")
    archived: bool = Field(default=False, description="Archived notes sort last")
    updated_at: int = Field(
        default_factory=now_ms,
        alias="updatedAt",
        description="Last mutation time in milliseconds",
    )

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: object) -> object:
        if value is None:
            return []
        return value

    def to_record(self) -> dict:
        """Serialize using the persisted field names."""
        return self.model_dump(by_alias=True)


class NoteDraft(BaseModel):
    """Raw editor contents; tags are a comma-separated string."""

    title: str = ""
    body: str = ""
    tags: str = ""

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_note(cls, note: Note) -> "NoteDraft":
        return cls(title=note.title, body=note.body, tags=", ".join(note.tags))

    def tag_list(self) -> list[str]:
        """Split the tags field on commas, dropping empty entries."""
        return [tag.strip() for tag in self.tags.split(",") if tag.strip()]
