from __future__ import annotations
from datetime import datetime, UTC
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic import Field as PydanticField
from sqlmodel import Field, SQLModel


class StorageEntry(SQLModel, table=True):
    """One key in the local key-value store; the notes blob lives under "notes"."""

    key: str = Field(primary_key=True)
    value: str = ""
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class Note(BaseModel):
    # wire name stays camelCase so blobs from the browser app load unchanged
    model_config = ConfigDict(populate_by_name=True)

    id: int
    title: str = ""
    content: str = ""
    tags: list[str] = PydanticField(default_factory=list)
    created_at: datetime = PydanticField(alias="createdAt")

    @property
    def display_title(self) -> str:
        return self.title or "Untitled"


class Draft(BaseModel):
    """Editing buffer. id None means a new note is being written."""

    id: Optional[int] = None
    title: str = ""
    content: str = ""
    tags: list[str] = PydanticField(default_factory=list)

    def is_blank(self) -> bool:
        return not self.title.strip() and not self.content.strip()


class ViewState(BaseModel):
    """Everything the presentation layer needs after a state change."""

    notes: list[Note]
    total: int
    tags: list[str]
    draft: Draft
    tag_input: str
    editing: bool
    search_query: str
    filter_tag: str
    error: Optional[str] = None
