"""Notebook, source and chat message models."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, Field


def _now() -> str:
    return datetime.now(UTC).isoformat()


def generate_notebook_id() -> str:
    """Generate a notebook ID: 'nb_' + 12 hex chars from uuid4."""
    return "nb_" + uuid.uuid4().hex[:12]


def generate_source_id() -> str:
    return "src_" + uuid.uuid4().hex[:8]


def generate_message_id() -> str:
    return "msg_" + uuid.uuid4().hex[:8]


class SourceKind(StrEnum):
    TEXT = "text"
    LINK = "link"
    FILE = "file"


class Role(StrEnum):
    USER = "user"
    MODEL = "model"


class Source(BaseModel):
    """A user-supplied document. Content never changes after creation."""

    id: str = Field(default_factory=generate_source_id)
    title: str
    content: str
    kind: SourceKind = SourceKind.TEXT
    active: bool = True
    added_at: str = Field(default_factory=_now)


class ChatMessage(BaseModel):
    id: str = Field(default_factory=generate_message_id)
    role: Role
    text: str
    timestamp: str = Field(default_factory=_now)
    # Titles copied at reply time; not a live reference to the sources.
    sources_used: list[str] | None = None


class Notebook(BaseModel):
    id: str = Field(default_factory=generate_notebook_id)
    title: str = "Untitled Notebook"
    sources: list[Source] = Field(default_factory=list)
    history: list[ChatMessage] = Field(default_factory=list)
    created_at: str = Field(default_factory=_now)
    updated_at: str = Field(default_factory=_now)

    def active_sources(self) -> list[Source]:
        return [s for s in self.sources if s.active]

    def get_source(self, source_id: str) -> Source | None:
        for source in self.sources:
            if source.id == source_id:
                return source
        return None

    def touch(self) -> None:
        self.updated_at = _now()
