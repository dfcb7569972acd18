"""In-memory registry of playable WAV clips behind revocable ids."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime

from pydantic import BaseModel, Field

logger = logging.getLogger("lectern.audio")


def generate_clip_id() -> str:
    """Generate a clip ID: 'clip_' + 12 hex chars from uuid4."""
    return "clip_" + uuid.uuid4().hex[:12]


class AudioClip(BaseModel):
    id: str = Field(default_factory=generate_clip_id)
    notebook_id: str
    data: bytes = Field(repr=False)
    media_type: str = "audio/wav"
    created_at: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())

    @property
    def url(self) -> str:
        return f"/api/audio/{self.id}"


class AudioClipStore:
    """Holds at most one live clip per notebook.

    Creating a clip for a notebook revokes the one it replaces, so stale
    overviews do not accumulate.
    """

    def __init__(self) -> None:
        self._clips: dict[str, AudioClip] = {}
        self._by_notebook: dict[str, str] = {}

    def create(self, notebook_id: str, data: bytes) -> AudioClip:
        self.revoke_for_notebook(notebook_id)
        clip = AudioClip(notebook_id=notebook_id, data=data)
        self._clips[clip.id] = clip
        self._by_notebook[notebook_id] = clip.id
        logger.info("Created clip %s for notebook %s (%d bytes)", clip.id, notebook_id, len(data))
        return clip

    def get(self, clip_id: str) -> AudioClip | None:
        return self._clips.get(clip_id)

    def current(self, notebook_id: str) -> AudioClip | None:
        clip_id = self._by_notebook.get(notebook_id)
        return self._clips.get(clip_id) if clip_id else None

    def revoke(self, clip_id: str) -> bool:
        """Release a clip, return True if it was live."""
        clip = self._clips.pop(clip_id, None)
        if clip is None:
            return False
        if self._by_notebook.get(clip.notebook_id) == clip_id:
            del self._by_notebook[clip.notebook_id]
        logger.info("Revoked clip %s", clip_id)
        return True

    def revoke_for_notebook(self, notebook_id: str) -> bool:
        clip_id = self._by_notebook.get(notebook_id)
        if clip_id is None:
            return False
        return self.revoke(clip_id)

    def __len__(self) -> int:
        return len(self._clips)
