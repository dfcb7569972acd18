"""Shared test fixtures for lectern tests."""

from __future__ import annotations

import base64
import struct
from typing import Any
from unittest.mock import MagicMock

import pytest

from lectern.config import LecternConfig
from lectern.notebook.kv import MemoryKeyValueStore
from lectern.notebook.store import NotebookRepository


@pytest.fixture
def config() -> LecternConfig:
    return LecternConfig()


@pytest.fixture
def kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def repo(kv: MemoryKeyValueStore) -> NotebookRepository:
    return NotebookRepository(kv)


@pytest.fixture
def api_keys(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key")
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")


def pcm_payload(samples: list[int]) -> str:
    """Base64 s16le payload for the given int16 samples."""
    return base64.b64encode(struct.pack(f"<{len(samples)}h", *samples)).decode("ascii")


def mock_text_response(text: str) -> MagicMock:
    """Create a mock Anthropic response with text content."""
    block = MagicMock()
    block.type = "text"
    block.text = text
    response = MagicMock()
    response.content = [block]
    return response


def mock_script_response(lines: list[dict[str, Any]] | Any) -> MagicMock:
    """Create a mock Anthropic response with a write_script tool use."""
    block = MagicMock()
    block.type = "tool_use"
    block.name = "write_script"
    block.input = {"lines": lines}
    response = MagicMock()
    response.content = [block]
    return response


def mock_tts_response(data: bytes | None) -> MagicMock:
    """Create a mock Gemini response carrying inline audio bytes."""
    part = MagicMock()
    if data is None:
        part.inline_data = None
    else:
        part.inline_data.data = data
    response = MagicMock()
    response.candidates = [MagicMock()]
    response.candidates[0].content.parts = [part]
    return response
