"""Tests for the notebook repository and key-value backends."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from lectern.notebook.kv import FileKeyValueStore, MemoryKeyValueStore
from lectern.notebook.models import ChatMessage, Role, SourceKind
from lectern.notebook.store import STORAGE_KEY, NotebookRepository


def test_create_notebook_prepends_and_persists(repo: NotebookRepository, kv: MemoryKeyValueStore) -> None:
    first = repo.create_notebook()
    second = repo.create_notebook("Research")
    assert [nb.id for nb in repo.list_notebooks()] == [second.id, first.id]
    assert first.title == "Untitled Notebook"

    stored = json.loads(kv.get(STORAGE_KEY) or "[]")
    assert [nb["id"] for nb in stored] == [second.id, first.id]


def test_reload_from_storage(kv: MemoryKeyValueStore) -> None:
    repo = NotebookRepository(kv)
    nb = repo.create_notebook("Persisted")
    repo.add_source(nb.id, "Doc", "Body", SourceKind.LINK)

    fresh = NotebookRepository(kv)
    loaded = fresh.get(nb.id)
    assert loaded is not None
    assert loaded.title == "Persisted"
    assert loaded.sources[0].kind == SourceKind.LINK


def test_missing_storage_is_empty(repo: NotebookRepository) -> None:
    assert repo.list_notebooks() == []


def test_malformed_storage_is_empty() -> None:
    kv = MemoryKeyValueStore({STORAGE_KEY: "{not json"})
    assert NotebookRepository(kv).list_notebooks() == []


def test_wrong_shape_storage_is_empty() -> None:
    kv = MemoryKeyValueStore({STORAGE_KEY: json.dumps({"id": "nb_1"})})
    assert NotebookRepository(kv).list_notebooks() == []


def test_rename_updates_timestamp(repo: NotebookRepository) -> None:
    nb = repo.create_notebook()
    nb.updated_at = "2000-01-01T00:00:00+00:00"
    renamed = repo.rename_notebook(nb.id, "New title")
    assert renamed is not None
    assert renamed.title == "New title"
    assert renamed.updated_at > "2000-01-01T00:00:00+00:00"


def test_rename_missing_notebook(repo: NotebookRepository) -> None:
    assert repo.rename_notebook("nb_missing", "x") is None


def test_delete_notebook(repo: NotebookRepository) -> None:
    nb = repo.create_notebook()
    assert repo.delete_notebook(nb.id) is True
    assert repo.get(nb.id) is None
    assert repo.delete_notebook(nb.id) is False


def test_delete_last_notebook_is_persisted(kv: MemoryKeyValueStore) -> None:
    repo = NotebookRepository(kv)
    nb = repo.create_notebook()
    repo.delete_notebook(nb.id)
    assert NotebookRepository(kv).list_notebooks() == []


def test_add_source_is_active_and_newest_first(repo: NotebookRepository) -> None:
    nb = repo.create_notebook()
    a = repo.add_source(nb.id, "A", "alpha")
    b = repo.add_source(nb.id, "B", "beta")
    assert a is not None and b is not None
    assert a.active is True
    assert a.kind == SourceKind.TEXT
    assert [s.title for s in nb.sources] == ["B", "A"]


def test_add_source_missing_notebook(repo: NotebookRepository) -> None:
    assert repo.add_source("nb_missing", "A", "alpha") is None


def test_toggle_twice_restores_request_context(repo: NotebookRepository) -> None:
    nb = repo.create_notebook()
    a = repo.add_source(nb.id, "A", "alpha")
    repo.add_source(nb.id, "B", "beta")
    assert a is not None
    before = [s.id for s in nb.active_sources()]

    toggled = repo.toggle_source(nb.id, a.id)
    assert toggled is not None and toggled.active is False
    assert [s.title for s in nb.active_sources()] == ["B"]

    repo.toggle_source(nb.id, a.id)
    assert [s.id for s in nb.active_sources()] == before


def test_toggle_missing_source(repo: NotebookRepository) -> None:
    nb = repo.create_notebook()
    assert repo.toggle_source(nb.id, "src_missing") is None
    assert repo.toggle_source("nb_missing", "src_missing") is None


def test_delete_source(repo: NotebookRepository) -> None:
    nb = repo.create_notebook()
    a = repo.add_source(nb.id, "A", "alpha")
    assert a is not None
    assert repo.delete_source(nb.id, a.id) is True
    assert nb.sources == []
    assert repo.delete_source(nb.id, a.id) is False


def test_append_message_keeps_order(repo: NotebookRepository) -> None:
    nb = repo.create_notebook()
    repo.append_message(nb.id, ChatMessage(role=Role.USER, text="one"))
    repo.append_message(nb.id, ChatMessage(role=Role.MODEL, text="two"))
    assert [m.text for m in nb.history] == ["one", "two"]
    assert repo.append_message("nb_missing", ChatMessage(role=Role.USER, text="x")) is False


def test_sources_used_survives_source_changes(kv: MemoryKeyValueStore) -> None:
    repo = NotebookRepository(kv)
    nb = repo.create_notebook()
    a = repo.add_source(nb.id, "A", "alpha")
    b = repo.add_source(nb.id, "B", "beta")
    assert a is not None and b is not None
    repo.append_message(nb.id, ChatMessage(role=Role.MODEL, text="reply", sources_used=["B", "A"]))

    repo.delete_source(nb.id, a.id)
    repo.toggle_source(nb.id, b.id)

    assert nb.history[0].sources_used == ["B", "A"]
    reloaded = NotebookRepository(kv).get(nb.id)
    assert reloaded is not None
    assert reloaded.history[0].sources_used == ["B", "A"]


def test_messages_without_provenance_omit_field(repo: NotebookRepository, kv: MemoryKeyValueStore) -> None:
    nb = repo.create_notebook()
    repo.append_message(nb.id, ChatMessage(role=Role.USER, text="hi"))
    stored = json.loads(kv.get(STORAGE_KEY) or "[]")
    assert "sources_used" not in stored[0]["history"][0]


def test_file_store_round_trip(tmp_path: Path) -> None:
    repo = NotebookRepository(FileKeyValueStore(tmp_path))
    nb = repo.create_notebook("On disk")

    assert (tmp_path / f"{STORAGE_KEY}.json").exists()
    assert list(tmp_path.glob("*.tmp")) == []

    fresh = NotebookRepository(FileKeyValueStore(tmp_path))
    assert fresh.get(nb.id) is not None


def test_file_store_corrupt_file_is_empty(tmp_path: Path) -> None:
    (tmp_path / f"{STORAGE_KEY}.json").write_text("garbage")
    assert NotebookRepository(FileKeyValueStore(tmp_path)).list_notebooks() == []


def test_file_store_non_utf8_bytes_are_empty(tmp_path: Path) -> None:
    (tmp_path / f"{STORAGE_KEY}.json").write_bytes(b"\xff\xfe[not utf8")
    repo = NotebookRepository(FileKeyValueStore(tmp_path))
    assert repo.list_notebooks() == []

    nb = repo.create_notebook("Recovered")
    assert NotebookRepository(FileKeyValueStore(tmp_path)).get(nb.id) is not None


def test_file_store_delete(tmp_path: Path) -> None:
    store = FileKeyValueStore(tmp_path)
    store.set("k", "v")
    assert store.get("k") == "v"
    store.delete("k")
    assert store.get("k") is None
    store.delete("k")


def test_file_store_rejects_path_keys(tmp_path: Path) -> None:
    store = FileKeyValueStore(tmp_path)
    with pytest.raises(ValueError):
        store.set("../escape", "v")
