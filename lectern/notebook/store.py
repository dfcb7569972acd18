"""Notebook repository. All notebooks live in one JSON document under a fixed key."""

from __future__ import annotations

import json
import logging

from pydantic import TypeAdapter, ValidationError

from lectern.notebook.kv import KeyValueStore
from lectern.notebook.models import ChatMessage, Notebook, Source, SourceKind

logger = logging.getLogger("lectern.notebook")

STORAGE_KEY = "lectern_notebooks"

_notebook_list = TypeAdapter(list[Notebook])


class NotebookRepository:
    """Loads notebooks once into memory and rewrites the whole blob on every mutation."""

    def __init__(self, kv: KeyValueStore, key: str = STORAGE_KEY) -> None:
        self._kv = kv
        self._key = key
        self._notebooks: list[Notebook] | None = None

    @property
    def notebooks(self) -> list[Notebook]:
        if self._notebooks is None:
            self._notebooks = self.load()
        return self._notebooks

    def load(self) -> list[Notebook]:
        """Read the stored blob. Missing or malformed data yields no notebooks."""
        try:
            raw = self._kv.get(self._key)
            if raw is None:
                return []
            notebooks = _notebook_list.validate_json(raw)
        except (ValidationError, UnicodeDecodeError, ValueError) as e:
            logger.warning("Failed to load notebooks from %r, starting empty: %s", self._key, e)
            return []
        logger.info("Loaded %d notebooks", len(notebooks))
        return notebooks

    def save(self) -> None:
        data = _notebook_list.dump_python(self.notebooks, mode="json", exclude_none=True)
        self._kv.set(self._key, json.dumps(data, indent=2) + "\n")
        logger.debug("Saved %d notebooks", len(self.notebooks))

    def reload(self) -> None:
        """Drop the in-memory cache so the next access re-reads storage."""
        self._notebooks = None

    # --- notebooks ---

    def list_notebooks(self) -> list[Notebook]:
        return list(self.notebooks)

    def get(self, notebook_id: str) -> Notebook | None:
        for nb in self.notebooks:
            if nb.id == notebook_id:
                return nb
        return None

    def create_notebook(self, title: str | None = None) -> Notebook:
        """Create a notebook at the front of the list and persist."""
        nb = Notebook() if title is None else Notebook(title=title)
        self.notebooks.insert(0, nb)
        self.save()
        logger.info("Created notebook %s", nb.id)
        return nb

    def delete_notebook(self, notebook_id: str) -> bool:
        for i, nb in enumerate(self.notebooks):
            if nb.id == notebook_id:
                self.notebooks.pop(i)
                self.save()
                return True
        return False

    def rename_notebook(self, notebook_id: str, title: str) -> Notebook | None:
        nb = self.get(notebook_id)
        if nb is None:
            return None
        nb.title = title
        self._commit(nb)
        return nb

    # --- sources ---

    def add_source(
        self,
        notebook_id: str,
        title: str,
        content: str,
        kind: SourceKind = SourceKind.TEXT,
    ) -> Source | None:
        """Add an active source at the top of the notebook's list."""
        nb = self.get(notebook_id)
        if nb is None:
            return None
        source = Source(title=title, content=content, kind=kind)
        nb.sources.insert(0, source)
        self._commit(nb)
        return source

    def toggle_source(self, notebook_id: str, source_id: str) -> Source | None:
        """Flip a source's active flag, return the updated source."""
        nb = self.get(notebook_id)
        source = nb.get_source(source_id) if nb else None
        if nb is None or source is None:
            return None
        source.active = not source.active
        self._commit(nb)
        return source

    def delete_source(self, notebook_id: str, source_id: str) -> bool:
        nb = self.get(notebook_id)
        if nb is None:
            return False
        for i, source in enumerate(nb.sources):
            if source.id == source_id:
                nb.sources.pop(i)
                self._commit(nb)
                return True
        return False

    # --- transcript ---

    def append_message(self, notebook_id: str, message: ChatMessage) -> bool:
        nb = self.get(notebook_id)
        if nb is None:
            return False
        nb.history.append(message)
        self._commit(nb)
        return True

    def _commit(self, nb: Notebook) -> None:
        nb.touch()
        self.save()
