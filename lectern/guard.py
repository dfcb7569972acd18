"""Single-slot in-flight guard: one pending call per (notebook, operation)."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from enum import StrEnum

from lectern.core import OperationInProgressError

logger = logging.getLogger("lectern.server")


class Operation(StrEnum):
    CHAT = "chat"
    BRIEFING = "briefing"
    AUDIO = "audio"


class InFlightGuard:
    """Rejects, rather than queues, a second trigger while the first is pending.

    Only touched from the event loop, so a plain set is enough.
    """

    def __init__(self) -> None:
        self._pending: set[tuple[str, Operation]] = set()

    def is_pending(self, notebook_id: str, operation: Operation) -> bool:
        return (notebook_id, operation) in self._pending

    def pending(self, notebook_id: str) -> list[Operation]:
        return sorted(op for nb_id, op in self._pending if nb_id == notebook_id)

    @contextmanager
    def hold(self, notebook_id: str, operation: Operation) -> Iterator[None]:
        """Occupy the slot for the duration of the block; always released on exit."""
        key = (notebook_id, operation)
        if key in self._pending:
            logger.warning("Rejected %s for %s: already in flight", operation, notebook_id)
            raise OperationInProgressError(notebook_id, operation)
        self._pending.add(key)
        try:
            yield
        finally:
            self._pending.discard(key)
