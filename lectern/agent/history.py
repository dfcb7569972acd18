"""Build the running message history sent with each grounded chat turn."""

from __future__ import annotations

from typing import Any

from lectern.notebook.models import ChatMessage, Role

_API_ROLES = {Role.USER: "user", Role.MODEL: "assistant"}


def build_messages(history: list[ChatMessage], *, max_turns: int = 20) -> list[dict[str, Any]]:
    """Convert the transcript into Anthropic messages.

    Keeps the last `max_turns` messages, merges consecutive same-role messages
    and drops leading model messages, since the API requires alternating turns
    that start with the user. Returns an empty list if nothing is left.
    """
    recent = history[-max_turns:] if max_turns > 0 else []
    messages: list[dict[str, Any]] = []

    for msg in recent:
        role = _API_ROLES[msg.role]
        if not messages and role != "user":
            continue
        if messages and messages[-1]["role"] == role:
            messages[-1]["content"] += "\n\n" + msg.text
        else:
            messages.append({"role": role, "content": msg.text})

    return messages
