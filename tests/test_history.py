"""Tests for chat history conversion."""

from __future__ import annotations

from lectern.agent.history import build_messages
from lectern.notebook.models import ChatMessage, Role


def _msg(role: Role, text: str) -> ChatMessage:
    return ChatMessage(role=role, text=text)


def test_empty_history() -> None:
    assert build_messages([]) == []


def test_roles_map_to_api_roles() -> None:
    msgs = build_messages([_msg(Role.USER, "hi"), _msg(Role.MODEL, "hello"), _msg(Role.USER, "why?")])
    assert msgs == [
        {"role": "user", "content": "hi"},
        {"role": "assistant", "content": "hello"},
        {"role": "user", "content": "why?"},
    ]


def test_consecutive_same_role_messages_are_merged() -> None:
    msgs = build_messages([_msg(Role.USER, "first"), _msg(Role.USER, "second")])
    assert msgs == [{"role": "user", "content": "first\n\nsecond"}]


def test_leading_model_messages_dropped() -> None:
    msgs = build_messages([_msg(Role.MODEL, "greeting"), _msg(Role.USER, "q")])
    assert msgs == [{"role": "user", "content": "q"}]


def test_respects_max_turns() -> None:
    history = []
    for i in range(10):
        history.append(_msg(Role.USER, f"Q{i}"))
        history.append(_msg(Role.MODEL, f"A{i}"))
    history.append(_msg(Role.USER, "last"))

    msgs = build_messages(history, max_turns=5)
    assert msgs[0] == {"role": "user", "content": "Q8"}
    assert msgs[-1] == {"role": "user", "content": "last"}
    assert len(msgs) == 5
