"""Grounded chat: answer a user message using only the notebook's active sources."""

from __future__ import annotations

import asyncio
import logging

import anthropic

from lectern.agent.history import build_messages
from lectern.agent.llm import complete, require_api_key
from lectern.agent.prompts import build_chat_system_prompt
from lectern.config import LecternConfig
from lectern.notebook.models import ChatMessage, Notebook, Role
from lectern.notebook.store import NotebookRepository

logger = logging.getLogger("lectern.agent")

CHAT_ERROR_TEXT = "Error connecting to the assistant. Please check your API key and connection."
EMPTY_REPLY_TEXT = "I'm sorry, I couldn't generate a response."


class ChatRequest:
    """Everything a chat turn needs, captured from the notebook before the remote call."""

    def __init__(self, notebook: Notebook, max_turns: int) -> None:
        active = notebook.active_sources()
        self.system = build_chat_system_prompt(active)
        self.messages = build_messages(notebook.history, max_turns=max_turns)
        self.source_titles = [s.title for s in active]


def generate_reply(request: ChatRequest, config: LecternConfig) -> ChatMessage:
    """Make the single remote call. Remote faults become an error reply, not an exception."""
    try:
        text = complete(config.llm, request.messages, system=request.system)
    except anthropic.APIError:
        logger.exception("Grounded chat call failed")
        return ChatMessage(role=Role.MODEL, text=CHAT_ERROR_TEXT)

    return ChatMessage(
        role=Role.MODEL,
        text=text or EMPTY_REPLY_TEXT,
        sources_used=list(request.source_titles),
    )


async def send_message(
    repo: NotebookRepository,
    notebook_id: str,
    text: str,
    config: LecternConfig,
) -> tuple[ChatMessage, ChatMessage] | None:
    """Append the user message, ask the model, append its reply.

    Returns (user_message, reply), or None if the notebook does not exist
    or was deleted while the reply was pending.
    Raises MissingCredentialError before touching the transcript.
    """
    require_api_key(config.llm.api_key_env)

    nb = repo.get(notebook_id)
    if nb is None:
        return None

    user_msg = ChatMessage(role=Role.USER, text=text)
    repo.append_message(notebook_id, user_msg)

    request = ChatRequest(nb, config.settings.max_history_turns)
    logger.info("chat: notebook=%s sources=%d turns=%d", notebook_id, len(request.source_titles), len(request.messages))
    reply = await asyncio.to_thread(generate_reply, request, config)

    if not repo.append_message(notebook_id, reply):
        logger.info("chat: notebook %s was deleted before the reply arrived", notebook_id)
        return None
    return user_msg, reply
