"""Anthropic client construction and single-shot text completion."""

from __future__ import annotations

import logging
import os
from typing import Any

import anthropic

from lectern.config import LLMConfig
from lectern.core import MissingCredentialError

logger = logging.getLogger("lectern.agent")


def require_api_key(env_var: str) -> str:
    """Read an API key from the environment at call time, raising if unset."""
    api_key = os.environ.get(env_var, "")
    if not api_key:
        logger.error("Missing API key: %s", env_var)
        raise MissingCredentialError(env_var)
    return api_key


def get_client(llm: LLMConfig) -> anthropic.Anthropic:
    return anthropic.Anthropic(api_key=require_api_key(llm.api_key_env))


def complete(
    llm: LLMConfig,
    messages: list[dict[str, Any]],
    *,
    system: str | None = None,
    temperature: float = 0.7,
) -> str:
    """Run one messages.create call and return its concatenated text blocks."""
    client = get_client(llm)
    kwargs: dict[str, Any] = {
        "model": llm.model,
        "max_tokens": llm.max_tokens,
        "temperature": temperature,
        "messages": messages,
    }
    if system:
        kwargs["system"] = system
    response = client.messages.create(**kwargs)
    return extract_text(response)


def extract_text(response: Any) -> str:
    parts = [block.text for block in response.content if block.type == "text"]
    return "".join(parts).strip()
