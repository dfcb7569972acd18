"""Briefing document generated from a notebook's active sources."""

from __future__ import annotations

import logging
from collections.abc import Sequence

import anthropic

from lectern.agent.llm import complete, require_api_key
from lectern.agent.prompts import NO_SOURCES_BRIEFING, build_briefing_prompt
from lectern.config import LecternConfig
from lectern.core import Result
from lectern.notebook.models import Source

logger = logging.getLogger("lectern.agent")

EMPTY_BRIEFING_TEXT = "No briefing generated."


def generate_briefing(active_sources: Sequence[Source], config: LecternConfig) -> Result[str]:
    """Summarize the sources into themes, facts and follow-up questions.

    With no active sources, returns a fixed prompt to add some without calling the model.
    """
    result: Result[str] = Result()

    if not active_sources:
        result.data = NO_SOURCES_BRIEFING
        result.info("NO_SOURCES", "No active sources; skipped remote call")
        return result

    require_api_key(config.llm.api_key_env)
    prompt = build_briefing_prompt(active_sources)
    logger.info("briefing: %d sources, prompt %d chars", len(active_sources), len(prompt))

    try:
        text = complete(config.llm, [{"role": "user", "content": prompt}], temperature=0.3)
    except anthropic.APIError as e:
        logger.exception("Briefing generation failed")
        result.error("API_ERROR", f"Anthropic API error: {e}")
        return result

    result.data = text or EMPTY_BRIEFING_TEXT
    return result
