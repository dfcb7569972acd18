"""Two-host podcast script generation with strict response validation."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Sequence
from typing import Any

import anthropic
from pydantic import BaseModel, Field, ValidationError

from lectern.agent.llm import get_client
from lectern.agent.prompts import build_script_prompt, build_script_tool
from lectern.config import LecternConfig
from lectern.core import Result
from lectern.notebook.models import Source

logger = logging.getLogger("lectern.agent")


class AudioScriptPart(BaseModel):
    speaker: str
    text: str = Field(min_length=1)


class AudioScript(BaseModel):
    lines: list[AudioScriptPart] = Field(min_length=1)


def parse_script(payload: Any, hosts: tuple[str, str]) -> Result[list[AudioScriptPart]]:
    """Validate a script payload: a {"lines": [...]} object, a bare list, or their JSON text.

    Any shape mismatch, empty script, or speaker outside `hosts` is a SCRIPT_SCHEMA error.
    """
    result: Result[list[AudioScriptPart]] = Result()

    if isinstance(payload, str):
        # Strip markdown fences if present
        text = re.sub(r"^```(?:json)?\s*\n?", "", payload.strip())
        text = re.sub(r"\n?```\s*$", "", text.strip())
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as e:
            result.error("SCRIPT_SCHEMA", f"Script is not valid JSON: {e}")
            return result

    if isinstance(payload, list):
        payload = {"lines": payload}

    try:
        script = AudioScript.model_validate(payload)
    except ValidationError as e:
        result.error("SCRIPT_SCHEMA", f"Script does not match the expected shape: {e.error_count()} error(s)")
        logger.warning("Script validation failed: %s", e)
        return result

    unknown = sorted({p.speaker for p in script.lines} - set(hosts))
    if unknown:
        result.error(
            "SCRIPT_SCHEMA",
            f"Unknown speaker(s) {unknown}; expected one of {list(hosts)}",
        )
        return result

    result.data = script.lines
    return result


def _extract_tool_input(response: Any, tool_name: str) -> dict[str, Any] | None:
    for block in response.content:
        if block.type == "tool_use" and block.name == tool_name:
            return dict(block.input)
    return None


def generate_script(active_sources: Sequence[Source], config: LecternConfig) -> Result[list[AudioScriptPart]]:
    """Ask the model for a dialogue between the two configured hosts about the sources."""
    result: Result[list[AudioScriptPart]] = Result()
    hosts = config.speech.host_names
    client = get_client(config.llm)
    tool = build_script_tool(hosts)

    try:
        response = client.messages.create(  # type: ignore[call-overload]
            model=config.llm.model,
            max_tokens=config.llm.max_tokens,
            temperature=0.8,
            messages=[{"role": "user", "content": build_script_prompt(active_sources, hosts)}],
            tools=[tool],
            tool_choice={"type": "tool", "name": tool["name"]},
        )
    except anthropic.APIError as e:
        logger.exception("Script generation failed")
        result.error("API_ERROR", f"Anthropic API error: {e}")
        return result

    tool_input = _extract_tool_input(response, tool["name"])
    if tool_input is None:
        logger.error("LLM did not return a write_script tool call. Content: %s", response.content)
        result.error("SCRIPT_SCHEMA", "LLM did not return a write_script tool call")
        return result

    parsed = parse_script(tool_input, hosts)
    if parsed.ok and parsed.data is not None:
        logger.info("Script generated: %d lines", len(parsed.data))
    return parsed
