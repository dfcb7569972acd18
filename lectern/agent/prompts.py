"""Prompt templates for grounded chat, briefings and audio overview scripts."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from lectern.notebook.models import Source

NO_SOURCES_BRIEFING = "Please add and select sources to generate a briefing."

SUGGESTED_QUESTIONS = (
    "What are the main arguments?",
    "Summarize the conclusion.",
    "Explain the methodology used.",
)

_GROUNDED_SYSTEM = """\
You are an expert research assistant. You have access to the following source documents:

{sources}

Strictly answer questions based ONLY on the provided sources. If the answer is not in the sources, \
say you don't know based on the available information. Quote source titles when citing."""

_UNGROUNDED_SYSTEM = (
    "You are a helpful assistant. Currently, no sources are loaded, so provide general information "
    "but encourage the user to add sources for grounded research."
)

_BRIEFING_PROMPT = """\
Analyze these sources and create a structured briefing doc:
1. Summary of key themes
2. Important facts and figures
3. Suggested questions to explore further

SOURCES:
{sources}"""

_SCRIPT_PROMPT = """\
You are a podcast script writer. Create a natural, engaging conversation between two hosts, \
{host_a} (analytical) and {host_b} (inquisitive), who are diving deep into the following documents. \
They should summarize key points and debate interesting aspects. Keep it under 2 minutes of speech.

SOURCES:
{sources}

Return the script with the write_script tool: an ordered list of lines, each with "speaker" ({host_a} or {host_b}) and "text"."""

_TTS_PROMPT = """\
TTS the following conversation between {host_a} and {host_b}:
{lines}"""


def format_source_blocks(sources: Sequence[Source]) -> str:
    """Delimited blocks used in the chat system instruction."""
    return "\n\n".join(f"--- SOURCE: {s.title} ---\n{s.content}" for s in sources)


def format_source_listing(sources: Sequence[Source]) -> str:
    """Title/Content pairs used in one-shot generation prompts."""
    return "\n\n".join(f"Title: {s.title}\nContent: {s.content}" for s in sources)


def build_chat_system_prompt(active_sources: Sequence[Source]) -> str:
    if not active_sources:
        return _UNGROUNDED_SYSTEM
    return _GROUNDED_SYSTEM.format(sources=format_source_blocks(active_sources))


def build_briefing_prompt(active_sources: Sequence[Source]) -> str:
    return _BRIEFING_PROMPT.format(sources=format_source_listing(active_sources))


def build_script_prompt(active_sources: Sequence[Source], hosts: tuple[str, str]) -> str:
    return _SCRIPT_PROMPT.format(
        host_a=hosts[0],
        host_b=hosts[1],
        sources=format_source_listing(active_sources),
    )


def build_tts_prompt(lines: Sequence[tuple[str, str]], hosts: tuple[str, str]) -> str:
    """Render (speaker, text) pairs as 'Speaker: text' lines under the TTS preamble."""
    rendered = "\n".join(f"{speaker}: {text}" for speaker, text in lines)
    return _TTS_PROMPT.format(host_a=hosts[0], host_b=hosts[1], lines=rendered)


def build_script_tool(hosts: tuple[str, str]) -> dict[str, Any]:
    """Anthropic tool definition that forces the script into a speaker/text list."""
    return {
        "name": "write_script",
        "description": "Write the two-host audio overview script as an ordered list of spoken lines.",
        "input_schema": {
            "type": "object",
            "properties": {
                "lines": {
                    "type": "array",
                    "description": "The dialogue in speaking order.",
                    "items": {
                        "type": "object",
                        "properties": {
                            "speaker": {
                                "type": "string",
                                "enum": list(hosts),
                                "description": "Which host speaks this line.",
                            },
                            "text": {"type": "string", "description": "What the host says."},
                        },
                        "required": ["speaker", "text"],
                    },
                },
            },
            "required": ["lines"],
        },
    }
