"""Multi-speaker text-to-speech through the Gemini API."""

from __future__ import annotations

import base64
import logging
from collections.abc import Sequence

import httpx
from google import genai
from google.genai import errors, types

from lectern.agent.llm import require_api_key
from lectern.agent.prompts import build_tts_prompt
from lectern.agent.script import AudioScriptPart
from lectern.config import SpeechConfig
from lectern.core import Result

logger = logging.getLogger("lectern.audio")


def get_tts_client(speech: SpeechConfig) -> genai.Client:
    """Create a Gemini client from the configured key env var."""
    return genai.Client(api_key=require_api_key(speech.api_key_env))


def build_voice_config(speech: SpeechConfig) -> types.SpeechConfig:
    return types.SpeechConfig(
        multi_speaker_voice_config=types.MultiSpeakerVoiceConfig(
            speaker_voice_configs=[
                types.SpeakerVoiceConfig(
                    speaker=host.name,
                    voice_config=types.VoiceConfig(
                        prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=host.voice)
                    ),
                )
                for host in speech.hosts
            ]
        )
    )


def _inline_audio(response: types.GenerateContentResponse) -> bytes | str | None:
    if not response.candidates:
        return None
    content = response.candidates[0].content
    if content is None or not content.parts:
        return None
    inline = content.parts[0].inline_data
    return inline.data if inline is not None else None


def synthesize_speech(script: Sequence[AudioScriptPart], speech: SpeechConfig) -> Result[str]:
    """Voice the whole script in one call. Returns base64 s16le mono 24 kHz PCM."""
    result: Result[str] = Result()
    client = get_tts_client(speech)
    prompt = build_tts_prompt([(p.speaker, p.text) for p in script], speech.host_names)
    logger.info("TTS input: %d lines, %d chars", len(script), len(prompt))

    try:
        response = client.models.generate_content(
            model=speech.model,
            contents=prompt,
            config=types.GenerateContentConfig(
                response_modalities=["AUDIO"],
                speech_config=build_voice_config(speech),
            ),
        )
    except errors.APIError as e:
        logger.exception("Speech synthesis failed")
        result.error("API_ERROR", f"Gemini API error: {e}")
        return result
    except httpx.HTTPError as e:
        # the SDK lets transport faults through unwrapped
        logger.exception("Speech synthesis request failed")
        result.error("API_ERROR", f"Gemini transport error: {e}")
        return result

    data = _inline_audio(response)
    if not data:
        result.error("NO_AUDIO", "Speech response contained no audio payload")
        return result

    # The SDK hands back decoded bytes; the pipeline consumes the base64 wire form.
    result.data = base64.b64encode(data).decode("ascii") if isinstance(data, bytes) else data
    return result
