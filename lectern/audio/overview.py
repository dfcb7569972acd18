"""Audio overview pipeline: script → speech → decode → render → WAV → clip.

Each stage short-circuits on failure, so a bad script never reaches the TTS
call and a bad payload never produces a clip.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from lectern.agent.llm import require_api_key
from lectern.agent.script import generate_script
from lectern.audio.clips import AudioClip, AudioClipStore
from lectern.audio.pcm import PcmScaling, decode_pcm, render
from lectern.audio.speech import synthesize_speech
from lectern.audio.wav import encode_wav
from lectern.config import LecternConfig
from lectern.core import AudioDecodeError, Result
from lectern.notebook.models import Notebook, Source

logger = logging.getLogger("lectern.audio")


def pcm_to_wav(payload: str, scaling: PcmScaling = PcmScaling.SYMMETRIC) -> bytes:
    """Decode a base64 PCM payload and re-encode it as a playable WAV file."""
    buffer = decode_pcm(payload)
    rendered = render(buffer)
    return encode_wav(rendered, rendered.length, scaling=scaling)


def generate_audio_overview(active_sources: Sequence[Source], config: LecternConfig) -> Result[bytes]:
    """Run the blocking part of the pipeline and return WAV bytes."""
    result: Result[bytes] = Result()
    if not active_sources:
        result.error("NO_SOURCES", "Add and select sources to generate an audio overview.")
        return result

    script = generate_script(active_sources, config)
    if not script.ok or script.data is None:
        result.diagnostics.extend(script.diagnostics)
        return result

    speech = synthesize_speech(script.data, config.speech)
    if not speech.ok or speech.data is None:
        result.diagnostics.extend(speech.diagnostics)
        return result

    try:
        result.data = pcm_to_wav(speech.data, config.settings.pcm_scaling)
    except AudioDecodeError as e:
        logger.error("Could not decode speech payload: %s", e)
        result.error("DECODE_ERROR", str(e))
    return result


async def create_audio_overview(
    notebook: Notebook,
    clips: AudioClipStore,
    config: LecternConfig,
) -> Result[AudioClip]:
    """Generate an overview for the notebook and publish it as its current clip.

    The previous clip is released only once a replacement exists; on failure
    it stays playable.
    """
    require_api_key(config.llm.api_key_env)
    require_api_key(config.speech.api_key_env)

    active = notebook.active_sources()
    logger.info("audio overview: notebook=%s sources=%d", notebook.id, len(active))
    wav = await asyncio.to_thread(generate_audio_overview, active, config)

    result: Result[AudioClip] = Result(diagnostics=list(wav.diagnostics))
    if wav.ok and wav.data is not None:
        result.data = clips.create(notebook.id, wav.data)
    return result
