"""Serialize an AudioBuffer into a canonical 44-byte-header PCM WAV file."""

from __future__ import annotations

import io
import logging
import wave
from array import array

from lectern.audio.pcm import PCM_SAMPLE_WIDTH, AudioBuffer, PcmScaling, float_to_int16

logger = logging.getLogger("lectern.audio")

WAV_HEADER_SIZE = 44


def encode_wav(
    buffer: AudioBuffer,
    frame_count: int | None = None,
    *,
    scaling: PcmScaling = PcmScaling.SYMMETRIC,
) -> bytes:
    """Encode `frame_count` frames of `buffer` as 16-bit PCM RIFF/WAVE bytes.

    Samples are interleaved in channel order. frame_count defaults to the buffer
    length and must not exceed it.
    """
    if frame_count is None:
        frame_count = buffer.length
    if buffer.channels < 1:
        raise ValueError("Cannot encode a buffer with no channels")
    if frame_count < 0:
        raise ValueError(f"frame_count must be non-negative, got {frame_count}")
    if frame_count > buffer.length:
        raise ValueError(f"frame_count {frame_count} exceeds buffer length {buffer.length}")

    interleaved = array("h")
    channels = buffer.data
    for frame in range(frame_count):
        for channel in channels:
            interleaved.append(float_to_int16(channel[frame], scaling))

    out = io.BytesIO()
    with wave.open(out, "wb") as wf:
        wf.setnchannels(buffer.channels)
        wf.setsampwidth(PCM_SAMPLE_WIDTH)
        wf.setframerate(buffer.sample_rate)
        wf.setnframes(frame_count)
        # wave converts native-order samples to little-endian itself
        wf.writeframes(interleaved.tobytes())

    data = out.getvalue()
    logger.info("Encoded WAV: %d frames, %d channel(s), %d bytes", frame_count, buffer.channels, len(data))
    return data

