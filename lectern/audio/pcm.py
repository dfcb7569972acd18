"""Raw PCM payload decoding and the offline render pass.

Speech synthesis returns base64-encoded signed 16-bit little-endian mono samples
at 24 kHz. Decoding maps each sample onto [-1.0, 1.0) by dividing by 32768.
"""

from __future__ import annotations

import base64
import binascii
import logging
import sys
from array import array
from collections.abc import Sequence
from enum import StrEnum

from lectern.core import AudioDecodeError

logger = logging.getLogger("lectern.audio")

PCM_SAMPLE_RATE = 24000
PCM_SAMPLE_WIDTH = 2
INT16_NEGATIVE_SCALE = 32768.0
INT16_POSITIVE_SCALE = 32767.0


class PcmScaling(StrEnum):
    """Float-to-int16 convention used when encoding.

    SYMMETRIC multiplies by 32768 on both sides (clamped to 32767) and is the
    exact inverse of decoding. ASYMMETRIC multiplies non-negative samples by
    32767 instead, as browser WAV exporters commonly do.
    """

    SYMMETRIC = "symmetric"
    ASYMMETRIC = "asymmetric"


class AudioBuffer:
    """In-memory floating-point audio, one sample array per channel."""

    def __init__(self, sample_rate: int, data: Sequence[Sequence[float]]) -> None:
        if not data:
            raise ValueError("AudioBuffer needs at least one channel")
        self.sample_rate = sample_rate
        self.data = [array("d", channel) for channel in data]

    @property
    def channels(self) -> int:
        return len(self.data)

    @property
    def length(self) -> int:
        """Frame count: samples in the shortest channel."""
        return min(len(channel) for channel in self.data)

    @property
    def duration_seconds(self) -> float:
        return self.length / self.sample_rate if self.sample_rate else 0.0

    def channel_data(self, index: int) -> array[float]:
        return self.data[index]

    def __repr__(self) -> str:
        return f"AudioBuffer(channels={self.channels}, sample_rate={self.sample_rate}, length={self.length})"


def decode_pcm(payload: str | bytes, *, sample_rate: int = PCM_SAMPLE_RATE) -> AudioBuffer:
    """Decode a base64 s16le mono payload into a single-channel AudioBuffer.

    Malformed base64 raises AudioDecodeError. An odd trailing byte is dropped.
    """
    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise AudioDecodeError(f"Malformed base64 audio payload: {e}") from e

    if len(raw) % PCM_SAMPLE_WIDTH:
        logger.warning("Dropping trailing byte from odd-length PCM payload (%d bytes)", len(raw))
        raw = raw[:-1]

    ints = array("h")
    ints.frombytes(raw)
    if sys.byteorder == "big":
        ints.byteswap()

    samples = array("d", (s / INT16_NEGATIVE_SCALE for s in ints))
    logger.info("Decoded %d PCM samples (%.2fs at %d Hz)", len(samples), len(samples) / sample_rate, sample_rate)
    return AudioBuffer(sample_rate=sample_rate, data=[samples])


def render(buffer: AudioBuffer) -> AudioBuffer:
    """Offline render pass. Currently a lossless copy with the same shape."""
    frames = buffer.length
    return AudioBuffer(
        sample_rate=buffer.sample_rate,
        data=[channel[:frames] for channel in buffer.data],
    )


def float_to_int16(sample: float, scaling: PcmScaling = PcmScaling.SYMMETRIC) -> int:
    """Clamp to [-1, 1], scale, and truncate toward zero."""
    s = max(-1.0, min(1.0, sample))
    if s < 0:
        return int(s * INT16_NEGATIVE_SCALE)
    if scaling == PcmScaling.ASYMMETRIC:
        return int(s * INT16_POSITIVE_SCALE)
    return min(int(s * INT16_NEGATIVE_SCALE), 32767)
