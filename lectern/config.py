"""Configuration management for Lectern."""

import json
from pathlib import Path

from pydantic import BaseModel, Field

from lectern.audio.pcm import PcmScaling


class LLMConfig(BaseModel):
    provider: str = "anthropic"
    model: str = "claude-sonnet-4-20250514"
    api_key_env: str = "ANTHROPIC_API_KEY"
    max_tokens: int = 4096


class HostVoice(BaseModel):
    name: str
    voice: str


def _default_hosts() -> list[HostVoice]:
    return [HostVoice(name="Joe", voice="Kore"), HostVoice(name="Jane", voice="Puck")]


class SpeechConfig(BaseModel):
    provider: str = "google"
    model: str = "gemini-2.5-flash-preview-tts"
    api_key_env: str = "GEMINI_API_KEY"
    hosts: list[HostVoice] = Field(default_factory=_default_hosts, min_length=2, max_length=2)

    @property
    def host_names(self) -> tuple[str, str]:
        return (self.hosts[0].name, self.hosts[1].name)


class SettingsConfig(BaseModel):
    max_history_turns: int = 20
    pcm_scaling: PcmScaling = PcmScaling.SYMMETRIC


class LecternConfig(BaseModel):
    llm: LLMConfig = Field(default_factory=LLMConfig)
    speech: SpeechConfig = Field(default_factory=SpeechConfig)
    settings: SettingsConfig = Field(default_factory=SettingsConfig)


def _config_dir() -> Path:
    return Path.home() / ".lectern"


def _config_path() -> Path:
    return _config_dir() / "config.json"


def store_dir() -> Path:
    """Return the key-value store directory path."""
    return _config_dir() / "store"


def ensure_dirs() -> None:
    """Create required Lectern directories."""
    base = _config_dir()
    base.mkdir(exist_ok=True)
    store_dir().mkdir(exist_ok=True)


def load_config() -> LecternConfig:
    """Load config from ~/.lectern/config.json, returning defaults if missing."""
    path = _config_path()
    if not path.exists():
        return LecternConfig()
    text = path.read_text()
    return LecternConfig.model_validate_json(text)


def save_config(config: LecternConfig) -> None:
    """Save config to ~/.lectern/config.json."""
    ensure_dirs()
    path = _config_path()
    path.write_text(json.dumps(config.model_dump(), indent=2) + "\n")
