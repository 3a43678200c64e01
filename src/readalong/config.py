# Copyright © 2025 Ed Nutting
# SPDX-License-Identifier: MIT
# See LICENSE file for details

"""
Configuration management for Read-Along.
Handles loading and saving settings from a YAML config file.
"""

from pathlib import Path
from typing import Any, TypedDict

import yaml

from .aligner import DEFAULT_WINDOW_SIZE

CONFIG_FILENAME: str = ".readalong.yaml"


class DisplaySettings(TypedDict):
    """Colours and fonts used by the web UI."""
    fontSize: float
    fontFamily: str
    pendingColor: str
    matchedColor: str
    missedColor: str
    backgroundColor: str
    showTranscript: bool


class AlignmentSettings(TypedDict):
    """Settings passed through to the aligner."""
    window_size: int


class TranscriptionConfig(TypedDict):
    """Which recognizer to use."""
    provider: str
    model_id: str
    model_path: str | None  # Optional custom model directory


class Config(TypedDict):
    """The complete configuration."""
    transcription: TranscriptionConfig
    host: str
    port: int
    audio_device: int | None
    chunk_ms: int
    passages_folder: str | None
    display: DisplaySettings
    alignment: AlignmentSettings


DEFAULT_CONFIG: Config = {
    "transcription": {
        "provider": "vosk",
        "model_id": "vosk-en-us-small",
        "model_path": None,
    },

    # Server settings
    "host": "127.0.0.1",
    "port": 8000,
    "audio_device": None,
    "chunk_ms": 100,

    # Extra passages (.txt / .md) shown after the built-in ones
    "passages_folder": None,

    "display": {
        "fontSize": 1.4,
        "fontFamily": "Poppins, sans-serif",
        "pendingColor": "#495057",
        "matchedColor": "#28a745",
        "missedColor": "#adb5bd",
        "backgroundColor": "#f8f9fa",
        "showTranscript": True,
    },

    "alignment": {
        # Words checked per spoken word: the current one plus lookahead
        "window_size": DEFAULT_WINDOW_SIZE,
    },
}


def get_config_path() -> Path:
    """Get the path to the config file in the current working directory."""
    return Path.cwd() / CONFIG_FILENAME


def _deep_merge(base, override):
    """
    Deep merge two dictionaries, with override taking precedence.
    Returns a new dictionary without modifying the originals; nested
    dictionaries from override are copied, never shared.
    """
    result = base.copy()
    for key, value in override.items():
        if isinstance(value, dict):
            existing = result.get(key)
            result[key] = _deep_merge(existing if isinstance(existing, dict) else {}, value)
        else:
            result[key] = value
    return result


def load_config(config_path: Path | None = None) -> Config:
    """
    Load configuration from file, merged with defaults.

    A missing or unreadable file gives the defaults.

    Args:
        config_path: Optional path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    config: dict[str, Any] = _deep_merge({}, DEFAULT_CONFIG)

    if config_path.exists():
        try:
            with open(config_path, encoding='utf-8') as f:
                file_config: dict[str, Any] | None = yaml.safe_load(f)
                if isinstance(file_config, dict):
                    config = _deep_merge(config, file_config)
                elif file_config is not None:
                    print(f"Warning: Ignoring config {config_path}: expected a mapping")
        except (OSError, yaml.YAMLError) as e:
            print(f"Warning: Could not load config from {config_path}: {e}")

    return config  # type: ignore[return-value]


def save_config(config: Config, config_path: Path | None = None) -> bool:
    """
    Save configuration to file.

    Returns:
        True if save was successful, False otherwise.
    """
    if config_path is None:
        config_path = get_config_path()

    try:
        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.dump(dict(config), f, default_flow_style=False, sort_keys=False)
        return True
    except (OSError, yaml.YAMLError) as e:
        print(f"Error saving config to {config_path}: {e}")
        return False


def get_display_settings(config: Config) -> DisplaySettings:
    return config.get("display", DEFAULT_CONFIG["display"]).copy()  # type: ignore[return-value]


def get_transcription_settings(config: Config) -> TranscriptionConfig:
    return config.get("transcription",
                      DEFAULT_CONFIG["transcription"]
                      ).copy()  # type: ignore[return-value]


def get_window_size(config: Config) -> int:
    """
    Read the aligner window size from config.

    Raises:
        ValueError: If the configured value is not a positive integer
    """
    alignment = config.get("alignment", DEFAULT_CONFIG["alignment"])
    value = alignment.get("window_size", DEFAULT_WINDOW_SIZE)
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"alignment.window_size must be a positive integer, got {value!r}")
    return value


def update_config_display(config: Config, display_settings: DisplaySettings) -> Config:
    """Return a new config with the display section updated."""
    new_config: dict[str, Any] = _deep_merge({}, config)
    new_config["display"] = _deep_merge(
        new_config.get("display", {}),
        display_settings
    )
    return new_config  # type: ignore[return-value]
