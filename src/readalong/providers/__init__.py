# Copyright © 2025 Ed Nutting
# SPDX-License-Identifier: MIT
# See LICENSE file for details

"""
Registry of speech recognition providers.
"""

from collections.abc import Callable
from pathlib import Path

from ..transcription_provider import ModelInfo, TranscriptionProvider
from .vosk_provider import VoskProvider

PROVIDER_REGISTRY: dict[str, type[TranscriptionProvider]] = {
    "vosk": VoskProvider,
}


def _get_provider_class(provider_name: str) -> type[TranscriptionProvider]:
    provider_class = PROVIDER_REGISTRY.get(provider_name)
    if not provider_class:
        available = ", ".join(PROVIDER_REGISTRY.keys())
        raise ValueError(
            f"Unknown provider: {provider_name}. Available providers: {available}"
        )
    return provider_class


def create_provider(
    provider_name: str, model_id: str, sample_rate: int = 16000
) -> TranscriptionProvider:
    """
    Create a transcription provider.

    Args:
        provider_name: Registered provider name, e.g. "vosk"
        model_id: Model identifier or custom model path
        sample_rate: Audio sample rate in Hz

    Raises:
        ValueError: If provider_name is not registered
    """
    return _get_provider_class(provider_name)(model_id, sample_rate)


def get_all_available_models() -> list[ModelInfo]:
    """Models from every registered provider."""
    models: list[ModelInfo] = []
    for provider_class in PROVIDER_REGISTRY.values():
        models.extend(provider_class.get_available_models())
    return models


def is_model_downloaded(provider_name: str, model_id: str) -> bool:
    """True if the model (or custom model path) exists locally."""
    if provider_name == "vosk":
        return Path(VoskProvider.get_model_path(model_id)).exists()
    return False


def download_model(
    provider_name: str,
    model_id: str,
    progress_callback: Callable[[str, int], None] | None = None
) -> str:
    """
    Download a model for the given provider.

    Raises:
        ValueError: If the provider or model is not recognized
    """
    return _get_provider_class(provider_name).download_model(
        model_id, progress_callback=progress_callback)


__all__ = [
    "create_provider",
    "get_all_available_models",
    "is_model_downloaded",
    "download_model",
    "PROVIDER_REGISTRY",
    "VoskProvider",
]
