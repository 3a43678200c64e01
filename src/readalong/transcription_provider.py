# Copyright © 2025 Ed Nutting
# SPDX-License-Identifier: MIT
# See LICENSE file for details

"""
Interface for speech recognizers that feed the reading session.

A provider turns raw audio into interim (partial) and final text
fragments. Interim text replaces the previous interim text; final text
is appended to the transcript permanently.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass


@dataclass
class TranscriptionResult:
    """A text fragment from the recognizer."""

    text: str
    is_partial: bool
    confidence: float = 1.0

    def __repr__(self) -> str:
        kind: str = "interim" if self.is_partial else "final"
        return f"TranscriptionResult({kind}: '{self.text}')"


@dataclass
class ModelInfo:
    """Information about an available recognition model."""

    id: str  # e.g. "vosk-en-us-small"
    name: str
    provider: str
    size_mb: int | None = None
    description: str | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "provider": self.provider,
            "sizeMb": self.size_mb,
            "description": self.description,
        }


class TranscriptionProvider(ABC):
    """Base interface for speech recognition providers."""

    @abstractmethod
    def __init__(self, model_id: str, sample_rate: int = 16000) -> None:
        """
        Load the model.

        Args:
            model_id: Model identifier, or a path to a custom model
            sample_rate: Audio sample rate in Hz
        """

    @abstractmethod
    def process_audio(self, audio_data: bytes) -> TranscriptionResult | None:
        """
        Feed a chunk of 16-bit mono PCM audio.

        Returns:
            An interim or final result, or None if nothing was recognized
        """

    @abstractmethod
    def reset(self) -> None:
        """Drop any buffered speech and start a fresh utterance."""

    @abstractmethod
    def get_final(self) -> TranscriptionResult | None:
        """Flush buffered speech as a final result."""

    @staticmethod
    @abstractmethod
    def get_available_models() -> list[ModelInfo]:
        """List the models this provider knows about."""

    @staticmethod
    @abstractmethod
    def download_model(model_id: str, target_dir: str | None = None,
                       progress_callback: Callable[[str, int], None] | None = None) -> str:
        """
        Download a model if it is not already cached.

        Returns:
            Path to the model directory
        """
