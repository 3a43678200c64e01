# Copyright © 2025 Ed Nutting
# SPDX-License-Identifier: MIT
# See LICENSE file for details

"""
Vosk speech recognition provider.

Runs fully offline once a model has been downloaded into the local cache.
"""

import json
import logging
import os
import tempfile
import urllib.request
import zipfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

from vosk import KaldiRecognizer, Model, SetLogLevel

from ..transcription_provider import ModelInfo, TranscriptionProvider, TranscriptionResult

logger = logging.getLogger(__name__)

# Vosk logs every model load to stderr otherwise
SetLogLevel(-1)

MODELS_DIR: Path = Path.home() / ".cache" / "readalong" / "models"


class VoskProvider(TranscriptionProvider):
    """Offline recognition using a Vosk (Kaldi) model."""

    MODELS: dict[str, dict[str, Any]] = {
        "vosk-en-us-small": {
            "dir": "vosk-model-small-en-us-0.15",
            "name": "English US - Small",
            "size_mb": 40,
            "url": "https://alphacephei.com/vosk/models/vosk-model-small-en-us-0.15.zip",
        },
        "vosk-en-us-medium": {
            "dir": "vosk-model-en-us-0.22",
            "name": "English US - Medium",
            "size_mb": 1800,
            "url": "https://alphacephei.com/vosk/models/vosk-model-en-us-0.22.zip",
        },
        "vosk-en-gb-small": {
            "dir": "vosk-model-small-en-gb-0.15",
            "name": "English GB - Small",
            "size_mb": 40,
            "url": "https://alphacephei.com/vosk/models/vosk-model-small-en-gb-0.15.zip",
        },
    }

    sample_rate: int
    model_id: str
    model_path: str
    model: Model
    recognizer: KaldiRecognizer

    def __init__(self, model_id: str, sample_rate: int = 16000) -> None:
        """
        Load a Vosk model.

        Args:
            model_id: Key of MODELS, or a path to a custom model directory
            sample_rate: Audio sample rate (must match audio capture)

        Raises:
            RuntimeError: If the model has not been downloaded
        """
        self.sample_rate = sample_rate
        self.model_id = model_id
        self.model_path = self.get_model_path(model_id)

        if not os.path.exists(self.model_path):
            raise RuntimeError(
                f"Vosk model not found at {self.model_path}. "
                f"Download it with: readalong --download-model --model-id {model_id}"
            )

        logger.info("Loading Vosk model from %s", self.model_path)
        self.model = Model(self.model_path)
        self.recognizer = self._new_recognizer()

    def _new_recognizer(self) -> KaldiRecognizer:
        recognizer = KaldiRecognizer(self.model, self.sample_rate)
        recognizer.SetWords(False)
        return recognizer

    def process_audio(self, audio_data: bytes) -> TranscriptionResult | None:
        if self.recognizer.AcceptWaveform(audio_data):
            # End of an utterance
            result: dict[str, Any] = json.loads(self.recognizer.Result())
            return self._to_result(result.get("text", ""), is_partial=False)

        partial: dict[str, Any] = json.loads(self.recognizer.PartialResult())
        return self._to_result(partial.get("partial", ""), is_partial=True)

    def reset(self) -> None:
        self.recognizer = self._new_recognizer()

    def get_final(self) -> TranscriptionResult | None:
        result: dict[str, Any] = json.loads(self.recognizer.FinalResult())
        return self._to_result(result.get("text", ""), is_partial=False)

    def _to_result(self, text: str, is_partial: bool) -> TranscriptionResult | None:
        text = text.strip()
        if not text or self._is_vosk_artifact(text):
            return None
        return TranscriptionResult(text, is_partial=is_partial)

    @staticmethod
    def _is_vosk_artifact(text: str) -> bool:
        """Vosk emits a lone "the" when it hears silence or noise."""
        return text.lower() == "the"

    @staticmethod
    def get_model_path(model_id: str) -> str:
        """Cache path for a known model, or model_id itself for a custom path."""
        model_info = VoskProvider.MODELS.get(model_id)
        if not model_info:
            return model_id
        return str(MODELS_DIR / model_info["dir"])

    @staticmethod
    def get_available_models() -> list[ModelInfo]:
        return [
            ModelInfo(
                id=model_id,
                name=info["name"],
                provider="vosk",
                size_mb=info["size_mb"],
                description=f"Vosk model - {info['name']}",
            )
            for model_id, info in VoskProvider.MODELS.items()
        ]

    @staticmethod
    def download_model(
        model_id: str,
        target_dir: str | None = None,
        progress_callback: Callable[[str, int], None] | None = None
    ) -> str:
        """
        Download and unpack a Vosk model.

        Args:
            model_id: Key of MODELS
            target_dir: Directory to unpack into, or None for the cache
            progress_callback: Optional callback(stage, percent)

        Returns:
            Path to the model directory

        Raises:
            ValueError: If model_id is not a known model
        """
        model_info: dict[str, Any] | None = VoskProvider.MODELS.get(model_id)
        if not model_info:
            raise ValueError(
                f"Unknown Vosk model: {model_id}. "
                f"Choose from: {list(VoskProvider.MODELS.keys())}"
            )

        target_path = Path(target_dir) if target_dir else MODELS_DIR
        target_path.mkdir(parents=True, exist_ok=True)
        model_path: Path = target_path / model_info["dir"]

        def report(stage: str, percent: int) -> None:
            if progress_callback:
                progress_callback(stage, percent)

        if model_path.exists():
            print(f"Model already exists at {model_path}")
            report("complete", 100)
            return str(model_path)

        url: str = model_info["url"]
        print(f"Downloading {model_id} from {url}...")

        with tempfile.NamedTemporaryFile(suffix=".zip", delete=False) as tmp:
            tmp_path = tmp.name

        def download_hook(block_count: int, block_size: int, total_size: int) -> None:
            if total_size > 0:
                percent = min(100, int(block_count * block_size * 100 / total_size))
                report("downloading", percent)

        try:
            report("downloading", 0)
            urllib.request.urlretrieve(url, tmp_path, download_hook)

            report("extracting", 0)
            with zipfile.ZipFile(tmp_path, "r") as zf:
                zf.extractall(target_path)
            report("extracting", 100)
        finally:
            try:
                os.unlink(tmp_path)
            except OSError as e:
                logger.warning("Could not delete temporary file %s: %s", tmp_path, e)

        report("complete", 100)
        print(f"Model installed to {model_path}")
        return str(model_path)
