# Copyright © 2025 Ed Nutting
# SPDX-License-Identifier: MIT
# See LICENSE file for details

"""
Microphone capture using sounddevice.
Audio arrives on a callback thread and is queued as raw 16-bit mono PCM
chunks for the recognizer.
"""

import logging
import queue
from collections.abc import Sequence
from typing import Any

import numpy as np
import numpy.typing as npt
import sounddevice as sd

logger = logging.getLogger(__name__)


class AudioCapture:
    """Queues microphone audio in fixed-size chunks."""

    sample_rate: int
    chunk_duration_ms: int
    chunk_size: int
    device: int | None
    audio_queue: queue.Queue[bytes]
    stream: sd.RawInputStream | None
    running: bool

    def __init__(
        self,
        sample_rate: int = 16000,
        chunk_duration_ms: int = 100,
        device: int | None = None
    ) -> None:
        """
        Args:
            sample_rate: Sample rate in Hz (16000 suits Vosk models)
            chunk_duration_ms: Length of each queued chunk
            device: Input device index, or None for the system default
        """
        self.sample_rate = sample_rate
        self.chunk_duration_ms = chunk_duration_ms
        self.chunk_size = int(sample_rate * chunk_duration_ms / 1000)
        self.device = device

        self.audio_queue: queue.Queue[bytes] = queue.Queue()
        self.stream: sd.RawInputStream | None = None
        self.running = False

    def _audio_callback(
        self,
        indata: npt.NDArray[np.int16],
        frames: int,
        time: Any,
        status: sd.CallbackFlags
    ) -> None:
        if status:
            logger.warning("Audio status: %s", status)
        self.audio_queue.put(bytes(indata))

    def start(self) -> None:
        """Open the input stream. Does nothing if already running."""
        if self.running:
            return

        self.stream = sd.RawInputStream(
            samplerate=self.sample_rate,
            blocksize=self.chunk_size,
            device=self.device,
            dtype=np.int16,
            channels=1,
            callback=self._audio_callback
        )
        self.stream.start()
        self.running = True
        logger.info("Audio capture started (device=%s, %d ms chunks)",
                    self.device, self.chunk_duration_ms)

    def stop(self) -> None:
        """Close the input stream."""
        self.running = False
        if self.stream:
            self.stream.stop()
            self.stream.close()
            self.stream = None

    def get_chunk(self, timeout: float = 0.5) -> bytes | None:
        """Next queued chunk, or None if nothing arrived within timeout."""
        try:
            return self.audio_queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def clear_queue(self) -> None:
        """Drop any chunks that have not been read yet."""
        while not self.audio_queue.empty():
            try:
                self.audio_queue.get_nowait()
            except queue.Empty:
                break


def input_devices() -> list[dict[str, Any]]:
    """Audio devices that have at least one input channel."""
    inputs: list[dict[str, Any]] = []
    devices: Sequence[Any] = sd.query_devices()
    for i, device in enumerate(devices):
        dev: dict[str, Any] = dict(device)
        if dev.get('max_input_channels', 0) > 0:
            inputs.append({
                "index": i,
                "name": dev.get('name', 'Unknown'),
                "channels": dev.get('max_input_channels', 0),
            })
    return inputs


def list_devices() -> list[dict[str, Any]]:
    """Print the available input devices."""
    print("Available audio input devices:")
    inputs = input_devices()
    for dev in inputs:
        print(f"  [{dev['index']}] {dev['name']} (inputs: {dev['channels']})")
    return inputs
