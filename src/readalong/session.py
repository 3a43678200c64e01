# Copyright © 2025 Ed Nutting
# SPDX-License-Identifier: MIT
# See LICENSE file for details

"""
Reading session state.

Holds everything that changes while the user reads a passage aloud: the
accumulated transcript, whether the recognizer is listening, and the
status message shown to the user. Word statuses are never stored; they
are recomputed from the current transcript on demand.
"""

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum

from .aligner import DEFAULT_WINDOW_SIZE, WordStatus, align, summarize
from .passages import Passage
from .transcription_provider import TranscriptionResult

logger = logging.getLogger(__name__)

IDLE_MESSAGE: str = "Tap the microphone to begin"
INITIALIZING_MESSAGE: str = "Initializing..."
LISTENING_MESSAGE: str = "Listening..."
STOPPED_MESSAGE: str = "Session ended. Tap to go again."
CONNECT_FAILED_MESSAGE: str = "Failed to connect to speech service."


class StatusType(str, Enum):
    IDLE = "idle"
    INITIALIZING = "initializing"
    LISTENING = "listening"
    ERROR = "error"


@dataclass(frozen=True)
class SessionStatus:
    """User-facing status line."""
    message: str
    type: StatusType

    def to_dict(self) -> dict[str, str]:
        return {"message": self.message, "type": self.type.value}


def join_transcript(final: str, interim: str) -> str:
    """Combine the final and interim parts into one transcript string."""
    return f"{final} {interim}".strip()


class ReadingSession:
    """
    State for one passage being read aloud.

    Recognizer events are applied through the on_* methods. Errors and
    stops leave the transcript in place, so the last statuses stay on
    screen until the user starts again.
    """

    passage: Passage
    window_size: int
    final_transcript: str
    interim_transcript: str
    is_listening: bool
    status: SessionStatus

    def __init__(self, passage: Passage, window_size: int = DEFAULT_WINDOW_SIZE) -> None:
        if window_size < 1:
            raise ValueError(f"window_size must be at least 1, got {window_size}")
        self.passage = passage
        self.window_size = window_size
        self.final_transcript = ""
        self.interim_transcript = ""
        self.is_listening = False
        self.status = SessionStatus(IDLE_MESSAGE, StatusType.IDLE)

    @property
    def transcript(self) -> str:
        return join_transcript(self.final_transcript, self.interim_transcript)

    def _clear_transcript(self) -> None:
        self.final_transcript = ""
        self.interim_transcript = ""

    def start(self) -> bool:
        """
        Begin a new listening attempt.

        Returns:
            False if already listening (the request is ignored)
        """
        if self.is_listening:
            return False
        self._clear_transcript()
        self.status = SessionStatus(INITIALIZING_MESSAGE, StatusType.INITIALIZING)
        return True

    def on_started(self) -> None:
        """The recognizer is up and listening."""
        self.is_listening = True
        self.status = SessionStatus(LISTENING_MESSAGE, StatusType.LISTENING)

    def on_interim(self, text: str) -> None:
        """Replace the provisional tail of the transcript."""
        self.interim_transcript = text

    def on_final(self, text: str) -> None:
        """Append confirmed text and drop the provisional tail."""
        self.final_transcript = f"{self.final_transcript} {text}".strip()
        self.interim_transcript = ""

    def apply(self, result: TranscriptionResult) -> None:
        """Apply a recognizer result as interim or final text."""
        if result.is_partial:
            self.on_interim(result.text)
        else:
            self.on_final(result.text)

    def on_stopped(self) -> None:
        """The recognizer session ended normally."""
        self.is_listening = False
        self.status = SessionStatus(STOPPED_MESSAGE, StatusType.IDLE)

    def on_error(self, detail: str) -> None:
        """The recognizer session was cancelled with an error."""
        logger.error("Recognition cancelled: %s", detail)
        self.is_listening = False
        self.status = SessionStatus(f"Error: {detail}", StatusType.ERROR)

    def on_connect_failed(self) -> None:
        """The recognizer could not be started at all."""
        self.is_listening = False
        self.status = SessionStatus(CONNECT_FAILED_MESSAGE, StatusType.ERROR)

    def change_passage(self, passage: Passage) -> bool:
        """
        Switch to a different passage and reset the transcript.

        Returns:
            False while listening, in which case nothing changes
        """
        if self.is_listening:
            return False
        self.passage = passage
        self._clear_transcript()
        self.status = SessionStatus(IDLE_MESSAGE, StatusType.IDLE)
        return True

    def word_statuses(self) -> list[WordStatus]:
        """Align the current transcript against the passage."""
        return align(self.passage.words, self.transcript, self.window_size)

    def to_dict(self) -> dict[str, object]:
        """Snapshot of the session for the web UI."""
        statuses = self.word_statuses()
        return {
            "passage": self.passage.to_dict(),
            "statuses": [s.value for s in statuses],
            "summary": summarize(statuses).to_dict(),
            "transcript": self.transcript,
            "finalTranscript": self.final_transcript,
            "isListening": self.is_listening,
            "status": self.status.to_dict(),
        }


def transcript_snapshots(results: Iterable[TranscriptionResult]) -> Iterator[str]:
    """
    Turn a stream of recognizer results into full transcript snapshots.

    Interim results replace the previous interim text; final results are
    appended for good. One snapshot is yielded per result. Each call
    starts from an empty transcript.
    """
    final: str = ""
    interim: str = ""
    for result in results:
        if result.is_partial:
            interim = result.text
        else:
            final = f"{final} {result.text}".strip()
            interim = ""
        yield join_transcript(final, interim)
