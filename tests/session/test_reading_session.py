"""
Tests for ReadingSession transcript accumulation and lifecycle.
"""

import pytest

from readalong.aligner import WordStatus
from readalong.passages import Passage
from readalong.session import (
    CONNECT_FAILED_MESSAGE,
    IDLE_MESSAGE,
    INITIALIZING_MESSAGE,
    LISTENING_MESSAGE,
    STOPPED_MESSAGE,
    ReadingSession,
    StatusType,
)
from readalong.transcription_provider import TranscriptionResult

PASSAGE = Passage(title="Cat", text="The cat sat on the mat.")
OTHER = Passage(title="Dog", text="A dog ran.")


@pytest.fixture
def session() -> ReadingSession:
    return ReadingSession(PASSAGE)


@pytest.fixture
def listening(session: ReadingSession) -> ReadingSession:
    session.start()
    session.on_started()
    return session


class TestInitialState:

    def test_starts_idle(self, session: ReadingSession) -> None:
        assert not session.is_listening
        assert session.status.type is StatusType.IDLE
        assert session.status.message == IDLE_MESSAGE
        assert session.transcript == ""

    def test_all_pending(self, session: ReadingSession) -> None:
        assert session.word_statuses() == [WordStatus.PENDING] * 6

    def test_invalid_window_size(self) -> None:
        with pytest.raises(ValueError):
            ReadingSession(PASSAGE, window_size=0)


class TestTranscriptAccumulation:

    def test_interim_replaces_interim(self, listening: ReadingSession) -> None:
        listening.on_interim("the")
        listening.on_interim("the cat")
        assert listening.transcript == "the cat"

    def test_final_appends_and_clears_interim(self, listening: ReadingSession) -> None:
        listening.on_interim("the cat")
        listening.on_final("the cat")
        assert listening.final_transcript == "the cat"
        assert listening.interim_transcript == ""

        listening.on_interim("sat")
        listening.on_final("sat on")
        assert listening.final_transcript == "the cat sat on"

    def test_transcript_joins_final_and_interim(self, listening: ReadingSession) -> None:
        listening.on_final("the cat")
        listening.on_interim("sat on")
        assert listening.transcript == "the cat sat on"

    def test_apply_dispatches_by_kind(self, listening: ReadingSession) -> None:
        listening.apply(TranscriptionResult("the", is_partial=True))
        assert listening.interim_transcript == "the"
        listening.apply(TranscriptionResult("the cat", is_partial=False))
        assert listening.final_transcript == "the cat"
        assert listening.interim_transcript == ""

    def test_statuses_follow_transcript(self, listening: ReadingSession) -> None:
        listening.on_final("the cat")
        listening.on_interim("on")
        assert listening.word_statuses() == [
            WordStatus.MATCHED, WordStatus.MATCHED, WordStatus.MISSED,
            WordStatus.MATCHED, WordStatus.PENDING, WordStatus.PENDING,
        ]

    def test_interim_revision_can_change_statuses(self, listening: ReadingSession) -> None:
        listening.on_interim("the cat sad")
        assert listening.word_statuses()[2] is WordStatus.PENDING
        listening.on_interim("the cat sat")
        assert listening.word_statuses()[2] is WordStatus.MATCHED


class TestLifecycle:

    def test_start_clears_transcript(self, session: ReadingSession) -> None:
        session.on_final("old words")
        assert session.start()
        assert session.transcript == ""
        assert session.status.message == INITIALIZING_MESSAGE
        assert session.status.type is StatusType.INITIALIZING

    def test_start_ignored_while_listening(self, listening: ReadingSession) -> None:
        listening.on_final("the cat")
        assert not listening.start()
        assert listening.final_transcript == "the cat"

    def test_on_started(self, listening: ReadingSession) -> None:
        assert listening.is_listening
        assert listening.status.message == LISTENING_MESSAGE

    def test_stop_keeps_transcript(self, listening: ReadingSession) -> None:
        listening.on_final("the cat")
        listening.on_stopped()
        assert not listening.is_listening
        assert listening.status.message == STOPPED_MESSAGE
        assert listening.status.type is StatusType.IDLE
        assert listening.word_statuses()[:2] == [WordStatus.MATCHED] * 2

    def test_error_keeps_transcript(self, listening: ReadingSession) -> None:
        listening.on_final("the cat")
        listening.on_error("network dropped")
        assert not listening.is_listening
        assert listening.status.type is StatusType.ERROR
        assert listening.status.message == "Error: network dropped"
        assert listening.final_transcript == "the cat"

    def test_connect_failed(self, session: ReadingSession) -> None:
        session.start()
        session.on_connect_failed()
        assert not session.is_listening
        assert session.status.message == CONNECT_FAILED_MESSAGE
        assert session.status.type is StatusType.ERROR


class TestChangePassage:

    def test_change_resets_state(self, session: ReadingSession) -> None:
        session.on_final("the cat")
        session.on_error("boom")
        assert session.change_passage(OTHER)
        assert session.passage is OTHER
        assert session.transcript == ""
        assert session.status.message == IDLE_MESSAGE
        assert session.word_statuses() == [WordStatus.PENDING] * 3

    def test_change_refused_while_listening(self, listening: ReadingSession) -> None:
        assert not listening.change_passage(OTHER)
        assert listening.passage is PASSAGE


class TestToDict:

    def test_snapshot(self, listening: ReadingSession) -> None:
        listening.on_final("the cat")
        listening.on_interim("sat")
        data = listening.to_dict()
        assert data["statuses"] == [
            "matched", "matched", "matched", "pending", "pending", "pending"]
        assert data["transcript"] == "the cat sat"
        assert data["finalTranscript"] == "the cat"
        assert data["isListening"] is True
        assert data["status"] == {"message": LISTENING_MESSAGE, "type": "listening"}
        assert data["summary"]["cursor"] == 3
        assert data["passage"]["words"] == ["The", "cat", "sat", "on", "the", "mat."]
