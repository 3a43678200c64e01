"""Tests for the alignment debug log."""

from unittest import mock

import pytest

from readalong import debug_log
from readalong.aligner import WordStatus


@pytest.fixture
def log_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(debug_log, "LOG_DIR", tmp_path / "logs")
    monkeypatch.setattr(debug_log, "ALIGNMENT_LOG", tmp_path / "logs" / "alignment.log")
    yield tmp_path / "logs"
    debug_log.disable()


class TestDebugLogEnableDisable:

    def setup_method(self):
        debug_log.disable()

    def test_disabled_by_default(self):
        assert not debug_log.is_enabled()

    def test_enable_disable(self):
        debug_log.enable()
        assert debug_log.is_enabled()
        debug_log.disable()
        assert not debug_log.is_enabled()

    def test_no_op_when_disabled(self):
        with mock.patch.object(debug_log, '_ensure_log_dir') as mock_ensure:
            debug_log.clear_logs("title")
            debug_log.log_alignment("the cat", [WordStatus.MATCHED])
            debug_log.log_event("start")
            mock_ensure.assert_not_called()


def test_status_string():
    statuses = [WordStatus.MATCHED, WordStatus.MISSED, WordStatus.PENDING]
    assert debug_log.status_string(statuses) == "+x."


def test_writes_log_when_enabled(log_dir):
    debug_log.enable()
    debug_log.clear_logs("Planets")
    debug_log.log_alignment("the cat", [WordStatus.MATCHED, WordStatus.PENDING])
    debug_log.log_event("stopped")

    content = (log_dir / "alignment.log").read_text(encoding="utf-8")
    assert 'passage="Planets"' in content
    assert 'transcript: "the cat"' in content
    assert "+." in content
    assert "stopped" in content
