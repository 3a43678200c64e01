"""
Debug logging of alignment updates.

Writes every transcript snapshot and the resulting status string to
logs/alignment.log, which makes it easy to replay a reading afterwards
and see where the aligner lost its place.

Logging is disabled by default. Call enable() to turn it on.
"""

from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from .aligner import WordStatus

LOG_DIR: Path = Path.cwd() / "logs"
ALIGNMENT_LOG: Path = LOG_DIR / "alignment.log"

_STATUS_CHARS: dict[WordStatus, str] = {
    WordStatus.PENDING: ".",
    WordStatus.MATCHED: "+",
    WordStatus.MISSED: "x",
}

_ENABLED: bool = False  # pylint: disable=invalid-name


def enable() -> None:
    """Enable debug logging."""
    global _ENABLED  # pylint: disable=global-statement
    _ENABLED = True


def disable() -> None:
    """Disable debug logging."""
    global _ENABLED  # pylint: disable=global-statement
    _ENABLED = False


def is_enabled() -> bool:
    return _ENABLED


def _timestamp() -> str:
    return datetime.now().strftime("%H:%M:%S.%f")[:-3]


def _ensure_log_dir() -> None:
    LOG_DIR.mkdir(exist_ok=True)


def _write(line: str) -> None:
    _ensure_log_dir()
    with open(ALIGNMENT_LOG, 'a', encoding='utf-8') as f:
        f.write(line)


def status_string(statuses: Sequence[WordStatus]) -> str:
    """Compact form of a status list, e.g. "++x+..."."""
    return "".join(_STATUS_CHARS[s] for s in statuses)


def clear_logs(passage_title: str = "") -> None:
    """Start a fresh log for a new passage."""
    if not _ENABLED:
        return
    _ensure_log_dir()
    with open(ALIGNMENT_LOG, 'w', encoding='utf-8') as f:
        f.write(f"=== Session started at {datetime.now().isoformat()} "
                f"passage=\"{passage_title}\" ===\n\n")


def log_alignment(transcript: str, statuses: Sequence[WordStatus]) -> None:
    """Log a transcript snapshot and the statuses computed from it."""
    if not _ENABLED:
        return
    _write(f"[{_timestamp()}] transcript: \"{transcript[-80:]}\"\n"
           f"               statuses:   {status_string(statuses)}\n")


def log_event(event: str, detail: str = "") -> None:
    """Log a session event such as start, stop or error."""
    if not _ENABLED:
        return
    _write(f"[{_timestamp()}] {event:15} {detail}\n")
