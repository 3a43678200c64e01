# Copyright © 2025 Ed Nutting
# SPDX-License-Identifier: MIT
# See LICENSE file for details

"""
Word alignment between a reference passage and a live spoken transcript.

Every call recomputes the status of each passage word from scratch, so the
caller can simply re-run alignment whenever the transcript changes.
Matching is exact on normalized words, with a small lookahead window
that lets the speaker (or the recognizer) drop a word or two without
losing track of the passage.
"""

import re
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

# Current word plus two words of lookahead
DEFAULT_WINDOW_SIZE: int = 3

_STRIP_PATTERN = re.compile(r'[.,!?;:]')


class WordStatus(str, Enum):
    """Status of a single reference word."""
    PENDING = "pending"
    MATCHED = "matched"
    MISSED = "missed"


@dataclass
class AlignmentSummary:
    """Counts of each status plus the position of the next unresolved word."""
    matched: int
    missed: int
    pending: int
    cursor: int  # Index of the first word that is still pending
    total: int

    @property
    def is_complete(self) -> bool:
        """True once every word has been either matched or missed."""
        return self.cursor >= self.total

    def to_dict(self) -> dict[str, int | bool]:
        """Convert to a JSON-friendly dict for the web UI."""
        return {
            "matched": self.matched,
            "missed": self.missed,
            "pending": self.pending,
            "cursor": self.cursor,
            "total": self.total,
            "complete": self.is_complete,
        }


def normalize_word(word: str) -> str:
    """Normalize a word for matching: lowercase and drop . , ! ? ; :

    Apostrophes and any other characters are left alone, so "word," and
    "word" compare equal but "word's" keeps its apostrophe.
    """
    return _STRIP_PATTERN.sub('', word.lower())


def tokenize(text: str) -> list[str]:
    """Split text on runs of whitespace, dropping empty tokens."""
    return text.split()


def align(
    reference_words: Sequence[str],
    transcript: str,
    window_size: int = DEFAULT_WINDOW_SIZE
) -> list[WordStatus]:
    """
    Work out which reference words have been spoken.

    Walks the spoken words in order with a single cursor into the reference.
    Each spoken word is compared against the next `window_size` reference
    words starting at the cursor. On the first match, any reference words
    jumped over are marked missed, the matched word is marked matched and
    the cursor moves past it. Spoken words with no match in the window are
    treated as filler and ignored. Everything from the final cursor onwards
    stays pending.

    Args:
        reference_words: Raw passage words, in order
        transcript: Full transcript so far (final text plus any interim text)
        window_size: Number of reference words checked for each spoken word

    Returns:
        One WordStatus per reference word

    Raises:
        ValueError: If window_size is less than 1
    """
    if window_size < 1:
        raise ValueError(f"window_size must be at least 1, got {window_size}")

    targets: list[str] = [normalize_word(w) for w in reference_words]
    spoken: list[str] = [normalize_word(w) for w in tokenize(transcript)]
    spoken = [w for w in spoken if w]

    statuses: list[WordStatus] = [WordStatus.PENDING] * len(targets)
    target_idx: int = 0

    for spoken_word in spoken:
        if target_idx >= len(targets):
            break

        window_end: int = min(target_idx + window_size, len(targets))
        for idx in range(target_idx, window_end):
            if spoken_word == targets[idx]:
                for skipped in range(target_idx, idx):
                    statuses[skipped] = WordStatus.MISSED
                statuses[idx] = WordStatus.MATCHED
                target_idx = idx + 1
                break

    return statuses


def align_passage(
    passage_text: str,
    transcript: str,
    window_size: int = DEFAULT_WINDOW_SIZE
) -> list[WordStatus]:
    """Tokenize passage text and align the transcript against it."""
    return align(tokenize(passage_text), transcript, window_size)


def summarize(statuses: Sequence[WordStatus]) -> AlignmentSummary:
    """
    Summarize a status list.

    The cursor is the index just past the last resolved word, which is
    where the aligner stopped. All resolved words sit before it.
    """
    cursor: int = 0
    for idx, status in enumerate(statuses):
        if status is not WordStatus.PENDING:
            cursor = idx + 1

    matched: int = sum(1 for s in statuses if s is WordStatus.MATCHED)
    missed: int = sum(1 for s in statuses if s is WordStatus.MISSED)
    return AlignmentSummary(
        matched=matched,
        missed=missed,
        pending=len(statuses) - matched - missed,
        cursor=cursor,
        total=len(statuses),
    )
