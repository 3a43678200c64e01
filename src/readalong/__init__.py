"""
Read-Along - follow along as you read a passage aloud.

Listens with a local speech recognizer (Vosk) and highlights, word by word,
which words of the passage have been read, skipped, or are still to come.
"""

__version__ = "0.1.0"

from .aligner import WordStatus, align, normalize_word, summarize, tokenize
from .passages import Passage, PassageLibrary
from .session import ReadingSession, transcript_snapshots

__all__ = [
    "WordStatus",
    "align",
    "normalize_word",
    "tokenize",
    "summarize",
    "Passage",
    "PassageLibrary",
    "ReadingSession",
    "transcript_snapshots",
]
