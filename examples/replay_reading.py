#!/usr/bin/env python3
# Copyright © 2025 Ed Nutting
# SPDX-License-Identifier: MIT
# See LICENSE file for details

"""
Replay a simulated reading of a passage and print the word statuses.

Feeds growing interim results and final results (as a recognizer would)
through the snapshot stream, aligns each snapshot, and times the whole run.
Useful for seeing how the aligner reacts to dropped and misheard words.
"""

import time

from readalong.aligner import summarize
from readalong.debug_log import status_string
from readalong.passages import DEFAULT_PASSAGES
from readalong.session import ReadingSession, transcript_snapshots
from readalong.transcription_provider import TranscriptionResult


def simulate_results(words: list[str], chunk_size: int = 5) -> list[TranscriptionResult]:
    """Interim results growing word by word, then a final per utterance.

    Every seventh word is dropped and every eleventh is replaced with a
    filler word, to mimic recognition noise.
    """
    spoken: list[str] = []
    for i, word in enumerate(words):
        if i % 7 == 6:
            continue
        spoken.append("um" if i % 11 == 10 else word.lower())

    results: list[TranscriptionResult] = []
    for start in range(0, len(spoken), chunk_size):
        utterance = spoken[start:start + chunk_size]
        for end in range(1, len(utterance) + 1):
            results.append(TranscriptionResult(" ".join(utterance[:end]), is_partial=True))
        results.append(TranscriptionResult(" ".join(utterance), is_partial=False))
    return results


def main() -> None:
    passage = DEFAULT_PASSAGES[0]
    session = ReadingSession(passage)
    results = simulate_results(list(passage.words))

    print("=" * 80)
    print(f"Passage: {passage.title} ({len(passage.words)} words)")
    print(f"Recognizer results: {len(results)}")
    print("=" * 80)

    start_time = time.perf_counter()
    for snapshot in transcript_snapshots(results):
        session.on_interim(snapshot)
        print(status_string(session.word_statuses()))
    elapsed = time.perf_counter() - start_time

    summary = summarize(session.word_statuses())
    print("=" * 80)
    print(f"matched={summary.matched} missed={summary.missed} pending={summary.pending}")
    print(f"{len(results)} alignments in {elapsed * 1000:.1f}ms")


if __name__ == "__main__":
    main()
