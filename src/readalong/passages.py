# Copyright © 2025 Ed Nutting
# SPDX-License-Identifier: MIT
# See LICENSE file for details

"""
Reference passages the reader is asked to read aloud.

Provides the built-in passages, loading of extra passages from a folder,
and a small library that cycles through them.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from .aligner import tokenize

logger = logging.getLogger(__name__)

PASSAGE_SUFFIXES: tuple[str, ...] = (".txt", ".md")


@dataclass(frozen=True)
class Passage:
    """A passage of text plus its tokenized reference words."""
    title: str
    text: str
    words: tuple[str, ...] = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "words", tuple(tokenize(self.text)))

    def to_dict(self) -> dict[str, object]:
        """Convert to a JSON-friendly dict for the web UI."""
        return {
            "title": self.title,
            "text": self.text,
            "words": list(self.words),
        }


DEFAULT_PASSAGES: tuple[Passage, ...] = (
    Passage(
        title="The Cat And The Mat",
        text=(
            "The cat sat on the mat. The cat looked at the mat and then looked "
            "at the hat. The hat was on the mat. The mat was flat. The cat "
            "liked the flat mat with the hat on it. The cat did not like the "
            "rat, but the cat liked the mat."
        ),
    ),
    Passage(
        title="Planets",
        text=(
            "In 2023, the teacher taught the class about planets. The teacher "
            "said that planets are round, and planets move around the sun. The "
            "class listened to the teacher as the teacher wrote the names of "
            "the planets. In 2023, the class also learned that planets have "
            "moons, and some planets have many moons."
        ),
    ),
)


def title_from_filename(path: Path) -> str:
    """Turn a file name like my_story.txt into a title like My Story."""
    return path.stem.replace("_", " ").replace("-", " ").title()


def load_passages(folder: str | Path | None) -> list[Passage]:
    """
    Load passages from every .txt and .md file in a folder.

    Args:
        folder: Folder to scan, or None

    Returns:
        Passages sorted by file name. Files that cannot be read or are
        empty are skipped. A missing folder gives an empty list.
    """
    if not folder:
        return []

    folder_path = Path(folder).expanduser()
    if not folder_path.is_dir():
        logger.warning("Passages folder not found: %s", folder_path)
        return []

    passages: list[Passage] = []
    for path in sorted(folder_path.iterdir()):
        if path.suffix not in PASSAGE_SUFFIXES or not path.is_file():
            continue
        try:
            text = path.read_text(encoding="utf-8").strip()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read passage %s: %s", path, e)
            continue
        if not text:
            continue
        passages.append(Passage(title=title_from_filename(path), text=text))
    return passages


class PassageLibrary:
    """An ordered set of passages with a current selection."""

    def __init__(self, passages: list[Passage] | tuple[Passage, ...] | None = None) -> None:
        self.passages: list[Passage] = list(
            DEFAULT_PASSAGES if passages is None else passages)
        if not self.passages:
            raise ValueError("A passage library needs at least one passage")
        self.current_index: int = 0

    @classmethod
    def from_folder(cls, folder: str | Path | None) -> "PassageLibrary":
        """Built-in passages followed by any found in the folder."""
        return cls(list(DEFAULT_PASSAGES) + load_passages(folder))

    def __len__(self) -> int:
        return len(self.passages)

    @property
    def current(self) -> Passage:
        return self.passages[self.current_index]

    def next(self) -> Passage:
        """Move to the next passage, wrapping back to the first."""
        self.current_index = (self.current_index + 1) % len(self.passages)
        return self.current

    def select(self, index: int) -> Passage:
        """
        Select a passage by index.

        Raises:
            IndexError: If index is out of range
        """
        if not 0 <= index < len(self.passages):
            raise IndexError(
                f"Passage index {index} out of range (0-{len(self.passages) - 1})")
        self.current_index = index
        return self.current

    def titles(self) -> list[str]:
        return [p.title for p in self.passages]
