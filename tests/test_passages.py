"""
Tests for passages and the passage library.
"""

from pathlib import Path

import pytest

from readalong.passages import (
    DEFAULT_PASSAGES,
    Passage,
    PassageLibrary,
    load_passages,
    title_from_filename,
)


class TestPassage:

    def test_words_are_tokenized(self) -> None:
        passage = Passage(title="t", text="  The cat\nsat.  ")
        assert passage.words == ("The", "cat", "sat.")

    def test_is_immutable(self) -> None:
        passage = Passage(title="t", text="a b")
        with pytest.raises(AttributeError):
            passage.text = "c"  # type: ignore[misc]

    def test_default_passages(self) -> None:
        assert len(DEFAULT_PASSAGES) == 2
        assert DEFAULT_PASSAGES[0].words[:3] == ("The", "cat", "sat")
        assert DEFAULT_PASSAGES[1].words[:2] == ("In", "2023,")


class TestLoadPassages:

    def test_loads_txt_and_md_sorted(self, tmp_path: Path) -> None:
        (tmp_path / "b_story.md").write_text("Second story.", encoding="utf-8")
        (tmp_path / "a_story.txt").write_text("First story.", encoding="utf-8")
        (tmp_path / "notes.json").write_text("{}", encoding="utf-8")

        passages = load_passages(tmp_path)
        assert [p.title for p in passages] == ["A Story", "B Story"]
        assert passages[0].words == ("First", "story.")

    def test_skips_empty_files(self, tmp_path: Path) -> None:
        (tmp_path / "empty.txt").write_text("   \n", encoding="utf-8")
        assert load_passages(tmp_path) == []

    def test_missing_folder(self, tmp_path: Path) -> None:
        assert load_passages(tmp_path / "nope") == []

    def test_no_folder(self) -> None:
        assert load_passages(None) == []

    def test_title_from_filename(self) -> None:
        assert title_from_filename(Path("my_first-story.txt")) == "My First Story"


class TestPassageLibrary:

    def test_defaults(self) -> None:
        library = PassageLibrary()
        assert len(library) == 2
        assert library.current is DEFAULT_PASSAGES[0]

    def test_next_wraps_around(self) -> None:
        library = PassageLibrary()
        assert library.next() is DEFAULT_PASSAGES[1]
        assert library.next() is DEFAULT_PASSAGES[0]
        assert library.current_index == 0

    def test_select(self) -> None:
        library = PassageLibrary()
        assert library.select(1) is DEFAULT_PASSAGES[1]
        assert library.current_index == 1

    @pytest.mark.parametrize("index", [-1, 2, 10])
    def test_select_out_of_range(self, index: int) -> None:
        library = PassageLibrary()
        with pytest.raises(IndexError):
            library.select(index)
        assert library.current_index == 0

    def test_empty_library_rejected(self) -> None:
        with pytest.raises(ValueError):
            PassageLibrary([])

    def test_from_folder_appends_extra_passages(self, tmp_path: Path) -> None:
        (tmp_path / "extra.txt").write_text("Extra words here.", encoding="utf-8")
        library = PassageLibrary.from_folder(tmp_path)
        assert library.titles() == [
            DEFAULT_PASSAGES[0].title, DEFAULT_PASSAGES[1].title, "Extra"]
