from __future__ import annotations

import pytest

from polycracker.core.dictionary import find_dictionary_words, load_dictionary


def test_load_dictionary(tmp_path):
    path = tmp_path / "words.txt"
    path.write_text("the\nHarbour\n\nit's\nsilver\n", encoding="utf-8")
    assert load_dictionary(path) == frozenset({"THE", "HARBOUR", "SILVER"})
    with pytest.raises(ValueError):
        load_dictionary(tmp_path / "nope.txt")


def test_find_words_in_running_text():
    words = {"THE", "HARBOUR", "HAR", "SILVER", "AT", "OLD"}
    found = find_dictionary_words("THEOLDHARBOUR", words)
    assert found == [(0, "THE"), (3, "OLD"), (6, "HAR"), (6, "HARBOUR")]


def test_short_words_are_ignored():
    assert find_dictionary_words("ATAT", {"AT"}) == []
    assert find_dictionary_words("AT", {"ATE"}) == []


def test_word_at_end_of_text_is_found():
    assert find_dictionary_words("XXSILVER", {"SILVER"}) == [(2, "SILVER")]
