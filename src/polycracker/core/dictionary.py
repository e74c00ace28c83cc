from __future__ import annotations

from pathlib import Path
from typing import Iterable

from .utils import normalize_az

MIN_WORD_LEN = 3


def load_dictionary(path: str | Path) -> frozenset[str]:
    """One word per line; non-alphabetic lines are skipped, words are uppercased."""
    p = Path(path)
    if not p.is_file():
        raise ValueError(f"Dictionary file not found: {p}")
    words = set()
    for line in p.read_text(encoding="utf-8").splitlines():
        w = line.strip().upper()
        if w and w.isalpha():
            words.add(w)
    return frozenset(words)


def find_dictionary_words(
    plaintext: str,
    words: Iterable[str],
    min_len: int = MIN_WORD_LEN,
) -> list[tuple[int, str]]:
    """
    Every dictionary word of at least min_len letters that appears in the
    plaintext, as (start position, word), ordered by position then length.
    """
    text = normalize_az(plaintext)
    vocab = {w for w in words if len(w) >= min_len}
    if not vocab or len(text) < min_len:
        return []
    longest = max(len(w) for w in vocab)

    found = []
    for i in range(len(text) - min_len + 1):
        for n in range(min_len, min(longest, len(text) - i) + 1):
            frag = text[i:i + n]
            if frag in vocab:
                found.append((i, frag))
    return found
