from __future__ import annotations

import math
import re
from collections import Counter
from typing import Iterable, Sequence


ALPHABET_SIZE = 26

_AZ_ONLY_RE = re.compile(r"[^A-Z]+")


def normalize_az(s: str) -> str:
    """Keep only A-Z, uppercase."""
    if s is None:
        return ""
    s = f"{s}".upper()
    return _AZ_ONLY_RE.sub("", s)


def to_indices(text: str) -> list[int]:
    """A-Z text -> alphabet indices (A=0 .. Z=25). Non-letters are dropped."""
    return [ord(ch) - 65 for ch in normalize_az(text)]


def to_text(indices: Iterable[int]) -> str:
    return "".join(chr(65 + i) for i in indices)


def tally(indices: Iterable[int]) -> list[int]:
    counts = [0] * ALPHABET_SIZE
    for i in indices:
        counts[i] += 1
    return counts


def index_of_coincidence(indices: Sequence[int]) -> float:
    """IoC of an index sequence; 0.0 if too short."""
    n = len(indices)
    if n < 2:
        return 0.0
    counts = tally(indices)
    num = sum(c * (c - 1) for c in counts)
    return num / (n * (n - 1))


def shannon_entropy(indices: Sequence[int]) -> float:
    """Shannon entropy in bits/char."""
    if not indices:
        return 0.0
    n = len(indices)
    ent = 0.0
    for c in Counter(indices).values():
        p = c / n
        ent -= p * math.log2(p)
    return ent


def unique_letters(s: str) -> str:
    """Distinct A-Z letters of s, first occurrence order."""
    return "".join(dict.fromkeys(normalize_az(s)))


def chunked(seq: Iterable, size: int):
    buf = []
    for x in seq:
        buf.append(x)
        if len(buf) == size:
            yield buf
            buf = []
    if buf:
        yield buf
