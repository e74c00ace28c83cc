from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Sequence

import numpy as np

from polycracker.core.utils import ALPHABET_SIZE, normalize_az


def ngram_index(gram: str | Sequence[int]) -> int:
    """
    Base-26 index of an n-gram with the FIRST letter least significant:
    index = g[0] + 26*g[1] + 26**2*g[2] + ...
    """
    if isinstance(gram, str):
        gram = [ord(ch) - 65 for ch in normalize_az(gram)]
    index = 0
    base = 1
    for c in gram:
        index += c * base
        base *= ALPHABET_SIZE
    return index


@dataclass
class NgramTable:
    """
    Dense log-frequency table over all 26**n n-grams.

    Values are log(1 + count), normalized so the whole table sums to 1.
    Unseen n-grams score 0.
    """

    n: int
    data: np.ndarray

    def __post_init__(self) -> None:
        expected = ALPHABET_SIZE ** self.n
        if self.data.shape != (expected,):
            raise ValueError(f"N-gram table for n={self.n} must have {expected} entries, got {self.data.shape}.")
        # place values used by the vectorized window index
        self._weights = (ALPHABET_SIZE ** np.arange(self.n)).astype(np.int64)

    @classmethod
    def from_counts(cls, counts: Mapping[str, float], n: Optional[int] = None) -> "NgramTable":
        if not counts:
            raise ValueError("No n-gram counts given.")
        if n is None:
            n = len(next(iter(counts)))
        if not 1 <= n <= 8:
            raise ValueError(f"N-gram size must be in 1..8, got {n}.")

        raw = np.zeros(ALPHABET_SIZE ** n, dtype=np.float64)
        for gram, count in counts.items():
            g = normalize_az(gram)
            if len(g) != n:
                raise ValueError(f"N-gram {gram!r} does not have length {n}.")
            if count < 0:
                raise ValueError(f"N-gram {gram!r} has negative count {count}.")
            raw[ngram_index(g)] = count

        logged = np.log1p(raw)
        total = logged.sum()
        if total <= 0:
            raise ValueError("N-gram counts sum to zero.")
        return cls(n=n, data=(logged / total).astype(np.float32))

    @classmethod
    def from_lines(cls, lines, n: Optional[int] = None) -> "NgramTable":
        """
        Collect (gram -> count) from any "GRAM <number>" style line.
        Blank lines and lines that do not parse are skipped. When n is None it
        is taken from the first valid gram.
        """
        vals: dict[str, float] = {}
        for raw in lines:
            line = raw.strip()
            if not line:
                continue

            # allow separators like comma or equals
            line = line.replace("=", " ").replace(",", " ")
            parts = line.split()
            if len(parts) < 2:
                continue

            gram = parts[0].strip().upper()
            if not gram.isalpha() or normalize_az(gram) != gram:
                continue
            if n is None:
                n = len(gram)
            if len(gram) != n:
                continue

            try:
                v = float(parts[1])
            except ValueError:
                continue

            vals[gram] = v

        if not vals:
            raise ValueError("No valid n-gram lines found. Expected lines like 'TION 1234'.")
        return cls.from_counts(vals, n)

    @classmethod
    def from_file(cls, path: str | Path, n: Optional[int] = None) -> "NgramTable":
        p = Path(path)
        if not p.is_file():
            raise ValueError(f"N-gram file not found: {p}")
        with p.open(encoding="utf-8") as fh:
            return cls.from_lines(fh, n)

    @classmethod
    def from_text(cls, text: str, n: int) -> "NgramTable":
        """Build a table by counting the n-grams of a sample text."""
        az = normalize_az(text)
        if len(az) < n:
            raise ValueError(f"Sample text is shorter than the n-gram size {n}.")
        counts = Counter(az[i:i + n] for i in range(len(az) - n + 1))
        return cls.from_counts(counts, n)

    def __len__(self) -> int:
        return int(self.data.shape[0])

    def lookup(self, gram: str) -> float:
        return float(self.data[ngram_index(gram)])

    def window_indices(self, indices: Sequence[int]) -> np.ndarray:
        arr = np.asarray(indices, dtype=np.int64)
        n_windows = arr.shape[0] - self.n + 1
        if n_windows <= 0:
            return np.zeros(0, dtype=np.int64)
        windows = np.lib.stride_tricks.sliding_window_view(arr, self.n)
        return windows @ self._weights

    def score(self, indices: Sequence[int]) -> float:
        """
        26**n * (sum of table values over all windows) / (len - n).
        Texts shorter than n score 0.
        """
        length = len(indices)
        if length < self.n:
            return 0.0
        total = float(self.data[self.window_indices(indices)].sum(dtype=np.float64))
        return (ALPHABET_SIZE ** self.n) * total / max(1, length - self.n)
