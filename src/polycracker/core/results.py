from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True, order=True)
class SolveResult:
    # sort_index comes first so dataclass ordering uses it automatically
    sort_index: tuple[float, int] = field(init=False, repr=False)

    cipher_name: str
    plaintext: str
    key: Optional[str] = None  # cycleword / primer

    # Higher is better
    score: float = float("-inf")

    plaintext_alphabet: str = ""
    ciphertext_alphabet: str = ""
    period: int = 0
    plaintext_keyword_len: int = 0
    ciphertext_keyword_len: int = 0

    notes: str = ""

    # dictionary words, climb statistics, report extras
    meta: dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        # dataclass(order=True) sorts ascending; we want score descending,
        # so we negate it. Period is a weak tie-break (shorter first).
        object.__setattr__(self, "sort_index", (-self.score, self.period))

    @property
    def plaintext_keyword(self) -> str:
        return self.plaintext_alphabet[: self.plaintext_keyword_len]

    @property
    def ciphertext_keyword(self) -> str:
        return self.ciphertext_alphabet[: self.ciphertext_keyword_len]

    def to_dict(self) -> dict[str, Any]:
        return {
            "cipher_name": self.cipher_name,
            "plaintext": self.plaintext,
            "key": self.key,
            "score": self.score,
            "plaintext_alphabet": self.plaintext_alphabet,
            "ciphertext_alphabet": self.ciphertext_alphabet,
            "period": self.period,
            "plaintext_keyword_len": self.plaintext_keyword_len,
            "ciphertext_keyword_len": self.ciphertext_keyword_len,
            "notes": self.notes,
            "meta": dict(self.meta),
        }


@dataclass(frozen=True)
class TextFeatures:
    length: int
    unique_letters: int
    ioc: float
    entropy: float  # bits/char
    chi_squared: float
    likely_periods: tuple[int, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "length": self.length,
            "unique_letters": self.unique_letters,
            "ioc": self.ioc,
            "entropy": self.entropy,
            "chi_squared": self.chi_squared,
            "likely_periods": list(self.likely_periods),
        }
