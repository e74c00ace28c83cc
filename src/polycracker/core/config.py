from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from polycracker.core.utils import normalize_az


@dataclass(frozen=True)
class ScoringWeights:
    ngram: float = 12.0
    crib: float = 36.0
    ioc: float = 0.0
    entropy: float = 0.0

    def __post_init__(self) -> None:
        for name in ("ngram", "crib", "ioc", "entropy"):
            v = getattr(self, name)
            if v < 0:
                raise ValueError(f"Weight '{name}' must be non-negative, got {v}.")
        if self.ngram + self.crib <= 0:
            raise ValueError("At least one of the n-gram / crib weights must be positive.")

    def to_dict(self) -> dict[str, float]:
        return {"ngram": self.ngram, "crib": self.crib, "ioc": self.ioc, "entropy": self.entropy}


def _check_probability(name: str, value: float) -> None:
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be in [0, 1], got {value}.")


def _check_positive(name: str, value: Optional[int]) -> None:
    if value is not None and value < 1:
        raise ValueError(f"{name} must be >= 1, got {value}.")


def _check_letters(name: str, value: Optional[str]) -> None:
    if value is not None and not normalize_az(value):
        raise ValueError(f"{name} {value!r} must contain at least one A-Z letter.")


@dataclass
class SolverConfig:
    """
    Everything the search needs besides the ciphertext, cribs and the n-gram table.

    Lengths left as None are searched; keyword / cycleword strings pin the
    corresponding slot so the optimizer never touches it.
    """

    cipher_type: str = "vigenere"
    ngram_size: int = 4

    n_hill_climbs: int = 1000
    n_restarts: int = 1

    min_keyword_len: int = 5
    max_keyword_len: int = 11
    plaintext_keyword_len: Optional[int] = None
    ciphertext_keyword_len: Optional[int] = None
    plaintext_keyword: Optional[str] = None
    ciphertext_keyword: Optional[str] = None

    cycleword_len: Optional[int] = None
    max_cycleword_len: int = 20
    cycleword: Optional[str] = None
    fallback_max_period: int = 15

    z_threshold: float = 1.0
    ioc_threshold: float = 0.047

    backtrack_probability: float = 0.15
    keyword_permutation_probability: float = 0.95
    slip_probability: float = 0.01

    weights: ScoringWeights = field(default_factory=ScoringWeights)
    crib_scale: float = 3.55

    variant: bool = False
    same_key: bool = False
    optimal_cycleword: bool = True
    frequency_weighted: bool = True
    crib_prefilter: bool = True

    seed: Optional[int] = None
    workers: int = 1
    verbose: bool = False
    log_level: int = 1

    def __post_init__(self) -> None:
        from polycracker.core.registry import parse_cipher_type

        # resolves aliases / numeric codes; raises on unknown types
        self.cipher_type = parse_cipher_type(self.cipher_type)

        if not 1 <= self.ngram_size <= 8:
            raise ValueError(f"ngram_size must be in 1..8, got {self.ngram_size}.")

        for name in (
            "n_hill_climbs",
            "n_restarts",
            "min_keyword_len",
            "max_keyword_len",
            "plaintext_keyword_len",
            "ciphertext_keyword_len",
            "cycleword_len",
            "max_cycleword_len",
            "fallback_max_period",
            "workers",
        ):
            _check_positive(name, getattr(self, name))

        if self.min_keyword_len > self.max_keyword_len:
            raise ValueError(
                f"min_keyword_len ({self.min_keyword_len}) exceeds max_keyword_len ({self.max_keyword_len})."
            )
        for name in ("max_keyword_len", "plaintext_keyword_len", "ciphertext_keyword_len"):
            v = getattr(self, name)
            if v is not None and v > 26:
                raise ValueError(f"{name} must be <= 26, got {v}.")
        if self.same_key:
            # the cycleword is cut from the 26-letter PT alphabet
            for name in ("cycleword_len", "max_cycleword_len", "fallback_max_period"):
                v = getattr(self, name)
                if v is not None and v > 26:
                    raise ValueError(f"{name} must be <= 26 with same_key, got {v}.")

        for name in ("plaintext_keyword", "ciphertext_keyword", "cycleword"):
            _check_letters(name, getattr(self, name))

        for name in ("backtrack_probability", "keyword_permutation_probability", "slip_probability"):
            _check_probability(name, getattr(self, name))

        if self.crib_scale <= 0:
            raise ValueError(f"crib_scale must be positive, got {self.crib_scale}.")
        if self.log_level < 0:
            raise ValueError(f"log_level must be >= 0, got {self.log_level}.")

    @property
    def effective_log_level(self) -> int:
        return self.log_level if self.verbose else 0
