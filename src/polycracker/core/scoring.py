from __future__ import annotations

from typing import Mapping, Optional, Sequence

from polycracker.core.config import ScoringWeights
from polycracker.core.ngrams import NgramTable
from polycracker.core.utils import index_of_coincidence, shannon_entropy, tally

# ----------------------------
# English reference statistics
# ----------------------------

# A..Z
ENGLISH_MONOGRAMS: tuple[float, ...] = (
    0.085517, 0.016048, 0.031644, 0.038712, 0.120965, 0.021815, 0.020863,
    0.049557, 0.073251, 0.002198, 0.008087, 0.042065, 0.025263, 0.071722,
    0.074673, 0.020662, 0.001040, 0.063327, 0.067282, 0.089381, 0.026816,
    0.010593, 0.018254, 0.001914, 0.017214, 0.001138,
)

ENGLISH_IOC = 0.0667
ENGLISH_ENTROPY = 4.18  # bits/char
DEFAULT_CRIB_SCALE = 3.55


def chi_squared(indices: Sequence[int]) -> float:
    """Chi-squared of letter frequencies against English. Lower is better."""
    n = len(indices)
    if n == 0:
        return float("inf")
    counts = tally(indices)
    chi2 = 0.0
    for observed, expected in zip(counts, ENGLISH_MONOGRAMS):
        chi2 += (observed / n - expected) ** 2 / expected
    return chi2


def monogram_fitness(indices: Sequence[int]) -> float:
    """Dot product of the letter counts with English monogram frequencies, per letter."""
    n = len(indices)
    if n == 0:
        return 0.0
    counts = tally(indices)
    return sum(c * e for c, e in zip(counts, ENGLISH_MONOGRAMS)) / n


def crib_score(indices: Sequence[int], cribs: Optional[Mapping[int, int]]) -> float:
    """Fraction of crib positions the decryption matches (0 without cribs)."""
    if not cribs:
        return 0.0
    hits = sum(1 for pos, want in cribs.items() if pos < len(indices) and indices[pos] == want)
    return hits / len(cribs)


def _closeness(observed: float, expected: float) -> float:
    return 1.0 / (1.0 + (observed - expected) ** 2)


def ioc_score(indices: Sequence[int]) -> float:
    return _closeness(index_of_coincidence(indices), ENGLISH_IOC)


def entropy_score(indices: Sequence[int]) -> float:
    return _closeness(shannon_entropy(indices), ENGLISH_ENTROPY)


class Scorer:
    """
    Composite fitness of a candidate decryption. Higher is better.

    With cribs the n-gram, crib, IoC and entropy terms are blended by weight
    and divided by crib_scale. Without cribs the plain n-gram score is used,
    unless IoC / entropy weights are set, in which case those terms are
    blended with it.
    """

    def __init__(
        self,
        table: NgramTable,
        weights: Optional[ScoringWeights] = None,
        cribs: Optional[Mapping[int, int]] = None,
        crib_scale: float = DEFAULT_CRIB_SCALE,
    ) -> None:
        self.table = table
        self.weights = weights or ScoringWeights()
        self.cribs = dict(cribs or {})
        self.crib_scale = crib_scale

    def __call__(self, indices: Sequence[int]) -> float:
        return self.score(indices)

    def _extras(self, indices: Sequence[int]) -> tuple[float, float]:
        w = self.weights
        total = 0.0
        weight = 0.0
        if w.ioc > 0:
            total += w.ioc * ioc_score(indices)
            weight += w.ioc
        if w.entropy > 0:
            total += w.entropy * entropy_score(indices)
            weight += w.entropy
        return total, weight

    def score(self, indices: Sequence[int]) -> float:
        w = self.weights
        ng = self.table.score(indices)

        if self.cribs:
            extra, extra_w = self._extras(indices)
            num = w.ngram * ng + w.crib * crib_score(indices, self.cribs) + extra
            den = w.ngram + w.crib + extra_w
            return num / den / self.crib_scale

        if w.ioc == 0 and w.entropy == 0:
            return ng
        extra, extra_w = self._extras(indices)
        return (w.ngram * ng + extra) / (w.ngram + extra_w)

    def breakdown(self, indices: Sequence[int]) -> dict[str, float]:
        return {
            "ngram": self.table.score(indices),
            "crib": crib_score(indices, self.cribs),
            "ioc": index_of_coincidence(indices),
            "entropy": shannon_entropy(indices),
            "chi_squared": chi_squared(indices),
            "total": self.score(indices),
        }
