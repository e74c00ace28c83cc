from __future__ import annotations

import math
from typing import Callable, Optional, Sequence

from .results import TextFeatures
from .scoring import chi_squared
from .utils import index_of_coincidence, normalize_az, shannon_entropy, to_indices


def mean_ioc(indices: Sequence[int], period: int) -> float:
    """Mean IoC of the period columns (a column shorter than 2 counts as 0)."""
    if period < 1:
        raise ValueError(f"Period must be >= 1, got {period}.")
    cols = [indices[i::period] for i in range(period)]
    return sum(index_of_coincidence(col) for col in cols) / period


def ioc_scan(indices: Sequence[int], max_len: int = 20) -> list[tuple[int, float, float]]:
    """
    (period, mean column IoC, z-score) for period = 1..max_len, in period order.
    Z uses the population mean / std over the scanned periods (0 when std is 0).
    """
    if max_len < 1:
        return []
    iocs = [mean_ioc(indices, k) for k in range(1, max_len + 1)]
    mu = sum(iocs) / len(iocs)
    sigma = math.sqrt(sum((x - mu) ** 2 for x in iocs) / len(iocs))
    out = []
    for k, ioc in enumerate(iocs, start=1):
        z = (ioc - mu) / sigma if sigma > 0 else 0.0
        out.append((k, ioc, z))
    return out


def estimate_periods(
    indices: Sequence[int],
    max_len: int = 20,
    z_threshold: float = 1.0,
    ioc_threshold: float = 0.047,
) -> list[int]:
    """
    Periods whose mean column IoC stands out: z >= z_threshold and
    IoC >= ioc_threshold, highest IoC first. May be empty.
    """
    scan = ioc_scan(indices, max_len)
    picked = [(k, ioc) for k, ioc, z in scan if z >= z_threshold and ioc >= ioc_threshold]
    # sorted() is stable, so equal IoCs keep period order
    picked = sorted(picked, key=lambda x: x[1], reverse=True)
    return [k for k, _ in picked]


def candidate_periods(
    indices: Sequence[int],
    *,
    max_len: int = 20,
    z_threshold: float = 1.0,
    ioc_threshold: float = 0.047,
    fixed: Optional[int] = None,
    autokey: bool = False,
    fallback_max: int = 15,
    log: Optional[Callable[[str], None]] = None,
) -> list[int]:
    if fixed is not None:
        return [fixed]
    if autokey:
        # primer length does not show up in column IoC
        return list(range(1, max_len + 1))
    periods = estimate_periods(indices, max_len, z_threshold, ioc_threshold)
    if not periods:
        if log is not None:
            log(f"No period passed the IoC thresholds; trying 1..{fallback_max}.")
        periods = list(range(1, fallback_max + 1))
    return periods


def analyze_text(text: str, max_len: int = 20) -> dict:
    """
    Summary statistics of a ciphertext (A-Z only) used by the CLI reports.
    """
    az = normalize_az(text)
    indices = to_indices(az)
    feats = TextFeatures(
        length=len(indices),
        unique_letters=len(set(az)),
        ioc=index_of_coincidence(indices),
        entropy=shannon_entropy(indices),
        chi_squared=chi_squared(indices) if indices else 0.0,
        likely_periods=tuple(estimate_periods(indices, max_len)) if len(indices) >= 2 else (),
    )
    return feats.to_dict()
