from __future__ import annotations

from typing import Sequence

from polycracker.classical.polyalphabetic.tableau import CipherVariant, Tableau
from polycracker.core.scoring import ENGLISH_MONOGRAMS
from polycracker.core.utils import ALPHABET_SIZE, tally


def best_column_key(column: Sequence[int], cipher: CipherVariant, tab: Tableau) -> int:
    """
    Key letter whose decryption of this column best matches English monogram
    frequencies. Candidates are tried in ciphertext-alphabet order and the
    first strictly best one wins; an empty column gets ct_alphabet[0].
    """
    n = len(column)
    if n == 0:
        return tab.ct_alphabet[0]
    counts = tally(column)
    present = [x for x in range(ALPHABET_SIZE) if counts[x]]

    best_score = -1.0
    best_key = tab.ct_alphabet[0]
    for s in range(ALPHABET_SIZE):
        k = tab.ct_alphabet[s]
        score = sum(counts[x] * ENGLISH_MONOGRAMS[cipher.decrypt_symbol(x, k, tab)] for x in present) / n
        if score > best_score:
            best_score = score
            best_key = k
    return best_key


def derive_cycleword_with(tab: Tableau, ciphertext: Sequence[int], cipher: CipherVariant, period: int) -> list[int]:
    return [best_column_key(ciphertext[col::period], cipher, tab) for col in range(period)]


def derive_cycleword(
    ciphertext: Sequence[int],
    cipher: CipherVariant,
    pt_alphabet: Sequence[int] | None,
    ct_alphabet: Sequence[int] | None,
    period: int,
    variant: bool = False,
) -> list[int]:
    """
    Optimal periodic key for fixed alphabets: each column solved independently
    as a Caesar-like shift against English letter frequencies.
    """
    if period < 1:
        raise ValueError(f"Period must be >= 1, got {period}.")
    tab = cipher.tableau(pt_alphabet, ct_alphabet, variant)
    return derive_cycleword_with(tab, ciphertext, cipher, period)
