from __future__ import annotations

import random
from typing import Sequence

from polycracker.core.utils import ALPHABET_SIZE, normalize_az

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"

# Alphabet roles for the plaintext / ciphertext side of a tableau.
STRAIGHT = "straight"
KEYED = "keyed"
SHARED = "shared"  # ciphertext alphabet is the plaintext alphabet


class KeyedAlphabetError(ValueError):
    """A keyed alphabet is not a permutation of the 26 letters."""


def norm_key_alpha(key: str) -> str:
    """Uppercase and keep only A-Z."""
    return normalize_az(key)


def straight_alphabet() -> list[int]:
    return list(range(ALPHABET_SIZE))


def make_keyed_alphabet(keyword: str) -> list[int]:
    """
    Keyword's distinct letters first, then the rest of the alphabet in order.
    "KRYPTOS" -> KRYPTOSABCDEFGHIJLMNQUVWXZ
    """
    k = norm_key_alpha(keyword)
    if not k:
        raise ValueError(f"Keyword {keyword!r} must contain at least one A-Z letter.")
    out: list[int] = []
    seen = [False] * ALPHABET_SIZE
    for ch in k:
        idx = ord(ch) - 65
        if not seen[idx]:
            seen[idx] = True
            out.append(idx)
    out.extend(i for i in range(ALPHABET_SIZE) if not seen[i])
    return out


def alphabet_positions(alphabet: Sequence[int]) -> list[int]:
    """
    Inverse permutation: positions[letter] = index of letter in alphabet.
    Raises KeyedAlphabetError unless alphabet is a full permutation.
    """
    if len(alphabet) != ALPHABET_SIZE:
        raise KeyedAlphabetError(f"Keyed alphabet has {len(alphabet)} letters, expected {ALPHABET_SIZE}.")
    positions = [-1] * ALPHABET_SIZE
    for pos, letter in enumerate(alphabet):
        if not 0 <= letter < ALPHABET_SIZE:
            raise KeyedAlphabetError(f"Keyed alphabet contains out-of-range index {letter}.")
        if positions[letter] != -1:
            raise KeyedAlphabetError(f"Keyed alphabet repeats letter {ALPHABET[letter]}.")
        positions[letter] = pos
    return positions


def is_permutation(alphabet: Sequence[int]) -> bool:
    return sorted(alphabet) == list(range(ALPHABET_SIZE))


# ---------------------------
# Random states / perturbation
# ---------------------------

def random_keyword(rng: random.Random, keyword_len: int) -> list[int]:
    """Random keyed alphabet: keyword_len distinct random letters, then the rest in order."""
    keyword_len = max(0, min(ALPHABET_SIZE, keyword_len))
    head = rng.sample(range(ALPHABET_SIZE), keyword_len)
    used = set(head)
    return head + [i for i in range(ALPHABET_SIZE) if i not in used]


def random_cycleword(rng: random.Random, length: int) -> list[int]:
    return [rng.randrange(ALPHABET_SIZE) for _ in range(length)]


def perturb_cycleword(rng: random.Random, cycleword: list[int]) -> None:
    """Set one randomly chosen cycleword letter to a random letter, in place."""
    if not cycleword:
        return
    i = rng.randrange(len(cycleword))
    cycleword[i] = rng.randrange(ALPHABET_SIZE)


def _weighted_index(rng: random.Random, state: Sequence[int], lo: int, hi: int, weights: Sequence[float]) -> int:
    """Pick an index in [lo, hi) with probability proportional to weights[state[i]]."""
    w = [weights[state[i]] for i in range(lo, hi)]
    return rng.choices(range(lo, hi), weights=w)[0]


def perturb_keyword(
    rng: random.Random,
    state: list[int],
    keyword_len: int,
    *,
    weights: Sequence[float] | None = None,
    swap_probability: float = 0.2,
) -> None:
    """
    Perturb a keyed alphabet in place, keeping it a permutation.

    With probability swap_probability swap two letters inside the keyword
    segment. Otherwise move one keyword letter out to the (sorted) remainder
    and one remainder letter into its slot. When weights is given (English
    monogram frequencies) the two letters are chosen frequency-weighted.
    """
    n = len(state)
    if keyword_len <= 0:
        return

    if keyword_len >= n or rng.random() < swap_probability:
        hi = min(keyword_len, n)
        i = rng.randrange(hi)
        j = rng.randrange(hi)
        state[i], state[j] = state[j], state[i]
        return

    if weights is not None:
        i = _weighted_index(rng, state, 0, keyword_len, weights)
        j = _weighted_index(rng, state, keyword_len, n, weights)
    else:
        i = rng.randrange(keyword_len)
        j = rng.randrange(keyword_len, n)

    moved_out = state[i]
    state[i] = state[j]
    rest = state[keyword_len:j] + state[j + 1:]
    rest.append(moved_out)
    rest.sort()
    state[keyword_len:] = rest
