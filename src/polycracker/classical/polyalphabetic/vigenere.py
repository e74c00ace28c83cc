from __future__ import annotations

from polycracker.core.registry import register_variant
from polycracker.classical.common import ALPHABET, KEYED, SHARED, STRAIGHT, norm_key_alpha
from polycracker.classical.polyalphabetic.tableau import QuagmireCipher


VIGENERE = QuagmireCipher("vigenere", "Vigenère", 0, STRAIGHT, STRAIGHT)
QUAGMIRE_1 = QuagmireCipher("quagmire1", "Quagmire I", 1, KEYED, STRAIGHT)
QUAGMIRE_2 = QuagmireCipher("quagmire2", "Quagmire II", 2, STRAIGHT, KEYED)
QUAGMIRE_3 = QuagmireCipher("quagmire3", "Quagmire III", 3, KEYED, SHARED)
QUAGMIRE_4 = QuagmireCipher("quagmire4", "Quagmire IV", 4, KEYED, KEYED)


def _vigenere_shift(text: str, key: str, sign: int) -> str:
    k = norm_key_alpha(key)
    if not k:
        raise ValueError("Vigenère key must contain at least one A-Z letter.")
    shifts = [ord(ch) - ord("A") for ch in k]

    out = []
    j = 0
    for ch in text:
        up = ch.upper()
        if ch.isalpha() and up in ALPHABET:
            shift = shifts[j % len(shifts)]
            c = ALPHABET[(ord(up) - ord("A") + sign * shift) % 26]
            out.append(c if ch.isupper() else c.lower())
            j += 1
        else:
            out.append(ch)
    return "".join(out)


def vigenere_encrypt(text: str, key: str) -> str:
    """
    Classic Vigenère on free text: letters are shifted, case is kept,
    everything else passes through without consuming key letters.
    """
    return _vigenere_shift(text, key, +1)


def vigenere_decrypt(text: str, key: str) -> str:
    return _vigenere_shift(text, key, -1)


register_variant(VIGENERE, aliases=("vig",))
register_variant(QUAGMIRE_1, aliases=("q1", "quag1", "quagmire_1"))
register_variant(QUAGMIRE_2, aliases=("q2", "quag2", "quagmire_2"))
register_variant(QUAGMIRE_3, aliases=("q3", "quag3", "quagmire_3"))
register_variant(QUAGMIRE_4, aliases=("q4", "quag4", "quagmire_4"))
