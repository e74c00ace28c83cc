from __future__ import annotations

from typing import Optional, Sequence


def register_all() -> None:
    from .polyalphabetic import vigenere, beaufort, porta, autokey  # noqa: F401


def decrypt(
    cipher_type: str | int,
    variant: bool,
    pt_alphabet: Optional[Sequence[int]],
    ct_alphabet: Optional[Sequence[int]],
    key: Sequence[int],
    ciphertext: Sequence[int],
) -> list[int]:
    """Decrypt an index sequence with a registered cipher variant (name, alias or code)."""
    from polycracker.core.registry import get_variant

    return get_variant(cipher_type).decrypt(ciphertext, key, pt_alphabet, ct_alphabet, variant=variant)


def encrypt(
    cipher_type: str | int,
    variant: bool,
    pt_alphabet: Optional[Sequence[int]],
    ct_alphabet: Optional[Sequence[int]],
    key: Sequence[int],
    plaintext: Sequence[int],
) -> list[int]:
    from polycracker.core.registry import get_variant

    return get_variant(cipher_type).encrypt(plaintext, key, pt_alphabet, ct_alphabet, variant=variant)
