from __future__ import annotations

from polycracker.core.registry import register_variant
from polycracker.classical.common import STRAIGHT
from polycracker.classical.polyalphabetic.tableau import CipherVariant, Tableau
from polycracker.core.utils import ALPHABET_SIZE


class BeaufortCipher(CipherVariant):
    """Beaufort: p = (k - c) mod 26 on straight alphabets. Self-inverse."""

    name = "beaufort"
    label = "Beaufort"
    code = 5
    pt_role = STRAIGHT
    ct_role = STRAIGHT

    def decrypt_symbol(self, c: int, k: int, tab: Tableau) -> int:
        return (k - c) % ALPHABET_SIZE

    def encrypt_symbol(self, p: int, k: int, tab: Tableau) -> int:
        return (k - p) % ALPHABET_SIZE


BEAUFORT = BeaufortCipher()

register_variant(BEAUFORT, aliases=("beau",))
