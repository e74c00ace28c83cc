from __future__ import annotations

from polycracker.core.registry import register_variant
from polycracker.classical.common import STRAIGHT
from polycracker.classical.polyalphabetic.tableau import CipherVariant, Tableau

_HALF = 13


def porta_symbol(x: int, k: int) -> int:
    """
    Porta swaps the two halves of the alphabet under a shift of k // 2.
    A-M map into N-Z and back, so the same rule both encrypts and decrypts.
    """
    s = k // 2
    if x < _HALF:
        return (x + s) % _HALF + _HALF
    return (x - _HALF - s) % _HALF


class PortaCipher(CipherVariant):
    name = "porta"
    label = "Porta"
    code = 6
    pt_role = STRAIGHT
    ct_role = STRAIGHT

    def decrypt_symbol(self, c: int, k: int, tab: Tableau) -> int:
        return porta_symbol(c, k)

    def encrypt_symbol(self, p: int, k: int, tab: Tableau) -> int:
        return porta_symbol(p, k)


PORTA = PortaCipher()

register_variant(PORTA)
