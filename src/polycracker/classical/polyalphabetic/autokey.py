from __future__ import annotations

from typing import Sequence

from polycracker.core.registry import register_variant
from polycracker.classical.polyalphabetic.beaufort import BEAUFORT
from polycracker.classical.polyalphabetic.porta import PORTA
from polycracker.classical.polyalphabetic.tableau import CipherVariant, Tableau
from polycracker.classical.polyalphabetic.vigenere import (
    QUAGMIRE_1,
    QUAGMIRE_2,
    QUAGMIRE_3,
    QUAGMIRE_4,
    VIGENERE,
)


class AutokeyCipher(CipherVariant):
    """
    Running-key form of a periodic tableau.

    The key for position i is key_stream[i], where the stream starts as the
    primer and each recovered plaintext letter is appended to it. The
    per-symbol math is the base tableau's.
    """

    autokey = True

    def __init__(self, name: str, label: str, code: int, base: CipherVariant) -> None:
        self.name = name
        self.label = label
        self.code = code
        self.base = base
        self.pt_role = base.pt_role
        self.ct_role = base.ct_role

    def decrypt_symbol(self, c: int, k: int, tab: Tableau) -> int:
        return self.base.decrypt_symbol(c, k, tab)

    def encrypt_symbol(self, p: int, k: int, tab: Tableau) -> int:
        return self.base.encrypt_symbol(p, k, tab)

    def decrypt_with_key_stream(
        self, tab: Tableau, ciphertext: Sequence[int], primer: Sequence[int]
    ) -> tuple[list[int], list[int]]:
        if not primer:
            raise ValueError("Autokey primer must contain at least one letter.")
        stream = list(primer)
        plaintext: list[int] = []
        for i, c in enumerate(ciphertext):
            p = self.base.decrypt_symbol(c, stream[i], tab)
            plaintext.append(p)
            stream.append(p)
        return plaintext, stream

    def decrypt_with(self, tab: Tableau, ciphertext: Sequence[int], key: Sequence[int]) -> list[int]:
        return self.decrypt_with_key_stream(tab, ciphertext, key)[0]

    def encrypt_with(self, tab: Tableau, plaintext: Sequence[int], key: Sequence[int]) -> list[int]:
        if not key:
            raise ValueError("Autokey primer must contain at least one letter.")
        stream = list(key) + list(plaintext)
        return [self.base.encrypt_symbol(p, stream[i], tab) for i, p in enumerate(plaintext)]


AUTOKEY_0 = AutokeyCipher("autokey0", "Autokey (Vigenère)", 7, VIGENERE)
AUTOKEY_1 = AutokeyCipher("autokey1", "Autokey (Quagmire I)", 8, QUAGMIRE_1)
AUTOKEY_2 = AutokeyCipher("autokey2", "Autokey (Quagmire II)", 9, QUAGMIRE_2)
AUTOKEY_3 = AutokeyCipher("autokey3", "Autokey (Quagmire III)", 10, QUAGMIRE_3)
AUTOKEY_4 = AutokeyCipher("autokey4", "Autokey (Quagmire IV)", 11, QUAGMIRE_4)
AUTOKEY_BEAUFORT = AutokeyCipher("autokey_beaufort", "Autokey (Beaufort)", 12, BEAUFORT)
AUTOKEY_PORTA = AutokeyCipher("autokey_porta", "Autokey (Porta)", 13, PORTA)

register_variant(AUTOKEY_0, aliases=("auto", "autokey", "auto0"))
register_variant(AUTOKEY_1, aliases=("auto1",))
register_variant(AUTOKEY_2, aliases=("auto2",))
register_variant(AUTOKEY_3, aliases=("auto3",))
register_variant(AUTOKEY_4, aliases=("auto4",))
register_variant(AUTOKEY_BEAUFORT, aliases=("autobeau", "auto_beau", "autokey_beau"))
register_variant(AUTOKEY_PORTA, aliases=("autoporta", "auto_porta"))
