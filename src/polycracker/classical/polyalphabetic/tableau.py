from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from polycracker.classical.common import (
    KEYED,
    SHARED,
    STRAIGHT,
    alphabet_positions,
    straight_alphabet,
)
from polycracker.core.utils import ALPHABET_SIZE

# ============================================================
# Polyalphabetic tableaux
#
# Every cipher is a CipherVariant: a per-symbol rule
#   decrypt_symbol(c, k, tableau) / encrypt_symbol(p, k, tableau)
# plus the roles of its plaintext / ciphertext alphabets.
# Periodic ciphers take key k = cycleword[i % L]; Autokey ciphers
# (autokey.py) take k from a running key stream.
# ============================================================

SymbolFn = Callable[[int, int, "Tableau"], int]


@dataclass(frozen=True)
class Tableau:
    """Plaintext / ciphertext keyed alphabets with their inverse lookups."""

    pt_alphabet: tuple[int, ...]
    ct_alphabet: tuple[int, ...]
    pt_pos: tuple[int, ...]
    ct_pos: tuple[int, ...]
    variant: bool = False

    @classmethod
    def build(
        cls,
        pt_alphabet: Optional[Sequence[int]] = None,
        ct_alphabet: Optional[Sequence[int]] = None,
        variant: bool = False,
    ) -> "Tableau":
        pt = tuple(pt_alphabet) if pt_alphabet is not None else tuple(straight_alphabet())
        ct = tuple(ct_alphabet) if ct_alphabet is not None else tuple(straight_alphabet())
        return cls(
            pt_alphabet=pt,
            ct_alphabet=ct,
            pt_pos=tuple(alphabet_positions(pt)),
            ct_pos=tuple(alphabet_positions(ct)),
            variant=bool(variant),
        )


class CipherVariant:
    name: str = ""
    label: str = ""
    code: int = -1
    pt_role: str = STRAIGHT
    ct_role: str = STRAIGHT
    autokey: bool = False

    # --- per-symbol rules (override) ---

    def decrypt_symbol(self, c: int, k: int, tab: Tableau) -> int:
        raise NotImplementedError

    def encrypt_symbol(self, p: int, k: int, tab: Tableau) -> int:
        raise NotImplementedError

    # --- roles ---

    def role_constraints(self) -> tuple[str, str]:
        return self.pt_role, self.ct_role

    @property
    def uses_keywords(self) -> bool:
        return self.pt_role != STRAIGHT or self.ct_role != STRAIGHT

    def tableau(
        self,
        pt_alphabet: Optional[Sequence[int]] = None,
        ct_alphabet: Optional[Sequence[int]] = None,
        variant: bool = False,
    ) -> Tableau:
        """Build the tableau this variant actually uses (straight roles ignore the given alphabet)."""
        pt = pt_alphabet if self.pt_role != STRAIGHT else None
        if self.ct_role == SHARED:
            ct = pt
        elif self.ct_role == KEYED:
            ct = ct_alphabet
        else:
            ct = None
        return Tableau.build(pt, ct, variant)

    # --- whole-text transforms ---

    def decrypt(
        self,
        ciphertext: Sequence[int],
        key: Sequence[int],
        pt_alphabet: Optional[Sequence[int]] = None,
        ct_alphabet: Optional[Sequence[int]] = None,
        *,
        variant: bool = False,
    ) -> list[int]:
        return self.decrypt_with(self.tableau(pt_alphabet, ct_alphabet, variant), ciphertext, key)

    def encrypt(
        self,
        plaintext: Sequence[int],
        key: Sequence[int],
        pt_alphabet: Optional[Sequence[int]] = None,
        ct_alphabet: Optional[Sequence[int]] = None,
        *,
        variant: bool = False,
    ) -> list[int]:
        return self.encrypt_with(self.tableau(pt_alphabet, ct_alphabet, variant), plaintext, key)

    def decrypt_with(self, tab: Tableau, ciphertext: Sequence[int], key: Sequence[int]) -> list[int]:
        return _periodic(ciphertext, key, tab, self.decrypt_symbol)

    def encrypt_with(self, tab: Tableau, plaintext: Sequence[int], key: Sequence[int]) -> list[int]:
        return _periodic(plaintext, key, tab, self.encrypt_symbol)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


def _periodic(text: Sequence[int], key: Sequence[int], tab: Tableau, fn: SymbolFn) -> list[int]:
    if not key:
        raise ValueError("Cycleword must contain at least one letter.")
    # one 26-entry substitution per period column
    maps = [[fn(x, k, tab) for x in range(ALPHABET_SIZE)] for k in key]
    period = len(maps)
    return [maps[i % period][x] for i, x in enumerate(text)]


class QuagmireCipher(CipherVariant):
    """
    Vigenère / Quagmire I-IV tableau.

    Decrypt: p = pos_ct(c), k = pos_ct(key), plaintext = pt_alphabet[(p - k) mod 26]
    (p + k with the variant flag). Vigenère is the straight/straight case.
    """

    def __init__(self, name: str, label: str, code: int, pt_role: str, ct_role: str) -> None:
        self.name = name
        self.label = label
        self.code = code
        self.pt_role = pt_role
        self.ct_role = ct_role

    def decrypt_symbol(self, c: int, k: int, tab: Tableau) -> int:
        p = tab.ct_pos[c]
        s = tab.ct_pos[k]
        idx = (p + s) % ALPHABET_SIZE if tab.variant else (p - s) % ALPHABET_SIZE
        return tab.pt_alphabet[idx]

    def encrypt_symbol(self, p: int, k: int, tab: Tableau) -> int:
        i = tab.pt_pos[p]
        s = tab.ct_pos[k]
        idx = (i - s) % ALPHABET_SIZE if tab.variant else (i + s) % ALPHABET_SIZE
        return tab.ct_alphabet[idx]
