from __future__ import annotations

from typing import Mapping, Optional, Sequence

from polycracker.classical.common import alphabet_positions
from polycracker.core.utils import ALPHABET_SIZE

UNKNOWN = "_"


def parse_cribs(crib_text: Optional[str], length: int) -> dict[int, int]:
    """
    Known plaintext aligned with the ciphertext, '_' for unknown positions.
    "__THE___" -> {2: T, 3: H, 4: E}. Whitespace is ignored.
    """
    if crib_text is None:
        return {}
    s = "".join(crib_text.split()).upper()
    if not s:
        return {}
    if len(s) != length:
        raise ValueError(f"Crib has {len(s)} characters but the ciphertext has {length}.")
    cribs: dict[int, int] = {}
    for pos, ch in enumerate(s):
        if ch == UNKNOWN:
            continue
        if not "A" <= ch <= "Z":
            raise ValueError(f"Crib character {ch!r} at position {pos} is neither A-Z nor '{UNKNOWN}'.")
        cribs[pos] = ord(ch) - 65
    return cribs


def format_cribs(cribs: Mapping[int, int], length: int) -> str:
    out = [UNKNOWN] * length
    for pos, p in cribs.items():
        out[pos] = chr(65 + p)
    return "".join(out)


def cribs_satisfiable(ciphertext: Sequence[int], cribs: Mapping[int, int], period: int) -> bool:
    """
    True unless some column pairs one plaintext letter with two ciphertext
    letters, or one ciphertext letter with two plaintext letters.
    """
    if not cribs:
        return True
    pt_to_ct: list[dict[int, int]] = [{} for _ in range(period)]
    ct_to_pt: list[dict[int, int]] = [{} for _ in range(period)]
    for pos, p in sorted(cribs.items()):
        if pos >= len(ciphertext):
            continue
        col = pos % period
        c = ciphertext[pos]
        if pt_to_ct[col].setdefault(p, c) != c:
            return False
        if ct_to_pt[col].setdefault(c, p) != p:
            return False
    return True


def forced_key_letters(
    ciphertext: Sequence[int],
    cribs: Mapping[int, int],
    pt_alphabet: Sequence[int],
    ct_alphabet: Sequence[int],
    period: int,
    variant: bool = False,
) -> Optional[dict[int, int]]:
    """
    Column -> cycleword letter implied by the cribs under these alphabets,
    or None if two cribs in a column imply different letters.
    """
    pt_pos = alphabet_positions(pt_alphabet)
    ct_pos = alphabet_positions(ct_alphabet)
    forced: dict[int, int] = {}
    for pos, p in sorted(cribs.items()):
        if pos >= len(ciphertext):
            continue
        c = ciphertext[pos]
        if variant:
            idx = (pt_pos[p] - ct_pos[c]) % ALPHABET_SIZE
        else:
            idx = (ct_pos[c] - pt_pos[p]) % ALPHABET_SIZE
        k = ct_alphabet[idx]
        col = pos % period
        if forced.setdefault(col, k) != k:
            return None
    return forced


def constrain_cycleword(
    ciphertext: Sequence[int],
    cribs: Mapping[int, int],
    pt_alphabet: Sequence[int],
    ct_alphabet: Sequence[int],
    cycleword: list[int],
    variant: bool = False,
) -> Optional[list[int]]:
    """
    Write the crib-forced letters into cycleword (in place) and return it.
    On a contradiction return None and leave cycleword untouched.
    """
    forced = forced_key_letters(ciphertext, cribs, pt_alphabet, ct_alphabet, len(cycleword), variant)
    if forced is None:
        return None
    for col, k in forced.items():
        cycleword[col] = k
    return cycleword
