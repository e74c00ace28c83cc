from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Protocol, Sequence

from polycracker.core.utils import normalize_az, to_indices, to_text


class CipherPlugin(Protocol):
    name: str
    label: str
    code: int
    pt_role: str
    ct_role: str
    autokey: bool

    def decrypt(self, ciphertext, key, pt_alphabet=None, ct_alphabet=None, *, variant=False) -> list[int]:
        ...

    def encrypt(self, plaintext, key, pt_alphabet=None, ct_alphabet=None, *, variant=False) -> list[int]:
        ...

    def role_constraints(self) -> tuple[str, str]:
        ...


@dataclass
class _VariantEntry:
    cipher: CipherPlugin
    aliases: tuple[str, ...] = field(default_factory=tuple)


_VARIANTS: dict[str, _VariantEntry] = {}
_ALIASES: dict[str, str] = {}
_CODES: dict[int, str] = {}
_BUILTINS_LOADED = False


def register_variant(cipher: CipherPlugin, *, aliases: Sequence[str] = ()) -> None:
    key = cipher.name.lower().strip()
    if not key:
        raise ValueError("Cipher variant must have a non-empty name.")
    _VARIANTS[key] = _VariantEntry(cipher=cipher, aliases=tuple(aliases))
    for alias in aliases:
        _ALIASES[alias.lower().strip()] = key
    if cipher.code >= 0:
        _CODES[cipher.code] = key


def _ensure_registered() -> None:
    global _BUILTINS_LOADED
    if not _BUILTINS_LOADED:
        _BUILTINS_LOADED = True
        from polycracker.classical import register_all

        register_all()


def list_variants() -> list[str]:
    _ensure_registered()
    return sorted(_VARIANTS.keys(), key=lambda k: _VARIANTS[k].cipher.code)


def variant_aliases(name: str) -> tuple[str, ...]:
    return _VARIANTS[parse_cipher_type(name)].aliases


def parse_cipher_type(arg: str | int) -> str:
    """
    Resolve a cipher type to its registered name.
    Accepts the name, an alias ("q1", "beau", "auto3", ...) or the numeric code ("4").
    """
    _ensure_registered()
    raw = f"{arg}".strip().lower()
    if raw.lstrip("-").isdigit():
        code = int(raw)
        if code in _CODES:
            return _CODES[code]
    elif raw in _VARIANTS:
        return raw
    elif raw in _ALIASES:
        return _ALIASES[raw]
    raise ValueError(f"Unknown cipher type '{arg}'. Available: {', '.join(list_variants())}")


def get_variant(name: str | int) -> CipherPlugin:
    return _VARIANTS[parse_cipher_type(name)].cipher


def _alphabets(cipher: CipherPlugin, pt_keyword: Optional[str], ct_keyword: Optional[str]):
    from polycracker.classical.common import KEYED, STRAIGHT, make_keyed_alphabet

    pt = make_keyed_alphabet(pt_keyword) if pt_keyword else None
    ct = make_keyed_alphabet(ct_keyword) if ct_keyword else None
    pt_role, ct_role = cipher.role_constraints()
    if pt_role != STRAIGHT and pt is None:
        raise ValueError(f"{cipher.label} needs a plaintext keyword.")
    if ct_role == KEYED and ct is None:
        raise ValueError(f"{cipher.label} needs a ciphertext keyword.")
    return pt, ct


def decrypt_known(
    cipher_name: str,
    ciphertext: str,
    key: Optional[str],
    *,
    pt_keyword: Optional[str] = None,
    ct_keyword: Optional[str] = None,
    variant: bool = False,
) -> str:
    """Decrypt letters-only text when the cipher type and all key material are known."""
    if not key or not normalize_az(key):
        raise ValueError("This decrypt operation requires a cycleword / primer (--key).")
    cipher = get_variant(cipher_name)
    pt, ct = _alphabets(cipher, pt_keyword, ct_keyword)
    out = cipher.decrypt(to_indices(ciphertext), to_indices(key), pt, ct, variant=variant)
    return to_text(out)


def encrypt_known(
    cipher_name: str,
    plaintext: str,
    key: Optional[str],
    *,
    pt_keyword: Optional[str] = None,
    ct_keyword: Optional[str] = None,
    variant: bool = False,
) -> str:
    if not key or not normalize_az(key):
        raise ValueError("This encrypt operation requires a cycleword / primer (--key).")
    cipher = get_variant(cipher_name)
    pt, ct = _alphabets(cipher, pt_keyword, ct_keyword)
    out = cipher.encrypt(to_indices(plaintext), to_indices(key), pt, ct, variant=variant)
    return to_text(out)
