from __future__ import annotations

import pytest

from polycracker.classical.common import make_keyed_alphabet, straight_alphabet
from polycracker.classical.polyalphabetic.cribs import (
    constrain_cycleword,
    cribs_satisfiable,
    format_cribs,
    parse_cribs,
)
from polycracker.core.registry import get_variant
from polycracker.core.utils import to_indices, to_text


def test_parse_cribs():
    cribs = parse_cribs("__TH_E", 6)
    assert cribs == {2: 19, 3: 7, 5: 4}
    assert format_cribs(cribs, 6) == "__TH_E"
    assert parse_cribs(None, 10) == {}
    assert parse_cribs("", 10) == {}
    assert parse_cribs("__ th e", 5) == {2: 19, 3: 7, 4: 4}


def test_parse_cribs_errors():
    with pytest.raises(ValueError, match="ciphertext has 4"):
        parse_cribs("ABC", 4)
    with pytest.raises(ValueError, match="position 1"):
        parse_cribs("A?C", 3)


def test_contradiction_detected_per_column():
    ct = to_indices("AAAA")
    # two plaintext letters under the same ciphertext letter in one column
    assert not cribs_satisfiable(ct, parse_cribs("XY__", 4), 1)
    assert cribs_satisfiable(ct, parse_cribs("XY__", 4), 2)
    assert not cribs_satisfiable(ct, parse_cribs("X_Y_", 4), 2)


def test_one_plaintext_letter_two_ciphertext_letters():
    ct = to_indices("AB")
    assert not cribs_satisfiable(ct, parse_cribs("EE", 2), 1)
    assert cribs_satisfiable(ct, parse_cribs("EE", 2), 2)


def test_no_cribs_always_satisfiable():
    assert cribs_satisfiable(to_indices("ABC"), {}, 3)


def test_constrain_cycleword_recovers_forced_letters():
    q4 = get_variant("quagmire4")
    pt_alpha = make_keyed_alphabet("KRYPTOS")
    ct_alpha = make_keyed_alphabet("PALIMPSEST")
    key = to_indices("ABSCISSA")
    pt = to_indices("BETWEENSUBTLESHADINGANDTHEABSENCEOFLIGHT")
    ct = q4.encrypt(pt, key, pt_alpha, ct_alpha)

    crib_text = "".join(ch if i < 12 else "_" for i, ch in enumerate(to_text(pt)))
    cribs = parse_cribs(crib_text, len(ct))
    assert cribs_satisfiable(ct, cribs, len(key))

    cw = [0] * len(key)
    out = constrain_cycleword(ct, cribs, pt_alpha, ct_alpha, cw)
    assert out is cw
    assert cw == key


def test_constrain_cycleword_variant(english_text):
    q1 = get_variant("quagmire1")
    pt_alpha = make_keyed_alphabet("QUAGMIRE")
    key = to_indices("MOON")
    pt = to_indices(english_text[:40])
    ct = q1.encrypt(pt, key, pt_alpha, None, variant=True)
    cribs = {i: pt[i] for i in range(4)}

    cw = [25, 25, 25, 25]
    assert constrain_cycleword(ct, cribs, pt_alpha, straight_alphabet(), cw, variant=True) == key


def test_constrain_cycleword_contradiction_leaves_cycleword_untouched():
    ct = to_indices("AAAA")
    cribs = parse_cribs("X_Y_", 4)
    cw = [5, 6]
    assert constrain_cycleword(ct, cribs, straight_alphabet(), straight_alphabet(), cw) is None
    assert cw == [5, 6]


def test_constrain_cycleword_leaves_uncovered_columns():
    ct = to_indices("HELLO")
    cribs = {0: 7}  # H under H -> key A in column 0
    cw = [9, 9, 9]
    assert constrain_cycleword(ct, cribs, straight_alphabet(), straight_alphabet(), cw) == [0, 9, 9]
