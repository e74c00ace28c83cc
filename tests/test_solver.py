from __future__ import annotations

import random

import pytest

from polycracker.classical.common import make_keyed_alphabet, perturb_keyword
from polycracker.classical.polyalphabetic import hillclimb
from polycracker.classical.polyalphabetic.hillclimb import shotgun_hill_climb
from polycracker.classical.polyalphabetic.solver import (
    keyword_lengths,
    plan_periods,
    plan_tasks,
    solve,
    solve_batch,
    tableau_rows,
)
from polycracker.core.config import SolverConfig
from polycracker.core.registry import get_variant
from polycracker.core.scoring import Scorer
from polycracker.core.utils import to_indices, to_text


def _encrypt(name, text, key, pt_keyword=None, ct_keyword=None, variant=False):
    cipher = get_variant(name)
    pt = make_keyed_alphabet(pt_keyword) if pt_keyword else None
    ct = make_keyed_alphabet(ct_keyword) if ct_keyword else None
    return to_text(cipher.encrypt(to_indices(text), to_indices(key), pt, ct, variant=variant))


def test_solve_vigenere_optimal(trigram_table, english_text):
    ct = _encrypt("vigenere", english_text, "LEMON")
    cfg = SolverConfig(cipher_type="vigenere", ngram_size=3, seed=1)
    r = solve(ct, trigram_table, cfg)
    assert r.plaintext == english_text
    assert r.period % 5 == 0
    assert r.key == "LEMON" * (r.period // 5)
    assert r.meta["stats"]["iterations"] == 1


def test_solve_beaufort_fixed_period(trigram_table, english_text):
    ct = _encrypt("beaufort", english_text, "WINTER")
    cfg = SolverConfig(cipher_type="beau", ngram_size=3, cycleword_len=6)
    r = solve(ct, trigram_table, cfg)
    assert r.key == "WINTER"
    assert r.plaintext == english_text


def test_solve_quagmire1_with_known_keyword(trigram_table, english_text):
    ct = _encrypt("quagmire1", english_text, "BRIDGE", pt_keyword="LANTERN")
    cfg = SolverConfig(cipher_type="q1", ngram_size=3, plaintext_keyword="LANTERN", cycleword_len=6)
    r = solve(ct, trigram_table, cfg)
    assert r.plaintext == english_text
    assert r.key == "BRIDGE"
    assert r.plaintext_keyword == "LANTER"


def test_solve_autokey_with_known_primer(trigram_table, english_text):
    ct = _encrypt("autokey0", english_text, "QUEEN")
    cfg = SolverConfig(cipher_type="auto", ngram_size=3, cycleword="QUEEN")
    r = solve(ct, trigram_table, cfg)
    assert r.plaintext == english_text
    assert r.period == 5


def test_stochastic_climb_recovers_vigenere_key(trigram_table, english_text):
    ct = to_indices(_encrypt("vigenere", english_text, "LEMON"))
    cfg = SolverConfig(ngram_size=3, optimal_cycleword=False, n_hill_climbs=2000, n_restarts=4)
    climb = shotgun_hill_climb(ct, get_variant("vigenere"), Scorer(trigram_table), cfg, 5, rng=random.Random(7))
    assert to_text(climb.state.cycleword) == "LEMON"
    assert to_text(climb.plaintext) == english_text
    assert climb.stats["iterations"] == 8000


def test_climb_is_reproducible_with_seed(trigram_table, english_text):
    ct = to_indices(_encrypt("quagmire3", english_text[:300], "RAVEN", pt_keyword="ORCHID"))
    cfg = SolverConfig(cipher_type="quagmire3", ngram_size=3, n_hill_climbs=200)
    q3 = get_variant("quagmire3")
    a = shotgun_hill_climb(ct, q3, Scorer(trigram_table), cfg, 5, 6, 6, rng=random.Random(42))
    b = shotgun_hill_climb(ct, q3, Scorer(trigram_table), cfg, 5, 6, 6, rng=random.Random(42))
    assert a.state == b.state
    assert a.state.pt_alphabet == a.state.ct_alphabet
    assert sorted(a.state.pt_alphabet) == list(range(26))


def _counting_perturb_keyword(monkeypatch):
    calls = []

    def counting(rng, state, keyword_len, **kwargs):
        calls.append(keyword_len)
        return perturb_keyword(rng, state, keyword_len, **kwargs)

    monkeypatch.setattr(hillclimb, "perturb_keyword", counting)
    return calls


@pytest.mark.parametrize("contradict, expected_keyword_steps", [(True, 40), (False, 1)])
def test_crib_contradiction_forces_keyword_step(monkeypatch, trigram_table, english_text, contradict,
                                                expected_keyword_steps):
    text = english_text[:200]
    ct = to_indices(_encrypt("quagmire2", text, "KEY", ct_keyword="SHADOWS"))
    cribs = {i: to_indices(text)[i] for i in range(20)}

    def constrain(ciphertext, cribs, pt_alphabet, ct_alphabet, cycleword, variant=False):
        return None if contradict else cycleword

    monkeypatch.setattr(hillclimb, "constrain_cycleword", constrain)
    calls = _counting_perturb_keyword(monkeypatch)

    # keyword moves only when forced: the first step of a restart, or after a contradiction
    cfg = SolverConfig(
        cipher_type="q2", ngram_size=3, optimal_cycleword=False, n_hill_climbs=40, keyword_permutation_probability=0.0
    )
    climb = shotgun_hill_climb(
        ct, get_variant("q2"), Scorer(trigram_table, cribs=cribs), cfg, 3, 1, 6, cribs=cribs, rng=random.Random(3)
    )
    assert len(calls) == expected_keyword_steps
    assert climb.stats["contradictions"] == (40 if contradict else 0)
    assert climb.state.pt_alphabet == list(range(26))
    assert sorted(climb.state.ct_alphabet) == list(range(26))


@pytest.mark.parametrize("optimal", [True, False])
def test_fixed_plaintext_keyword_is_never_perturbed(trigram_table, english_text, optimal):
    ct = to_indices(_encrypt("quagmire4", english_text[:300], "RAVEN", pt_keyword="KRYPTOS", ct_keyword="HARBOUR"))
    cfg = SolverConfig(
        cipher_type="q4", ngram_size=3, plaintext_keyword="KRYPTOS", optimal_cycleword=optimal,
        n_hill_climbs=300, n_restarts=3,
    )
    climb = shotgun_hill_climb(ct, get_variant("q4"), Scorer(trigram_table), cfg, 5, 7, 6, rng=random.Random(5))
    assert climb.state.pt_alphabet == make_keyed_alphabet("KRYPTOS")
    assert sorted(climb.state.ct_alphabet) == list(range(26))


def test_climb_recovers_unknown_keyed_alphabet(trigram_table, english_text):
    ct = to_indices(_encrypt("quagmire1", english_text, "BRIDGE", pt_keyword="LANTERN"))
    cfg = SolverConfig(cipher_type="q1", ngram_size=3, n_hill_climbs=3000, n_restarts=5)
    climb = shotgun_hill_climb(ct, get_variant("q1"), Scorer(trigram_table), cfg, 6, 6, 1, rng=random.Random(1))
    assert to_text(climb.plaintext) == english_text
    assert sorted(climb.state.pt_alphabet) == list(range(26))


def test_same_key_ties_alphabets_and_cycleword(trigram_table, english_text):
    ct = to_indices(english_text[:200])
    cfg = SolverConfig(cipher_type="q4", ngram_size=3, same_key=True, n_hill_climbs=50, seed=1)
    climb = shotgun_hill_climb(ct, get_variant("q4"), Scorer(trigram_table), cfg, 4, 5, 5, rng=random.Random(1))
    assert climb.state.ct_alphabet == climb.state.pt_alphabet
    assert climb.state.cycleword == climb.state.pt_alphabet[:4]


def test_fixed_cycleword_must_match_period(trigram_table):
    cfg = SolverConfig(ngram_size=3, cycleword="ABC")
    with pytest.raises(ValueError):
        shotgun_hill_climb(to_indices("HELLOWORLD"), get_variant("vig"), Scorer(trigram_table), cfg, 4)


def test_keyword_length_plan():
    assert keyword_lengths(SolverConfig(cipher_type="vigenere")) == [(1, 1)]
    assert keyword_lengths(SolverConfig(cipher_type="q1", min_keyword_len=5, max_keyword_len=6)) == [(5, 1), (6, 1)]
    assert keyword_lengths(SolverConfig(cipher_type="q2", min_keyword_len=5, max_keyword_len=6)) == [(1, 5), (1, 6)]
    assert keyword_lengths(SolverConfig(cipher_type="q3", min_keyword_len=5, max_keyword_len=6)) == [(5, 5), (6, 6)]
    assert len(keyword_lengths(SolverConfig(cipher_type="q4", min_keyword_len=5, max_keyword_len=6))) == 4
    fixed = SolverConfig(cipher_type="q4", plaintext_keyword="KRYPTOS", ciphertext_keyword_len=4)
    assert keyword_lengths(fixed) == [(7, 4)]


@pytest.mark.parametrize("cipher_type", ["q3", "auto3"])
def test_shared_keyword_length_from_ciphertext_side(cipher_type):
    assert keyword_lengths(SolverConfig(cipher_type=cipher_type, ciphertext_keyword_len=7)) == [(7, 7)]
    both = SolverConfig(cipher_type=cipher_type, plaintext_keyword_len=7, ciphertext_keyword_len=7)
    assert keyword_lengths(both) == [(7, 7)]


def test_shared_keyword_lengths_must_agree():
    cfg = SolverConfig(cipher_type="q3", plaintext_keyword_len=6, ciphertext_keyword_len=8)
    with pytest.raises(ValueError):
        keyword_lengths(cfg)
    with pytest.raises(ValueError):
        plan_tasks([5], cfg)


def test_plan_periods_and_tasks(english_text):
    ct = to_indices(_encrypt("vigenere", english_text, "LEMON"))
    cfg = SolverConfig(cipher_type="q1", min_keyword_len=5, max_keyword_len=6)
    periods = plan_periods(ct, cfg)
    assert 5 in periods
    tasks = plan_tasks(periods, cfg)
    assert len(tasks) == 2 * len(periods)

    auto = SolverConfig(cipher_type="auto", max_cycleword_len=8)
    assert plan_periods(ct, auto) == list(range(1, 9))


def test_crib_prefilter_drops_contradictory_periods():
    ct = to_indices("AAAAAAAAAAAAAAAAAAAB")
    cribs = {0: 23, 2: 24}  # X and Y both under A at even positions
    cfg = SolverConfig(cycleword_len=None, max_cycleword_len=4, z_threshold=-10, ioc_threshold=0)
    periods = plan_periods(ct, cfg, cribs)
    assert 1 not in periods
    assert 2 not in periods
    assert 3 in periods


def test_tableau_rows():
    rows = tableau_rows(list(range(26)), to_indices("CAB"))
    assert rows[0].startswith("CDEF")
    assert rows[1] == "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    assert rows[2].endswith("ZA")


def test_solve_reports_words_and_extras(trigram_table, english_text):
    ct = _encrypt("vigenere", english_text, "LEMON")
    cfg = SolverConfig(ngram_size=3, cycleword_len=5)
    r = solve(ct, trigram_table, cfg, dictionary={"HARBOUR", "MESSENGER", "ZZZZ"})
    assert "HARBOUR" in r.meta["words"]
    assert "MESSENGER" in r.meta["words"]
    assert "ZZZZ" not in r.meta["words"]
    assert len(r.meta["tableau"]) == 5
    assert r.meta["ioc"] > 0.05


def test_solve_rejects_bad_input(trigram_table):
    with pytest.raises(ValueError):
        solve("1234 !!", trigram_table, SolverConfig(ngram_size=3))
    with pytest.raises(ValueError):
        solve("ABCDEF", trigram_table, SolverConfig(ngram_size=4))
    with pytest.raises(ValueError):
        solve("ABCDEF", trigram_table, SolverConfig(ngram_size=3), crib_text="AB")


def test_solve_batch_skips_short_lines(trigram_table, english_text):
    ct = _encrypt("vigenere", english_text, "LEMON")
    cfg = SolverConfig(ngram_size=3, cycleword_len=5)
    out = list(solve_batch(["", "ABC", ct + "\n", "   "], trigram_table, cfg))
    assert len(out) == 1
    line, r = out[0]
    assert line == ct
    assert r.plaintext == english_text


def test_solve_with_worker_pool_matches_inline(trigram_table, english_text):
    ct = _encrypt("vigenere", english_text, "LEMON")
    inline = solve(ct, trigram_table, SolverConfig(ngram_size=3, max_cycleword_len=10))
    pooled = solve(ct, trigram_table, SolverConfig(ngram_size=3, max_cycleword_len=10, workers=2))
    assert pooled.plaintext == inline.plaintext
    assert pooled.period == inline.period
    assert pooled.score == pytest.approx(inline.score)


def test_solve_batch_ignores_crib_on_mismatched_lines(trigram_table, english_text):
    ct = _encrypt("vigenere", english_text, "LEMON")
    crib = english_text[:10] + "_" * (len(english_text) - 10)
    cfg = SolverConfig(ngram_size=3, cycleword_len=5)
    out = list(solve_batch([ct, ct[:150]], trigram_table, cfg, crib_text=crib))
    assert len(out) == 2
    assert out[0][1].meta["n_cribs"] == 10
    assert out[0][1].plaintext == english_text
    assert out[1][1].meta["n_cribs"] == 0
