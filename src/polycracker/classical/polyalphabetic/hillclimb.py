from __future__ import annotations

import random
import sys
import time
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence

from polycracker.classical.common import (
    KEYED,
    SHARED,
    STRAIGHT,
    make_keyed_alphabet,
    perturb_cycleword,
    perturb_keyword,
    random_cycleword,
    random_keyword,
    straight_alphabet,
)
from polycracker.classical.polyalphabetic.cribs import constrain_cycleword
from polycracker.classical.polyalphabetic.cycleword import derive_cycleword_with
from polycracker.classical.polyalphabetic.tableau import CipherVariant
from polycracker.core.config import SolverConfig
from polycracker.core.scoring import ENGLISH_MONOGRAMS, Scorer
from polycracker.core.utils import ALPHABET_SIZE, to_indices, to_text

# ============================================================
# Shotgun hill climbing over (PT alphabet, CT alphabet, cycleword)
#
# Each restart either backtracks to the best state so far or starts
# from a fresh random state. Each step perturbs a copy of the current
# state (keyword letters, or one cycleword letter, or a keyword
# followed by re-deriving the optimal cycleword), keeps it if it
# scores higher, and occasionally "slips" to a worse state.
# ============================================================


@dataclass
class SearchState:
    pt_alphabet: list[int]
    ct_alphabet: list[int]
    cycleword: list[int]
    score: float = float("-inf")

    def copy(self) -> "SearchState":
        return SearchState(self.pt_alphabet[:], self.ct_alphabet[:], self.cycleword[:], self.score)


@dataclass
class ClimbResult:
    state: SearchState
    plaintext: list[int]
    period: int
    plaintext_keyword_len: int
    ciphertext_keyword_len: int
    stats: dict[str, float] = field(default_factory=dict)

    @property
    def score(self) -> float:
        return self.state.score


@dataclass(frozen=True)
class _Slots:
    """What the optimizer may change, after roles and user-fixed key material."""

    pt_fixed: Optional[list[int]]
    ct_fixed: Optional[list[int]]
    cycleword_fixed: Optional[list[int]]
    pt_free: bool
    ct_free: bool

    @property
    def keyword_free(self) -> bool:
        return self.pt_free or self.ct_free


def _fixed_slots(cipher: CipherVariant, config: SolverConfig, period: int) -> _Slots:
    pt_role, ct_role = cipher.role_constraints()

    pt_fixed = None
    ct_fixed = None
    if pt_role != STRAIGHT:
        if config.plaintext_keyword:
            pt_fixed = make_keyed_alphabet(config.plaintext_keyword)
        elif ct_role == SHARED and config.ciphertext_keyword:
            pt_fixed = make_keyed_alphabet(config.ciphertext_keyword)
    if ct_role == KEYED and config.ciphertext_keyword:
        ct_fixed = make_keyed_alphabet(config.ciphertext_keyword)

    cycleword_fixed = None
    if config.cycleword:
        cycleword_fixed = to_indices(config.cycleword)
        if len(cycleword_fixed) != period:
            raise ValueError(f"Fixed cycleword has length {len(cycleword_fixed)}, search period is {period}.")

    return _Slots(
        pt_fixed=pt_fixed,
        ct_fixed=ct_fixed,
        cycleword_fixed=cycleword_fixed,
        pt_free=pt_role != STRAIGHT and pt_fixed is None,
        ct_free=ct_role == KEYED and ct_fixed is None and not config.same_key,
    )


def shotgun_hill_climb(
    ciphertext: Sequence[int],
    cipher: CipherVariant,
    scorer: Scorer,
    config: SolverConfig,
    period: int,
    pt_keyword_len: int = 1,
    ct_keyword_len: int = 1,
    cribs: Optional[Mapping[int, int]] = None,
    rng: Optional[random.Random] = None,
) -> ClimbResult:
    """
    Search (PT alphabet, CT alphabet, cycleword) for one period and one pair
    of keyword lengths. Returns the best state seen with its decryption and
    climb statistics.
    """
    rng = rng or random.Random(config.seed)
    cribs = dict(cribs or {})
    log_level = config.effective_log_level
    variant = config.variant
    weights = ENGLISH_MONOGRAMS if config.frequency_weighted else None

    def _log(msg: str, *, level: int = 1) -> None:
        if log_level >= level:
            print(msg, file=sys.stderr)

    if period < 1:
        raise ValueError(f"Period must be >= 1, got {period}.")
    if config.same_key and period > ALPHABET_SIZE:
        raise ValueError(f"same_key ties the cycleword to the PT alphabet; period {period} is longer than 26.")

    slots = _fixed_slots(cipher, config, period)
    pt_role, ct_role = cipher.role_constraints()
    derive = config.optimal_cycleword and not cipher.autokey and slots.cycleword_fixed is None
    cycleword_free = slots.cycleword_fixed is None and not derive and not config.same_key
    check_cribs = bool(cribs) and not cipher.autokey and cipher.uses_keywords

    tag = f"[{cipher.name} p={period} pt={pt_keyword_len} ct={ct_keyword_len}]"

    def decrypt(state: SearchState) -> list[int]:
        tab = cipher.tableau(state.pt_alphabet, state.ct_alphabet, variant)
        return cipher.decrypt_with(tab, ciphertext, state.cycleword)

    def evaluate(state: SearchState) -> float:
        state.score = scorer.score(decrypt(state))
        return state.score

    def tie_keys(state: SearchState) -> None:
        if ct_role == SHARED:
            state.ct_alphabet = state.pt_alphabet[:]
        if config.same_key:
            state.ct_alphabet = state.pt_alphabet[:]
            state.cycleword = state.pt_alphabet[:period]

    def derive_cycleword(state: SearchState) -> None:
        tab = cipher.tableau(state.pt_alphabet, state.ct_alphabet, variant)
        state.cycleword = derive_cycleword_with(tab, ciphertext, cipher, period)

    def fresh_state() -> SearchState:
        if slots.pt_fixed is not None:
            pt = slots.pt_fixed[:]
        elif pt_role != STRAIGHT:
            pt = random_keyword(rng, pt_keyword_len)
        else:
            pt = straight_alphabet()

        if slots.ct_fixed is not None:
            ct = slots.ct_fixed[:]
        elif ct_role == KEYED:
            ct = random_keyword(rng, ct_keyword_len)
        else:
            ct = straight_alphabet()

        if slots.cycleword_fixed is not None:
            cw = slots.cycleword_fixed[:]
        else:
            cw = random_cycleword(rng, period)

        state = SearchState(pt, ct, cw)
        tie_keys(state)
        if derive and not config.same_key:
            derive_cycleword(state)
        return state

    def perturb_keywords(state: SearchState) -> bool:
        if slots.pt_free and slots.ct_free:
            if rng.random() < 0.5:
                perturb_keyword(rng, state.pt_alphabet, pt_keyword_len, weights=weights)
            else:
                perturb_keyword(rng, state.ct_alphabet, ct_keyword_len, weights=weights)
        elif slots.pt_free:
            perturb_keyword(rng, state.pt_alphabet, pt_keyword_len, weights=weights)
        elif slots.ct_free:
            perturb_keyword(rng, state.ct_alphabet, ct_keyword_len, weights=weights)
        else:
            return False
        tie_keys(state)
        return True

    start = time.perf_counter()
    stats = {"iterations": 0, "backtracks": 0, "slips": 0, "contradictions": 0, "restarts": 0}

    if not slots.keyword_free and not cycleword_free:
        # nothing to search: the state is fully determined
        best = fresh_state()
        evaluate(best)
        stats["iterations"] = 1
        stats["elapsed"] = time.perf_counter() - start
        _log(f"{tag} deterministic state, score {best.score:.3f}", level=2)
        return ClimbResult(best, decrypt(best), period, pt_keyword_len, ct_keyword_len, stats)

    best = None

    for restart in range(config.n_restarts):
        stats["restarts"] += 1
        if best is not None and rng.random() < config.backtrack_probability:
            stats["backtracks"] += 1
            current = best.copy()
        else:
            current = fresh_state()
            evaluate(current)

        force_keyword = True

        for step in range(config.n_hill_climbs):
            stats["iterations"] += 1
            local = current.copy()

            did_keyword = False
            if force_keyword or cipher.autokey or rng.random() < config.keyword_permutation_probability:
                did_keyword = perturb_keywords(local)

            if derive:
                if not did_keyword:
                    did_keyword = perturb_keywords(local)
                if not config.same_key:
                    derive_cycleword(local)
            else:
                if cycleword_free and (cipher.autokey or not slots.keyword_free or not did_keyword):
                    perturb_cycleword(rng, local.cycleword)

                force_keyword = False
                if check_cribs:
                    if did_keyword and cycleword_free:
                        forced = constrain_cycleword(
                            ciphertext, cribs, local.pt_alphabet, local.ct_alphabet, local.cycleword, variant
                        )
                        if forced is None:
                            stats["contradictions"] += 1
                            force_keyword = True

            evaluate(local)

            if local.score > current.score:
                current = local
            elif rng.random() < config.slip_probability:
                stats["slips"] += 1
                current = local

            if best is None or current.score > best.score:
                best = current.copy()
                _log(
                    f"{tag} best {best.score:.3f} (restart {restart}, step {step}) "
                    f"key={to_text(best.cycleword)} pt={to_text(decrypt(best))[:40]}",
                    level=1,
                )

        _log(f"{tag} restart {restart} done; best={best.score:.3f}", level=2)

    stats["elapsed"] = time.perf_counter() - start
    return ClimbResult(best, decrypt(best), period, pt_keyword_len, ct_keyword_len, stats)
