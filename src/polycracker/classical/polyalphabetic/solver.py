from __future__ import annotations

import random
import sys
import time
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from typing import Iterable, Iterator, Mapping, Optional, Sequence

from polycracker.classical.common import KEYED, SHARED, STRAIGHT, alphabet_positions
from polycracker.classical.polyalphabetic.cribs import cribs_satisfiable, parse_cribs
from polycracker.classical.polyalphabetic.hillclimb import ClimbResult, shotgun_hill_climb
from polycracker.core.config import SolverConfig
from polycracker.core.dictionary import find_dictionary_words
from polycracker.core.features import candidate_periods, ioc_scan
from polycracker.core.ngrams import NgramTable
from polycracker.core.registry import get_variant
from polycracker.core.results import SolveResult
from polycracker.core.scoring import Scorer, chi_squared
from polycracker.core.utils import index_of_coincidence, shannon_entropy, to_indices, to_text, unique_letters

MIN_BATCH_LINE = 5


@dataclass(frozen=True)
class SearchTask:
    period: int
    pt_keyword_len: int
    ct_keyword_len: int


# ---------------------------
# Worker context
# ---------------------------

# Set once per worker process by _init_worker; the inline path sets it too.
_CONTEXT: dict = {}


def _init_worker(ciphertext: list[int], table: NgramTable, cribs: dict[int, int], config: SolverConfig) -> None:
    _CONTEXT.clear()
    _CONTEXT.update(
        ciphertext=ciphertext,
        cipher=get_variant(config.cipher_type),
        scorer=Scorer(table, config.weights, cribs, config.crib_scale),
        cribs=cribs,
        config=config,
    )


def _task_rng(config: SolverConfig, task: SearchTask) -> random.Random:
    if config.seed is None:
        return random.Random()
    return random.Random(f"{config.seed}:{task.period}:{task.pt_keyword_len}:{task.ct_keyword_len}")


def _run_task(task: SearchTask) -> ClimbResult:
    config: SolverConfig = _CONTEXT["config"]
    return shotgun_hill_climb(
        _CONTEXT["ciphertext"],
        _CONTEXT["cipher"],
        _CONTEXT["scorer"],
        config,
        task.period,
        task.pt_keyword_len,
        task.ct_keyword_len,
        cribs=_CONTEXT["cribs"],
        rng=_task_rng(config, task),
    )


# ---------------------------
# Search plan
# ---------------------------

def _length_range(config: SolverConfig) -> list[int]:
    return list(range(config.min_keyword_len, config.max_keyword_len + 1))


def keyword_lengths(config: SolverConfig) -> list[tuple[int, int]]:
    """(PT keyword length, CT keyword length) pairs to search for the configured cipher."""
    cipher = get_variant(config.cipher_type)
    pt_role, ct_role = cipher.role_constraints()
    shared = ct_role == SHARED or (config.same_key and ct_role != STRAIGHT)

    if pt_role == STRAIGHT:
        pt_lens = [1]
    elif config.plaintext_keyword:
        pt_lens = [len(unique_letters(config.plaintext_keyword))]
    elif ct_role == SHARED and config.ciphertext_keyword:
        pt_lens = [len(unique_letters(config.ciphertext_keyword))]
    elif shared and config.ciphertext_keyword_len is not None:
        if config.plaintext_keyword_len not in (None, config.ciphertext_keyword_len):
            raise ValueError(
                f"{cipher.label} uses one keyword for both alphabets; plaintext_keyword_len "
                f"({config.plaintext_keyword_len}) and ciphertext_keyword_len "
                f"({config.ciphertext_keyword_len}) differ."
            )
        pt_lens = [config.ciphertext_keyword_len]
    elif config.plaintext_keyword_len is not None:
        pt_lens = [config.plaintext_keyword_len]
    else:
        pt_lens = _length_range(config)

    if shared:
        return [(n, n) for n in pt_lens]

    if ct_role != KEYED:
        ct_lens = [1]
    elif config.ciphertext_keyword:
        ct_lens = [len(unique_letters(config.ciphertext_keyword))]
    elif config.ciphertext_keyword_len is not None:
        ct_lens = [config.ciphertext_keyword_len]
    else:
        ct_lens = _length_range(config)

    return [(p, c) for p in pt_lens for c in ct_lens]


def plan_periods(
    ciphertext: Sequence[int],
    config: SolverConfig,
    cribs: Optional[Mapping[int, int]] = None,
    log=None,
) -> list[int]:
    cipher = get_variant(config.cipher_type)
    fixed = config.cycleword_len
    if config.cycleword:
        fixed = len(to_indices(config.cycleword))

    periods = candidate_periods(
        ciphertext,
        max_len=config.max_cycleword_len,
        z_threshold=config.z_threshold,
        ioc_threshold=config.ioc_threshold,
        fixed=fixed,
        autokey=cipher.autokey,
        fallback_max=config.fallback_max_period,
        log=log,
    )

    if cribs and config.crib_prefilter and not cipher.autokey:
        kept = [p for p in periods if cribs_satisfiable(ciphertext, cribs, p)]
        if not kept:
            if log is not None:
                log("Cribs contradict every candidate period; searching them all anyway.")
            kept = periods
        periods = kept
    return periods


def plan_tasks(periods: Iterable[int], config: SolverConfig) -> list[SearchTask]:
    pairs = keyword_lengths(config)
    return [SearchTask(p, pt, ct) for p in periods for pt, ct in pairs]


# ---------------------------
# Reporting helpers
# ---------------------------

def tableau_rows(ct_alphabet: Sequence[int], cycleword: Sequence[int]) -> list[str]:
    """The CT alphabet rotated to start at each cycleword letter."""
    pos = alphabet_positions(ct_alphabet)
    rows = []
    for k in cycleword:
        s = pos[k]
        rows.append(to_text(list(ct_alphabet[s:]) + list(ct_alphabet[:s])))
    return rows


def _to_result(
    climb: ClimbResult,
    cipher_name: str,
    dictionary: Optional[Iterable[str]],
    extra_meta: dict,
) -> SolveResult:
    state = climb.state
    pt_text = to_text(climb.plaintext)
    meta = dict(extra_meta)
    meta.update(
        stats=dict(climb.stats),
        ioc=index_of_coincidence(climb.plaintext),
        entropy=shannon_entropy(climb.plaintext),
        chi_squared=chi_squared(climb.plaintext),
        tableau=tableau_rows(state.ct_alphabet, state.cycleword),
    )
    if dictionary is not None:
        meta["words"] = [w for _, w in find_dictionary_words(pt_text, dictionary)]

    return SolveResult(
        cipher_name=cipher_name,
        plaintext=pt_text,
        key=to_text(state.cycleword),
        score=state.score,
        plaintext_alphabet=to_text(state.pt_alphabet),
        ciphertext_alphabet=to_text(state.ct_alphabet),
        period=climb.period,
        plaintext_keyword_len=climb.plaintext_keyword_len,
        ciphertext_keyword_len=climb.ciphertext_keyword_len,
        notes=f"Shotgun hill climb period={climb.period}",
        meta=meta,
    )


# ---------------------------
# Entry points
# ---------------------------

def solve(
    ciphertext: str,
    table: NgramTable,
    config: Optional[SolverConfig] = None,
    *,
    crib_text: Optional[str] = None,
    dictionary: Optional[Iterable[str]] = None,
) -> SolveResult:
    """
    Best decryption of ciphertext over every candidate (period, PT keyword
    length, CT keyword length) for the configured cipher type.
    """
    config = config or SolverConfig()
    log_level = config.effective_log_level

    def _log(msg: str, *, level: int = 1) -> None:
        if log_level >= level:
            print(msg, file=sys.stderr)

    ct = to_indices(ciphertext)
    if not ct:
        raise ValueError("Ciphertext contains no A-Z letters.")
    if table.n != config.ngram_size:
        raise ValueError(f"N-gram table has n={table.n} but ngram_size is {config.ngram_size}.")

    cribs = parse_cribs(crib_text, len(ct))
    cipher = get_variant(config.cipher_type)
    start = time.perf_counter()

    if log_level >= 2:
        for k, ioc, z in ioc_scan(ct, config.max_cycleword_len):
            _log(f"  period {k:>2}  IoC {ioc:.4f}  z {z:+.2f}", level=2)

    periods = plan_periods(ct, config, cribs, log=_log)
    tasks = plan_tasks(periods, config)
    _log(f"[{cipher.name}] {len(ct)} letters, {len(cribs)} cribs; periods {periods}; {len(tasks)} searches")

    context = (ct, table, cribs, config)
    if config.workers == 1 or len(tasks) == 1:
        _init_worker(*context)
        climbs = [_run_task(t) for t in tasks]
    else:
        with ProcessPoolExecutor(max_workers=config.workers, initializer=_init_worker, initargs=context) as ex:
            climbs = list(ex.map(_run_task, tasks))

    best: Optional[ClimbResult] = None
    for task, climb in zip(tasks, climbs):
        _log(
            f"[{cipher.name}] period={task.period} pt={task.pt_keyword_len} ct={task.ct_keyword_len} "
            f"score={climb.score:.3f} key={to_text(climb.state.cycleword)}",
            level=2,
        )
        if best is None or climb.score > best.score:
            best = climb

    extra = {
        "periods": periods,
        "n_searches": len(tasks),
        "n_cribs": len(cribs),
        "elapsed": time.perf_counter() - start,
    }
    return _to_result(best, cipher.name, dictionary, extra)


def solve_batch(
    lines: Iterable[str],
    table: NgramTable,
    config: Optional[SolverConfig] = None,
    *,
    crib_text: Optional[str] = None,
    dictionary: Optional[Iterable[str]] = None,
) -> Iterator[tuple[str, SolveResult]]:
    """
    Solve one ciphertext per line; lines shorter than 5 characters are skipped.
    The crib applies only to lines with as many letters as the crib; other
    lines are solved without it.
    """
    config = config or SolverConfig()
    log_level = config.effective_log_level

    def _log(msg: str, *, level: int = 1) -> None:
        if log_level >= level:
            print(msg, file=sys.stderr)

    crib_len = len("".join(crib_text.split())) if crib_text else 0

    for lineno, raw in enumerate(lines, start=1):
        line = raw.strip()
        if len(line) < MIN_BATCH_LINE:
            continue
        line_crib = crib_text
        n_letters = len(to_indices(line))
        if crib_len and n_letters != crib_len:
            _log(f"line {lineno}: crib has {crib_len} characters, line has {n_letters} letters; ignoring crib")
            line_crib = None
        yield line, solve(line, table, config, crib_text=line_crib, dictionary=dictionary)
