from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

from polycracker.classical import register_all
from polycracker.core.config import ScoringWeights, SolverConfig
from polycracker.core.registry import (
    decrypt_known,
    encrypt_known,
    get_variant,
    list_variants,
    variant_aliases,
)
from polycracker.core.results import SolveResult
from polycracker.core.utils import chunked

app = typer.Typer(help="polycracker: periodic / autokey polyalphabetic cipher solver.")


@app.callback()
def _init():
    # Register cipher variants exactly once per CLI run
    register_all()


@app.command()
def variants():
    """List the supported cipher types with their aliases and alphabet roles."""
    for name in list_variants():
        v = get_variant(name)
        pt_role, ct_role = v.role_constraints()
        aliases = ", ".join(variant_aliases(name))
        typer.echo(f"{v.code:>2}  {name:<17} pt={pt_role:<8} ct={ct_role:<8} {aliases}")


@app.command()
def periods(
    text: str = typer.Argument(..., help="Ciphertext."),
    max_period: int = typer.Option(20, "--max-period", "-m", help="Largest period to scan."),
    z_threshold: float = typer.Option(1.0, "--z", help="Z-score a period must reach."),
    ioc_threshold: float = typer.Option(0.047, "--ioc-threshold", help="Mean column IoC a period must reach."),
):
    """Mean column IoC and z-score per period, plus the periods the estimator would pick."""
    from polycracker.core.features import analyze_text, estimate_periods, ioc_scan
    from polycracker.core.utils import to_indices

    info = analyze_text(text, max_len=max_period)
    for k in ("length", "unique_letters", "ioc", "entropy", "chi_squared"):
        typer.echo(f"{k}: {info[k]}")

    indices = to_indices(text)
    if len(indices) < 2:
        raise typer.BadParameter("Need at least two letters to scan periods.")

    typer.echo("\nperiod  mean_ioc  z")
    for k, ioc, z in ioc_scan(indices, max_period):
        typer.echo(f"  {k:>4}  {ioc:.5f}  {z:+.2f}")

    picked = estimate_periods(indices, max_period, z_threshold, ioc_threshold)
    typer.echo(f"\nlikely periods: {', '.join(map(str, picked)) if picked else '(none)'}")


@app.command()
def decrypt(
    cipher: str = typer.Option("vigenere", "--cipher", "-c", help="Cipher type, alias or code (e.g. vig, q3, 7)."),
    key: Optional[str] = typer.Option(None, "--key", "-k", help="Cycleword, or primer for Autokey."),
    pt_keyword: Optional[str] = typer.Option(None, "--pt-keyword", help="Plaintext alphabet keyword."),
    ct_keyword: Optional[str] = typer.Option(None, "--ct-keyword", help="Ciphertext alphabet keyword."),
    variant: bool = typer.Option(False, "--variant", help="Use the variant (sign-flipped) tableau."),
    text: str = typer.Argument(..., help="Ciphertext to decrypt."),
):
    """Decrypt when you already know the cipher type and all key material."""
    try:
        pt = decrypt_known(cipher, text, key, pt_keyword=pt_keyword, ct_keyword=ct_keyword, variant=variant)
    except ValueError as e:
        raise typer.BadParameter(str(e))
    typer.echo(pt)


@app.command()
def encrypt(
    cipher: str = typer.Option("vigenere", "--cipher", "-c", help="Cipher type, alias or code."),
    key: Optional[str] = typer.Option(None, "--key", "-k", help="Cycleword, or primer for Autokey."),
    pt_keyword: Optional[str] = typer.Option(None, "--pt-keyword", help="Plaintext alphabet keyword."),
    ct_keyword: Optional[str] = typer.Option(None, "--ct-keyword", help="Ciphertext alphabet keyword."),
    variant: bool = typer.Option(False, "--variant", help="Use the variant (sign-flipped) tableau."),
    group: int = typer.Option(0, "--group", "-g", help="If >0, print the ciphertext in groups of this size."),
    text: str = typer.Argument(..., help="Plaintext to encrypt."),
):
    """Encrypt plaintext (A-Z only is kept) with known key material."""
    try:
        ct = encrypt_known(cipher, text, key, pt_keyword=pt_keyword, ct_keyword=ct_keyword, variant=variant)
    except ValueError as e:
        raise typer.BadParameter(str(e))
    if group > 0:
        ct = " ".join("".join(g) for g in chunked(ct, group))
    typer.echo(ct)


def _print_result(r: SolveResult, *, verbose: bool, as_json: bool) -> None:
    if as_json:
        typer.echo(json.dumps(r.to_dict(), indent=2))
        return

    typer.echo(f"cipher={r.cipher_name}  score={r.score:.3f}  period={r.period}  key={r.key}")
    if r.plaintext_keyword_len > 1 or r.ciphertext_keyword_len > 1:
        typer.echo(f"    pt alphabet: {r.plaintext_alphabet}  (keyword {r.plaintext_keyword})")
        typer.echo(f"    ct alphabet: {r.ciphertext_alphabet}  (keyword {r.ciphertext_keyword})")
    typer.echo(r.plaintext)

    if verbose:
        m = r.meta
        typer.echo(f"    ioc={m['ioc']:.4f}  entropy={m['entropy']:.3f}  chi2={m['chi_squared']:.4f}")
        typer.echo(f"    periods tried: {m['periods']}  searches: {m['n_searches']}  elapsed: {m['elapsed']:.1f}s")
        typer.echo(f"    stats: {m['stats']}")
        typer.echo("    tableau:")
        for row in m["tableau"]:
            typer.echo(f"      {row}")
    if r.meta.get("words"):
        typer.echo(f"    words: {' '.join(r.meta['words'])}")
    typer.echo("-" * 60)


@app.command()
def solve(
    text: Optional[str] = typer.Argument(None, help="Ciphertext (omit when using --batch)."),
    ngrams: Path = typer.Option(..., "--ngrams", "-n", help="N-gram count file: 'GRAM count' per line."),
    cipher: str = typer.Option("vigenere", "--cipher", "-c", help="Cipher type, alias or code."),
    ngram_size: int = typer.Option(4, "--ngram-size", help="N-gram length in the count file."),
    crib: Optional[str] = typer.Option(None, "--crib", help="Known plaintext aligned to the ciphertext, '_' unknown."),
    batch: Optional[Path] = typer.Option(None, "--batch", "-b", help="File with one ciphertext per line."),
    dictionary: Optional[Path] = typer.Option(None, "--dict", help="Word list used to report words found."),
    pt_keyword: Optional[str] = typer.Option(None, "--pt-keyword", help="Fix the plaintext alphabet keyword."),
    ct_keyword: Optional[str] = typer.Option(None, "--ct-keyword", help="Fix the ciphertext alphabet keyword."),
    cycleword: Optional[str] = typer.Option(None, "--cycleword", help="Fix the cycleword / primer."),
    pt_len: Optional[int] = typer.Option(None, "--pt-len", help="Fix the plaintext keyword length."),
    ct_len: Optional[int] = typer.Option(None, "--ct-len", help="Fix the ciphertext keyword length."),
    period: Optional[int] = typer.Option(None, "--period", "-p", help="Fix the cycleword / primer length."),
    min_kw: int = typer.Option(5, "--min-kw", help="Shortest keyword length searched."),
    max_kw: int = typer.Option(11, "--max-kw", help="Longest keyword length searched."),
    max_period: int = typer.Option(20, "--max-period", help="Longest cycleword considered."),
    hill_climbs: int = typer.Option(1000, "--hill-climbs", help="Steps per restart."),
    restarts: int = typer.Option(1, "--restarts", "-r", help="Restarts per search."),
    backtrack: float = typer.Option(0.15, "--backtrack", help="Chance a restart resumes from the best state."),
    keyword_perm: float = typer.Option(0.95, "--keyword-perm", help="Chance a step perturbs a keyword."),
    slip: float = typer.Option(0.01, "--slip", help="Chance of accepting a worse state."),
    z_threshold: float = typer.Option(1.0, "--z", help="Period estimator z-score threshold."),
    ioc_threshold: float = typer.Option(0.047, "--ioc-threshold", help="Period estimator IoC threshold."),
    weight_ngram: float = typer.Option(12.0, "--weight-ngram"),
    weight_crib: float = typer.Option(36.0, "--weight-crib"),
    weight_ioc: float = typer.Option(0.0, "--weight-ioc"),
    weight_entropy: float = typer.Option(0.0, "--weight-entropy"),
    variant: bool = typer.Option(False, "--variant", help="Variant (sign-flipped) tableau."),
    same_key: bool = typer.Option(False, "--same-key", help="Tie CT alphabet and cycleword to the PT keyword."),
    stochastic: bool = typer.Option(False, "--stochastic", help="Perturb the cycleword instead of deriving it."),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed for reproducible runs."),
    workers: int = typer.Option(1, "--workers", "-w", help="Worker processes."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Progress on stderr and a fuller report."),
    log_level: int = typer.Option(1, "--log-level", help="Verbosity when -v is set (1 progress, 2 detail)."),
    as_json: bool = typer.Option(False, "--json", help="Print results as JSON."),
):
    """Recover plaintext and key material from ciphertext."""
    from polycracker.classical.polyalphabetic.solver import solve as run_solve, solve_batch
    from polycracker.core.dictionary import load_dictionary
    from polycracker.core.ngrams import NgramTable

    if (text is None) == (batch is None):
        raise typer.BadParameter("Give either a ciphertext argument or --batch FILE.")

    try:
        config = SolverConfig(
            cipher_type=cipher,
            ngram_size=ngram_size,
            n_hill_climbs=hill_climbs,
            n_restarts=restarts,
            min_keyword_len=min_kw,
            max_keyword_len=max_kw,
            plaintext_keyword_len=pt_len,
            ciphertext_keyword_len=ct_len,
            plaintext_keyword=pt_keyword,
            ciphertext_keyword=ct_keyword,
            cycleword_len=period,
            max_cycleword_len=max_period,
            cycleword=cycleword,
            z_threshold=z_threshold,
            ioc_threshold=ioc_threshold,
            backtrack_probability=backtrack,
            keyword_permutation_probability=keyword_perm,
            slip_probability=slip,
            weights=ScoringWeights(weight_ngram, weight_crib, weight_ioc, weight_entropy),
            variant=variant,
            same_key=same_key,
            optimal_cycleword=not stochastic,
            seed=seed,
            workers=workers,
            verbose=verbose,
            log_level=log_level,
        )
        table = NgramTable.from_file(ngrams, ngram_size)
        words = load_dictionary(dictionary) if dictionary else None

        if batch is not None:
            if not batch.is_file():
                raise ValueError(f"Batch file not found: {batch}")
            with batch.open(encoding="utf-8") as fh:
                for i, (line, r) in enumerate(
                    solve_batch(fh, table, config, crib_text=crib, dictionary=words), start=1
                ):
                    typer.echo(f"#{i}  {line}")
                    _print_result(r, verbose=verbose, as_json=as_json)
        else:
            r = run_solve(text, table, config, crib_text=crib, dictionary=words)
            _print_result(r, verbose=verbose, as_json=as_json)
    except ValueError as e:
        raise typer.BadParameter(str(e))


def main():
    app()


if __name__ == "__main__":
    main()
