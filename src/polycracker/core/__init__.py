from .results import SolveResult, TextFeatures
from .config import ScoringWeights, SolverConfig
from .ngrams import NgramTable
from .scoring import Scorer
from .features import analyze_text, estimate_periods
from .registry import register_variant, get_variant, list_variants, decrypt_known, encrypt_known

__all__ = [
    "SolveResult",
    "TextFeatures",
    "ScoringWeights",
    "SolverConfig",
    "NgramTable",
    "Scorer",
    "analyze_text",
    "estimate_periods",
    "register_variant",
    "get_variant",
    "list_variants",
    "decrypt_known",
    "encrypt_known",
]
