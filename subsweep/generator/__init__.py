"""Candidate generation: pattern expansion and the two enumeration strategies."""

from subsweep.generator.builders import (
    BruteForceStrategy,
    CandidateGenerator,
    DictionaryStrategy,
    build_strategy,
)
from subsweep.generator.pattern import expand_line, iter_dictionary, tokenize_line

__all__ = [
    "BruteForceStrategy",
    "CandidateGenerator",
    "DictionaryStrategy",
    "build_strategy",
    "expand_line",
    "iter_dictionary",
    "tokenize_line",
]
