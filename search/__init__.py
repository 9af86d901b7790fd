# Search module - Fuzzy subsequence scoring and ranking
# Pure functions only: no registry state, no host I/O

from .scorer import score
from .engine import fuzzy_search, FuzzyMatch, FieldExtractor

__all__ = ["score", "fuzzy_search", "FuzzyMatch", "FieldExtractor"]
