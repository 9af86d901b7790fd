"""
Fuzzy Search Engine
-------------------
Ranks arbitrary items against a query using the match scorer.

Each item exposes an ordered list of searchable fields through a field
extractor. The first field is the primary display field. The best-scoring
field wins; the primary field wins ties because it is scored first.

Ordering of equal scores: stable by input order.
"""

from dataclasses import dataclass, field
from typing import Callable, Generic, List, Optional, Sequence, TypeVar

from .scorer import score

T = TypeVar("T")

FieldExtractor = Callable[[T], Sequence[str]]


@dataclass
class FuzzyMatch(Generic[T]):
    """One ranked item with the offsets that satisfied the query."""
    item: T
    score: int
    matches: List[int] = field(default_factory=list)
    field_index: int = 0  # Which extracted field the offsets refer to


def fuzzy_search(
    query: str,
    items: Sequence[T],
    field_extractor: FieldExtractor,
    limit: Optional[int] = None,
) -> List[FuzzyMatch[T]]:
    """
    Rank `items` against `query`.

    A blank query returns every item unranked (score 0, input order).
    Otherwise items without a positive score are dropped and the rest
    are sorted by descending score.
    """
    if not query.strip():
        listing = [FuzzyMatch(item=item, score=0) for item in items]
        return listing[:limit] if limit is not None else listing

    results: List[FuzzyMatch[T]] = []

    for item in items:
        best: Optional[FuzzyMatch[T]] = None

        for index, value in enumerate(field_extractor(item)):
            field_score, matches = score(query, value)
            if best is None or field_score > best.score:
                best = FuzzyMatch(
                    item=item,
                    score=field_score,
                    matches=matches,
                    field_index=index,
                )

        if best is not None and best.score > 0:
            results.append(best)

    # sorted() is stable, so equal scores keep input order
    results = sorted(results, key=lambda match: match.score, reverse=True)

    if limit is not None:
        results = results[:limit]

    return results
