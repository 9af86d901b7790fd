"""
Match Scorer
------------
Scores one query against one candidate string.

Matching is a case-insensitive subsequence match. Every query character
must appear, in order, somewhere in the candidate. Offsets are reported
against the original (un-folded) candidate so callers can highlight them.

Pure function: no state, no I/O, safe to call from any thread.
"""

from typing import List, Tuple


# Per-character scoring
BASE_SCORE = 10
CONSECUTIVE_BONUS = 5
WORD_BOUNDARY_BONUS = 15
UPPERCASE_BONUS = 10
GAP_PENALTY = 2

# Holistic bonuses applied once the whole query is consumed
SHORT_CANDIDATE_LENGTH = 50
EXACT_MATCH_BONUS = 100
PREFIX_MATCH_BONUS = 50

WORD_SEPARATORS = frozenset(" -_")


def _fold(text: str) -> List[str]:
    # One folded entry per original character keeps offsets aligned
    return [char.lower() for char in text]


def score(query: str, candidate: str) -> Tuple[int, List[int]]:
    """
    Score `query` against `candidate`.

    Returns (score, matches). A query that is not a subsequence of the
    candidate yields (0, []).
    """
    query_chars = _fold(query)
    folded = _fold(candidate)

    total = 0
    matches: List[int] = []
    query_index = 0
    last_match = -1

    for i, char in enumerate(folded):
        if query_index >= len(query_chars):
            break
        if char != query_chars[query_index]:
            continue

        matches.append(i)
        total += BASE_SCORE

        if last_match != -1 and i == last_match + 1:
            total += CONSECUTIVE_BONUS

        if i == 0 or candidate[i - 1] in WORD_SEPARATORS:
            total += WORD_BOUNDARY_BONUS

        # Uppercase "hump" letters
        if candidate[i] != char:
            total += UPPERCASE_BONUS

        if last_match != -1:
            total -= GAP_PENALTY * (i - last_match - 1)

        last_match = i
        query_index += 1

    if query_index < len(query_chars):
        return 0, []

    total += max(0, SHORT_CANDIDATE_LENGTH - len(candidate))

    folded_query = "".join(query_chars)
    folded_candidate = "".join(folded)

    if folded_candidate == folded_query:
        total += EXACT_MATCH_BONUS

    if folded_candidate.startswith(folded_query):
        total += PREFIX_MATCH_BONUS

    return total, matches

