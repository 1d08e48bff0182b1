"""
Character- and keyword-level similarity measures.

All scores are percentages in the range [0, 100]. Functions here are pure
and safe to call from any number of threads at once.
"""

from typing import Sequence

# Keyword score when neither label yields any keywords. "No information"
# is not rewarded.
EMPTY_KEYWORD_SCORE = 0.0


def levenshtein_distance(a: str, b: str) -> int:
    """Classic edit distance (insert, delete, substitute all cost 1)."""
    # grid[i][j]: distance between b[:i] and a[:j]
    grid = [[0] * (len(a) + 1) for _ in range(len(b) + 1)]
    for i in range(len(b) + 1):
        grid[i][0] = i
    for j in range(len(a) + 1):
        grid[0][j] = j

    for i in range(1, len(b) + 1):
        for j in range(1, len(a) + 1):
            cost = 0 if b[i - 1] == a[j - 1] else 1
            grid[i][j] = min(
                grid[i - 1][j - 1] + cost,
                grid[i][j - 1] + 1,
                grid[i - 1][j] + 1,
            )
    return grid[len(b)][len(a)]


def edit_similarity(a: str, b: str) -> float:
    max_length = max(len(a), len(b))
    if max_length == 0:
        return 100.0
    distance = levenshtein_distance(a, b)
    return (max_length - distance) / max_length * 100


def length_similarity_bound(a: str, b: str) -> float:
    """Upper bound on edit_similarity(a, b) from the lengths alone."""
    max_length = max(len(a), len(b))
    if max_length == 0:
        return 100.0
    return min(len(a), len(b)) / max_length * 100


def keyword_score(
    target: Sequence[str],
    candidate: Sequence[str],
    cutoff: float = 80.0,
) -> float:
    """Share of target keywords with a near-identical candidate keyword.

    A target keyword counts once, on the first candidate keyword whose
    similarity is strictly above ``cutoff``. The denominator is the larger
    of the two keyword counts.
    """
    total = max(len(target), len(candidate))
    if total == 0:
        return EMPTY_KEYWORD_SCORE

    matches = 0
    for word in target:
        for other in candidate:
            if length_similarity_bound(word, other) <= cutoff:
                continue
            if edit_similarity(word, other) > cutoff:
                matches += 1
                break
    return matches / total * 100
