"""String similarity helpers used for "did you mean" diagnostics"""

from collections.abc import Iterable


def levenshtein(a: str, b: str) -> int:
    """Single-character insert/delete/substitute distance between two strings.

    Case-sensitive. Keeps one row of ``min(len(a), len(b)) + 1`` cells.
    """
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)
    if len(a) > len(b):
        a, b = b, a

    row = list(range(len(a) + 1))
    for j in range(1, len(b) + 1):
        prev_diag = row[0]
        row[0] = j
        for i in range(1, len(a) + 1):
            above = row[i]
            cost = 0 if a[i - 1] == b[j - 1] else 1
            row[i] = min(above + 1, row[i - 1] + 1, prev_diag + cost)
            prev_diag = above
    return row[len(a)]


def suggest(word: str, candidates: Iterable[str], max_distance: int = 2) -> str | None:
    """Return the closest candidate within ``max_distance``, first one on ties"""
    best: str | None = None
    best_distance = max_distance + 1
    for candidate in candidates:
        distance = levenshtein(word, candidate)
        if distance < best_distance:
            best, best_distance = candidate, distance
    return best
