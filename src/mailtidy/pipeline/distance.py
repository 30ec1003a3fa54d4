"""Edit distance and nearest-domain search.

Uses unit-cost Levenshtein distance (insert, delete, substitute) with two
rolling rows sized to the shorter string, since this runs on every
keystroke in interactive use.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from mailtidy.config import default_fuzzy_candidates


@dataclass(frozen=True, slots=True)
class ClosestDomainResult:
    """Result of a nearest-candidate search.

    Attributes:
        input: The domain that was searched for, as given.
        candidate: Best candidate, or None if none is within bounds.
        distance: Edit distance to the nearest candidate. When a bound was
            exceeded this is the bounded value (max_distance + 1).
        normalized_score: Similarity in [0, 1]; 1.0 is an exact match.
        index: Position of the candidate in the list, -1 if none.
    """

    input: str
    candidate: str | None
    distance: int
    normalized_score: float
    index: int


def levenshtein(a: str, b: str, max_distance: int | None = None) -> int:
    """Compute the edit distance between two strings.

    Args:
        a: First string.
        b: Second string.
        max_distance: Optional bound. Once the distance is known to exceed
            it, computation stops and ``max_distance + 1`` is returned.

    Returns:
        Number of single-character edits turning ``a`` into ``b``.
    """
    if a == b:
        return 0

    # Keep the shorter string in the row so memory tracks min(len(a), len(b))
    if len(a) > len(b):
        a, b = b, a

    if max_distance is not None and len(b) - len(a) > max_distance:
        return max_distance + 1
    if not a:
        return len(b)

    previous = list(range(len(a) + 1))
    current = [0] * (len(a) + 1)

    for j, b_char in enumerate(b, start=1):
        current[0] = j
        row_min = j

        for i, a_char in enumerate(a, start=1):
            cost = 0 if a_char == b_char else 1
            value = min(
                previous[i] + 1,  # deletion
                current[i - 1] + 1,  # insertion
                previous[i - 1] + cost,  # substitution
            )
            current[i] = value
            if value < row_min:
                row_min = value

        if max_distance is not None and row_min > max_distance:
            return max_distance + 1

        previous, current = current, previous

    if max_distance is not None and previous[len(a)] > max_distance:
        return max_distance + 1
    return previous[len(a)]


def normalized_score(distance: int, first: str, second: str) -> float:
    """Express an edit distance as a similarity in [0, 1]."""
    longest = max(len(first), len(second))
    if longest == 0:
        return 1.0
    return min(1.0, max(0.0, 1.0 - distance / longest))


def closest_domain(
    input: str,
    candidates: Sequence[str] | None = None,
    *,
    max_distance: int | None = None,
    normalize: bool = True,
) -> ClosestDomainResult:
    """Find the candidate nearest to ``input`` by edit distance.

    The lowest distance wins; ties go to the earliest candidate.

    Args:
        input: Domain to match.
        candidates: Candidate domains. None uses the built-in list.
        max_distance: If the best distance exceeds this, ``candidate`` is
            None and ``index`` is -1, while ``distance`` and
            ``normalized_score`` still describe the nearest candidate.
        normalize: Trim and lowercase input and candidates first.

    Returns:
        ClosestDomainResult for the best candidate.
    """
    if candidates is None:
        candidates = default_fuzzy_candidates()

    def prepare(value: str) -> str:
        return value.strip().lower() if normalize else value

    query = prepare(input)

    best_index = -1
    best_candidate: str | None = None
    best_distance: int | None = None

    for index, raw in enumerate(candidates):
        candidate = prepare(raw)
        distance = levenshtein(query, candidate, max_distance)
        if best_distance is None or distance < best_distance:
            best_index = index
            best_candidate = candidate
            best_distance = distance
            if distance == 0:
                break

    if best_candidate is None or best_distance is None:
        return ClosestDomainResult(
            input=input,
            candidate=None,
            distance=len(query),
            normalized_score=0.0,
            index=-1,
        )

    score = normalized_score(best_distance, query, best_candidate)

    if max_distance is not None and best_distance > max_distance:
        return ClosestDomainResult(
            input=input,
            candidate=None,
            distance=best_distance,
            normalized_score=score,
            index=-1,
        )

    return ClosestDomainResult(
        input=input,
        candidate=best_candidate,
        distance=best_distance,
        normalized_score=score,
        index=best_index,
    )
