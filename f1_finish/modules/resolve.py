import math
from typing import Iterable

from ..utils import APPROXIMATE_TOLERANCE, SUGGESTION_LIMIT

NOT_FOUND = None


class EntityNotFound(LookupError):
    def __init__(self, kind: str, query: str | None, suggestions: list[str]) -> None:
        self.kind = kind
        self.query = query
        self.suggestions = suggestions
        super().__init__(f"{kind.title()} Not Found: '{query}'")


def _fold(value: str) -> str:
    return value.strip().casefold()


def max_edits(query: str, tolerance: float = APPROXIMATE_TOLERANCE) -> int:
    return math.ceil(tolerance * len(query))


# Levenshtein distance from query to the closest substring of text.
def substring_distance(query: str, text: str) -> int:
    previous = [0] * (len(text) + 1)
    for i, q in enumerate(query, start=1):
        current = [i] + [0] * len(text)
        for j, t in enumerate(text, start=1):
            current[j] = min(
                previous[j - 1] + (q != t),
                previous[j] + 1,
                current[j - 1] + 1,
            )
        previous = current
    return min(previous)


def resolve(query: str | None, choices: Iterable[str], tolerance: float = APPROXIMATE_TOLERANCE) -> str | None:
    """Map free text onto the closest known name.

    Tiers run in order (exact, substring, prefix, approximate) and the first
    tier with any hit wins. Within a tier the first hit in ``choices``
    iteration order is returned, so callers that want reproducible ties
    should pass an ordered collection. Rating tables are keyed in sorted
    order, which makes ties lexicographic in practice.
    """
    if query is None:
        return NOT_FOUND

    q = _fold(query)
    if not q:
        return NOT_FOUND

    folded = [(choice, _fold(choice)) for choice in choices]

    tiers = (
        lambda c: c == q,
        lambda c: q in c,
        lambda c: c.startswith(q),
    )
    for matches in tiers:
        for choice, c in folded:
            if matches(c):
                return choice

    limit = max_edits(q, tolerance)
    for choice, c in folded:
        if substring_distance(q, c) <= limit:
            return choice

    return NOT_FOUND


def suggest(choices: Iterable[str], limit: int = SUGGESTION_LIMIT) -> list[str]:
    suggestions = []
    for choice in choices:
        if len(suggestions) >= limit:
            break
        suggestions.append(choice)
    return suggestions


def resolve_entity(kind: str, query: str | None, choices: Iterable[str]) -> str:
    choices = list(choices)
    match = resolve(query, choices)
    if match is NOT_FOUND:
        raise EntityNotFound(kind, query, suggest(choices))
    return match
