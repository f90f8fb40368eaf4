"""Typo- and accent-tolerant name search over legislators.

Used by the admin screen that links a candidate to a sitting legislator,
where names like "Mélenchon" get typed as "melanchon".
"""

import re
import unicodedata
from typing import Callable, TypeVar

T = TypeVar("T")


def fold(text: str) -> str:
    """Lower-case and strip diacritics: "Élisabeth" -> "elisabeth"."""
    decomposed = unicodedata.normalize("NFD", text.lower())
    return "".join(c for c in decomposed if unicodedata.category(c) != "Mn")


def tokenize(text: str) -> list[str]:
    """Folded words; hyphens and apostrophes separate words."""
    return [t for t in re.split(r"[^\w]+", fold(text)) if t]


def levenshtein_distance(s1: str, s2: str) -> int:
    """Minimum number of single-character edits turning s1 into s2."""
    if len(s1) < len(s2):
        return levenshtein_distance(s2, s1)
    if not s2:
        return len(s1)

    previous = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1):
        current = [i + 1]
        for j, c2 in enumerate(s2):
            current.append(min(
                previous[j + 1] + 1,
                current[j] + 1,
                previous[j] + (c1 != c2),
            ))
        previous = current
    return previous[-1]


def similarity_ratio(s1: str, s2: str) -> float:
    """1.0 for identical folded strings, down to 0.0."""
    a, b = fold(s1), fold(s2)
    if not a and not b:
        return 1.0
    if not a or not b:
        return 0.0
    return 1.0 - levenshtein_distance(a, b) / max(len(a), len(b))


def name_match_score(query: str, name: str) -> float:
    """Relevance of ``name`` for ``query`` between 0.0 and 1.0.

    Substring hits score highest, then whole-word typo matches, then
    overall string similarity.
    """
    q = fold(query).strip()
    n = fold(name)
    if not q or not n:
        return 0.0

    if q in n:
        if n.startswith(q) or f" {q}" in n or f"-{q}" in n:
            return 1.0
        return 0.9

    query_tokens = tokenize(query)
    name_tokens = tokenize(name)
    if query_tokens and name_tokens:
        best = [
            max(similarity_ratio(qt, nt) for nt in name_tokens)
            for qt in query_tokens
            if len(qt) >= 3
        ]
        if best and min(best) >= 0.75:
            return 0.6 + 0.3 * (sum(best) / len(best))

    ratio = similarity_ratio(q, n)
    if ratio >= 0.6:
        return 0.4 + ratio * 0.3
    return 0.0


def search_by_name(
    query: str,
    items: list[T],
    key_func: Callable[[T], str],
    threshold: float = 0.4,
    limit: int = 20,
) -> list[tuple[T, float]]:
    """Rank items by name relevance, best first, shorter names on ties."""
    if not query or not items:
        return []

    scored = []
    for item in items:
        score = name_match_score(query, key_func(item))
        if score >= threshold:
            scored.append((item, score))

    scored.sort(key=lambda pair: (-pair[1], len(key_func(pair[0]))))
    return scored[:limit]
