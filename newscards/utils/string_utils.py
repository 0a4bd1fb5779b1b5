import re
from typing import Iterable, Optional, Tuple


def slugify_tag(name: str) -> str:
    slug = name.strip().lower().replace(" ", "-")
    return re.sub(r'[^\w-]+', '', slug)


def _bigrams(text: str) -> dict:
    counts: dict = {}
    for i in range(len(text) - 1):
        pair = text[i:i + 2]
        counts[pair] = counts.get(pair, 0) + 1
    return counts


def title_similarity(first: Optional[str], second: Optional[str]) -> float:
    """Sørensen–Dice coefficient over character bigrams, whitespace ignored."""
    a = re.sub(r'\s+', '', first or "")
    b = re.sub(r'\s+', '', second or "")

    if a == b:
        return 1.0 if a else 0.0
    if len(a) < 2 or len(b) < 2:
        return 0.0

    first_bigrams = _bigrams(a)
    intersection = 0
    for i in range(len(b) - 1):
        pair = b[i:i + 2]
        count = first_bigrams.get(pair, 0)
        if count > 0:
            first_bigrams[pair] = count - 1
            intersection += 1

    return (2.0 * intersection) / (len(a) + len(b) - 2)


def best_match(title: str, candidates: Iterable[str]) -> Tuple[float, Optional[str]]:
    best_rating = 0.0
    best_candidate = None
    for candidate in candidates:
        rating = title_similarity(title, candidate)
        if rating > best_rating:
            best_rating = rating
            best_candidate = candidate
    return best_rating, best_candidate
