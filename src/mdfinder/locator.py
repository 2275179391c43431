"""Fuzzy lookup of snippets and list filtering."""

from typing import List, Optional, Sequence

from rapidfuzz import fuzz, process, utils

from .models import Snippet

SCORE_CUTOFF = 50


def find_snippet(query: str, snippets: Sequence[Snippet]) -> Optional[Snippet]:
    """Best match for ``query`` against ``folder/name``, or None."""
    if not query.strip() or not snippets:
        return None

    match = process.extractOne(
        query,
        [snippet.search_key for snippet in snippets],
        scorer=fuzz.WRatio,
        processor=utils.default_process,
        score_cutoff=SCORE_CUTOFF,
    )
    if match is None:
        return None
    _, _, index = match
    return snippets[index]


def _is_subsequence(needle: str, haystack: str) -> bool:
    chars = iter(haystack)
    return all(ch in chars for ch in needle)


def filter_items(query: str, labels: Sequence[str]) -> List[int]:
    """Indexes of ``labels`` containing the query's characters in order, best first."""
    needle = query.strip().lower()
    if not needle:
        return list(range(len(labels)))

    scored = []
    for index, label in enumerate(labels):
        haystack = label.lower()
        if _is_subsequence(needle, haystack):
            scored.append((fuzz.partial_ratio(needle, haystack), index))

    scored.sort(key=lambda item: (-item[0], item[1]))
    return [index for _, index in scored]
