"""Fuzzy subsequence matching and ranking."""

from __future__ import annotations

from collections.abc import Sequence

from .models import Match

WORD_BOUNDARIES = " _-./\\"

# Any contiguous substring hit outranks every scattered hit.
SUBSTRING_BASE = 100_000
MAX_SCATTERED_SCORE = SUBSTRING_BASE - 1_000


def _fold(ch: str) -> str:
    lowered = ch.lower()
    return lowered if len(lowered) == 1 else ch


def fuzzy_match(pattern: str, text: str) -> tuple[int, tuple[int, ...]] | None:
    """
    Fuzzy match pattern against text, case-insensitively.

    Returns ``(score, positions)`` where higher score is a better match and
    positions are the matched character offsets in ``text``, or ``None`` when
    the pattern is not a subsequence of the text. Prefers:
    - Contiguous substring matches (earlier is better, prefix best)
    - Consecutive character matches
    - Matches at word boundaries
    - Matches at the start
    """
    if not pattern:
        return 0, ()

    pattern_folded = "".join(_fold(ch) for ch in pattern)
    text_folded = "".join(_fold(ch) for ch in text)

    index = text_folded.find(pattern_folded)
    if index >= 0:
        start_bonus = 100 if index == 0 else 0
        score = SUBSTRING_BASE + start_bonus - min(index, 999)
        return score, tuple(range(index, index + len(pattern_folded)))

    pattern_idx = 0
    score = 0
    last_match_idx = -1
    word_boundary = True
    positions: list[int] = []

    for i, char in enumerate(text_folded):
        if pattern_idx < len(pattern_folded) and char == pattern_folded[pattern_idx]:
            pattern_idx += 1
            positions.append(i)

            if last_match_idx == i - 1:
                score += 10
            if word_boundary:
                score += 15
            if i == 0:
                score += 20

            last_match_idx = i
            score += 5

        word_boundary = char in WORD_BOUNDARIES

    if pattern_idx == len(pattern_folded):
        return min(score, MAX_SCATTERED_SCORE), tuple(positions)

    return None


def match(query: str, corpus: Sequence[str]) -> list[Match]:
    """
    Filter and rank ``corpus`` against ``query``.

    An empty query keeps every item in its original order. Otherwise only
    items containing the query as a subsequence are returned, sorted by score
    descending with ties kept in corpus order.
    """
    if not query:
        return [Match(entry_index=i) for i in range(len(corpus))]

    results: list[Match] = []
    for i, text in enumerate(corpus):
        hit = fuzzy_match(query, text)
        if hit is None:
            continue
        score, positions = hit
        results.append(Match(entry_index=i, score=score, positions=positions))

    # sort is stable, so equal scores stay in corpus order
    results.sort(key=lambda m: m.score, reverse=True)
    return results
