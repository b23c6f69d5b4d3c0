# File: seo_scout/parser/keywords.py
"""seo_scout.parser.keywords: frequency-based keyword extraction from visible text."""

from __future__ import annotations

import re
from collections import Counter
from typing import FrozenSet, Iterable, List, Tuple

__all__ = ["STOP_WORDS", "DEFAULT_KEYWORD_LIMIT", "tokenize", "top_keywords", "merge_keywords"]

DEFAULT_KEYWORD_LIMIT = 20
MIN_TOKEN_LENGTH = 3

# English function words plus web boilerplate that says nothing about the site.
STOP_WORDS: FrozenSet[str] = frozenset(
    """
    a about above across after again against all almost also am among an and any are around as at
    be because been before behind being below beneath beside besides between beyond both but by
    can cannot could dare did do does doing done down during each either even every few for from
    further had has have having he her here hers him himself his how however i if in into is it its
    itself just may me might mine more most much must my myself need no nor not now of off on once
    only or other our ours ourselves out over own per same shall she should so some still such than
    that the their theirs them themselves then there these they this those through thus to too under
    until up upon us very via was we were what when where which while who whom whose why will with
    within without would yet you your yours yourself yourselves
    click here read learn menu home page skip content copyright rights reserved cookie cookies
    privacy policy terms login sign
    """.split()
)

_TOKEN_RE = re.compile(r"[^\W_]+(?:['’][^\W_]+)?", re.UNICODE)


def tokenize(text: str) -> List[str]:
    """Lower-cased word tokens with stop-words, short tokens and pure numbers removed."""
    tokens: List[str] = []
    for match in _TOKEN_RE.finditer(text.lower()):
        token = match.group(0).replace("’", "'")
        if len(token) < MIN_TOKEN_LENGTH or token.isdigit() or token in STOP_WORDS:
            continue
        tokens.append(token)
    return tokens


def top_keywords(text: str, limit: int = DEFAULT_KEYWORD_LIMIT) -> Tuple[str, ...]:
    """Top ``limit`` tokens by frequency; ties keep the order of first appearance."""
    if limit <= 0:
        return ()
    counts = Counter(tokenize(text))
    # Counter preserves insertion order and sorted() is stable.
    ranked = sorted(counts.items(), key=lambda item: -item[1])
    return tuple(word for word, _ in ranked[:limit])


def merge_keywords(groups: Iterable[Iterable[str]]) -> Tuple[str, ...]:
    """Union of keyword lists in first-seen order."""
    return tuple(dict.fromkeys(word for group in groups for word in group))
