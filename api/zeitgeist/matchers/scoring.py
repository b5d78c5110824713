"""Pluggable base-relevance scorers."""

from __future__ import annotations

import re
from typing import Protocol

from zeitgeist.schema.scenario import Scenario
from zeitgeist.schema.vibe import Vibe

_TOKEN_RE = re.compile(r"[a-z0-9][a-z0-9'+#-]*")
STOPWORDS = frozenset(
    {
        "about", "after", "and", "are", "but", "for", "from", "have", "into", "its", "just",
        "like", "more", "not", "our", "out", "some", "that", "the", "their", "them", "then",
        "there", "they", "this", "was", "what", "when", "where", "which", "while", "who",
        "will", "with", "you", "your",
    }
)


def tokenize(text: str) -> set[str]:
    """Lower-case word tokens of three or more characters, minus stopwords."""
    tokens = set()
    for token in _TOKEN_RE.findall(text.lower()):
        token = token.strip("'-")
        if len(token) >= 3 and token not in STOPWORDS:
            tokens.add(token)
    return tokens


class Scorer(Protocol):
    """Returns a base relevance in ``[0, 1]``; zero means no textual overlap."""

    def score(self, scenario: Scenario, vibe: Vibe) -> tuple[float, str]:
        ...


class KeywordOverlapScorer:
    """Token overlap between the scenario and a vibe, blended with recency.

    Overlap saturates as ``n / (n + saturation)`` so a couple of shared terms
    already carry weight without one long description dominating.
    """

    def __init__(self, saturation: float = 2.0, relevance_weight: float = 0.5) -> None:
        self.saturation = saturation
        self.relevance_weight = relevance_weight

    @staticmethod
    def vibe_tokens(vibe: Vibe) -> set[str]:
        parts = [vibe.name, vibe.description, vibe.category.value, *vibe.keywords, *vibe.domains]
        return tokenize(" ".join(parts))

    def score(self, scenario: Scenario, vibe: Vibe) -> tuple[float, str]:
        shared = tokenize(scenario.to_text()) & self.vibe_tokens(vibe)
        if not shared:
            return 0.0, ""
        textual = len(shared) / (len(shared) + self.saturation)
        relevance = vibe.current_relevance if vibe.current_relevance is not None else vibe.strength
        blended = textual * ((1 - self.relevance_weight) + self.relevance_weight * relevance)
        terms = ", ".join(sorted(shared)[:5])
        return max(0.0, min(1.0, blended)), f"Shares {len(shared)} term(s) with the scenario: {terms}"
