"""Matcher registry built explicitly at startup and passed to consumers."""

from __future__ import annotations

from zeitgeist.core.config import Settings
from zeitgeist.core.errors import NotFoundError
from zeitgeist.matchers.base import BaseMatcher, MatchResult
from zeitgeist.matchers.keyword import KeywordMatcher
from zeitgeist.matchers.personalized import PersonalizedMatcher
from zeitgeist.schema.scenario import Scenario
from zeitgeist.schema.user import UserProfile
from zeitgeist.schema.vibe import Vibe


class MatcherRegistry:
    """Name-to-matcher mapping owned by whoever constructs it."""

    def __init__(self) -> None:
        self._matchers: dict[str, BaseMatcher] = {}
        self._default: str | None = None

    def register(self, matcher: BaseMatcher, *, default: bool = False) -> BaseMatcher:
        if matcher.name in self._matchers:
            raise ValueError(f"Matcher '{matcher.name}' is already registered")
        self._matchers[matcher.name] = matcher
        if default or self._default is None:
            self._default = matcher.name
        return matcher

    def get(self, name: str) -> BaseMatcher:
        try:
            return self._matchers[name]
        except KeyError as exc:
            raise NotFoundError("Matcher", name) from exc

    @property
    def default(self) -> BaseMatcher:
        if self._default is None:
            raise NotFoundError("Matcher", "default")
        return self._matchers[self._default]

    def names(self) -> list[str]:
        return sorted(self._matchers)

    def match_with(
        self,
        name: str | None,
        scenario: Scenario,
        candidates: list[Vibe],
        profile: UserProfile | None = None,
    ) -> MatchResult:
        matcher = self.get(name) if name else self.default
        return matcher.match(scenario, candidates, profile)


def build_matcher_registry(settings: Settings) -> MatcherRegistry:
    """Register the stock matchers with thresholds from settings."""
    registry = MatcherRegistry()
    registry.register(KeywordMatcher(top_n=settings.match_top_n))
    registry.register(
        PersonalizedMatcher(
            top_n=settings.match_top_n,
            region_threshold=settings.region_relevance_threshold,
            interest_boost_max=settings.interest_boost_max,
        ),
        default=True,
    )
    return registry
