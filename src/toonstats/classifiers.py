"""
Builds season/arc classifiers and the skip predicate from a series configuration.

Series whose seasons can only be told apart from the page markup can pass
their own ``Classifiers`` instead; these builders only look at the chapter number.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence

from toonstats.config.config import SeasonRule, SeriesConfig
from toonstats.models import Classifiers, SkipPredicate


def _rule_for(rules: Sequence[SeasonRule], number: int) -> Optional[SeasonRule]:
    for rule in rules:
        if rule.start <= number <= rule.end:
            return rule
    return None


def season_classifiers(rules: Sequence[SeasonRule]) -> Classifiers:
    """Classifiers mapping a chapter number onto the first rule whose range contains it."""
    rules = tuple(rules)

    def season(document: Any, number: int) -> Optional[int]:
        rule = _rule_for(rules, number)
        return rule.season if rule else None

    def season_chapter(document: Any, number: int) -> Optional[int]:
        rule = _rule_for(rules, number)
        return number - rule.start + rule.first_chapter if rule else None

    def arc(document: Any, number: int) -> Optional[str]:
        rule = _rule_for(rules, number)
        return rule.arc if rule else None

    return Classifiers(season=season, season_chapter=season_chapter, arc=arc)


def skip_chapters(numbers: Iterable[int]) -> SkipPredicate:
    to_skip = frozenset(numbers)

    def skip(number: int) -> bool:
        return number in to_skip

    return skip


def from_series(series: SeriesConfig) -> tuple[Classifiers, SkipPredicate]:
    return season_classifiers(series.seasons), skip_chapters(series.skip)
