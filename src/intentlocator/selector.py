from __future__ import annotations

import logging
from typing import Callable, Iterable, Sequence

from .exceptions import AmbiguousMatch, NoCandidates, NoSuitableMatch
from .heuristics import ElementHeuristic, normalize_heuristics
from .models import ElementDescriptor, Match, Role
from .scoring import score_element
from .selector_rules import (
    BUTTON_INPUT_TYPES,
    BUTTON_TEST_KEYWORDS,
    LOGIN_TEST_KEYWORDS,
    PASSWORD_KEYWORDS,
    TEXT_INPUT_TYPES,
    TEXTBOX_HINTS,
    contains_any,
)
from .snapshot import identity_dedupe, identity_intersect

LOGGER = logging.getLogger("intentlocator.selector")

Scorer = Callable[[Role, ElementDescriptor], float]

ROLE_TEST_KEYWORDS: dict[Role, tuple[str, ...]] = {
    Role.LOGIN_FIELD: LOGIN_TEST_KEYWORDS,
    Role.PASSWORD_FIELD: PASSWORD_KEYWORDS,
    Role.LOGIN_BUTTON: BUTTON_TEST_KEYWORDS,
}


def is_builtin_preferred(role: Role, descriptor: ElementDescriptor) -> bool:
    tag = descriptor.tag.strip().lower()
    input_type = descriptor.input_type.strip().lower()

    if role is Role.PASSWORD_FIELD:
        return tag == "input" and input_type == "password"
    if role is Role.LOGIN_BUTTON:
        return tag == "button" or (tag == "input" and input_type in BUTTON_INPUT_TYPES)
    if role is Role.LOGIN_FIELD:
        if tag == "textarea":
            return True
        if tag == "input" and input_type in TEXT_INPUT_TYPES:
            return True
        text = " ".join(
            (
                descriptor.id,
                descriptor.name,
                descriptor.label_text,
                descriptor.aria_label,
                descriptor.placeholder,
                descriptor.title,
                descriptor.surrounding_text,
            )
        ).lower()
        return any(hint in text for hint in TEXTBOX_HINTS)
    return False


def is_role_tagged(role: Role, descriptor: ElementDescriptor) -> bool:
    value = descriptor.test_attribute_value.strip()
    if not value:
        return False
    return contains_any(value, ROLE_TEST_KEYWORDS.get(role, ()))


class TieredSelector:
    """Elect exactly one candidate for a role or fail explicitly.

    Tiers are tried in a fixed order: preferred and restricted, restricted,
    preferred, then every candidate. Inside each tier, candidates whose test
    attribute names the role go first, then any candidate with a test attribute,
    then the whole tier. The first sub-tier with a positive best score decides.
    """

    def __init__(self, scorer: Scorer = score_element, heuristics: Iterable[ElementHeuristic | None] | None = None) -> None:
        self._scorer = scorer
        self._heuristics = normalize_heuristics(heuristics)

    @property
    def heuristics(self) -> tuple[ElementHeuristic, ...]:
        return self._heuristics

    def with_heuristics(self, heuristics: Iterable[ElementHeuristic | None] | None) -> TieredSelector:
        self._heuristics = normalize_heuristics(heuristics)
        return self

    def score(self, role: Role, candidate: ElementDescriptor) -> float:
        total = self._scorer(role, candidate)
        for heuristic in self._heuristics:
            if heuristic.supports(role):
                total += heuristic.score_adjustment(role, candidate)
        return total

    def select_best(self, role: Role, candidates: Sequence[ElementDescriptor]) -> Match:
        if not candidates:
            raise NoCandidates(f"No candidates provided for role {role.name}")

        restricted = self._restrict(role, candidates)
        preferred = self._preferred(role, candidates)
        tiers = (
            ("preferred+restricted", identity_intersect(preferred, restricted)),
            ("restricted", restricted),
            ("preferred", preferred),
            ("all", list(candidates)),
        )
        for tier_name, tier in tiers:
            match = self._select_with_test_tiers(role, tier)
            if match is not None:
                LOGGER.debug("Role %s elected in tier %s with score %.2f", role.name, tier_name, match.score)
                return match

        raise NoSuitableMatch(f"No suitable match found for role {role.name} (all scores <= 0)")

    def _restrict(self, role: Role, candidates: Sequence[ElementDescriptor]) -> list[ElementDescriptor]:
        current = list(candidates)
        for heuristic in self._heuristics:
            if not heuristic.supports(role):
                continue
            narrowed = identity_intersect(current, heuristic.restrict(role, current))
            if narrowed and len(narrowed) < len(current):
                current = narrowed
        return current

    def _preferred(self, role: Role, candidates: Sequence[ElementDescriptor]) -> list[ElementDescriptor]:
        collected = [candidate for candidate in candidates if is_builtin_preferred(role, candidate)]
        for heuristic in self._heuristics:
            if not heuristic.supports(role):
                continue
            proposed = heuristic.prefer(role, candidates)
            if proposed:
                collected.extend(identity_intersect(candidates, proposed))
        chosen = {id(item) for item in identity_dedupe(collected)}
        return [candidate for candidate in candidates if id(candidate) in chosen]

    def _select_with_test_tiers(self, role: Role, tier: Sequence[ElementDescriptor]) -> Match | None:
        if not tier:
            return None

        role_tagged = [candidate for candidate in tier if is_role_tagged(role, candidate)]
        if role_tagged:
            match = self._best_or_none(role, role_tagged)
            if match is not None:
                return match

        tagged = [candidate for candidate in tier if candidate.test_attribute_value.strip()]
        if tagged:
            match = self._best_or_none(role, tagged)
            if match is not None:
                return match

        return self._best_or_none(role, tier)

    def _best_or_none(self, role: Role, candidates: Sequence[ElementDescriptor]) -> Match | None:
        best: ElementDescriptor | None = None
        second: ElementDescriptor | None = None
        best_score = float("-inf")
        second_score = float("-inf")

        for candidate in candidates:
            value = self.score(role, candidate)
            if value > best_score:
                second, second_score = best, best_score
                best, best_score = candidate, value
            elif value > second_score:
                second, second_score = candidate, value

        if best is None or best_score <= 0.0:
            return None
        if second is not None and best_score == second_score:
            raise AmbiguousMatch(
                f"Ambiguous match for role {role.name}: top two candidates have equal score={best_score}. "
                f"Best={best.signature()}, SecondBest={second.signature()}",
                first=best,
                second=second,
                score=best_score,
            )
        return Match(role, best, best_score)
