from __future__ import annotations

from enum import Enum
from typing import Iterable, Sequence

from .models import ElementDescriptor, Role


class ElementHeuristic:
    """Role-scoped rule plugged into the selector.

    Every hook is optional. Subclasses override only what they need:
    ``restrict`` narrows the working set, ``prefer`` proposes a preferred subset
    and ``score_adjustment`` adds a signed delta to the base score. A hook must
    only ever return descriptors taken from its input.
    """

    order: int = 0

    @property
    def heuristic_id(self) -> str:
        return type(self).__name__

    def supports(self, role: Role) -> bool:
        return True

    def restrict(self, role: Role, candidates: Sequence[ElementDescriptor]) -> Sequence[ElementDescriptor]:
        return candidates

    def prefer(self, role: Role, candidates: Sequence[ElementDescriptor]) -> Sequence[ElementDescriptor]:
        return ()

    def score_adjustment(self, role: Role, candidate: ElementDescriptor) -> float:
        return 0.0

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.heuristic_id!r} order={self.order}>"


def normalize_heuristics(heuristics: Iterable[ElementHeuristic | None] | None) -> tuple[ElementHeuristic, ...]:
    if not heuristics:
        return ()
    present = [item for item in heuristics if item is not None]
    present.sort(key=lambda item: (item.order, item.heuristic_id))

    seen: set[str] = set()
    normalized: list[ElementHeuristic] = []
    for item in present:
        if item.heuristic_id in seen:
            continue
        seen.add(item.heuristic_id)
        normalized.append(item)
    return tuple(normalized)


class DescriptorAttribute(str, Enum):
    TAG_NAME = "tag"
    TYPE = "input_type"
    ID = "id"
    NAME = "name"
    CSS_CLASSES = "classes"
    TEST_ATTRIBUTE_NAME = "test_attribute_name"
    TEST_ATTRIBUTE_VALUE = "test_attribute_value"
    LABEL_TEXT = "label_text"
    PLACEHOLDER = "placeholder"
    ARIA_LABEL = "aria_label"
    TITLE = "title"
    SURROUNDING_TEXT = "surrounding_text"
    CONTAINER = "container"

    def read(self, descriptor: ElementDescriptor) -> str:
        value = getattr(descriptor, self.value)
        if isinstance(value, tuple):
            value = " ".join(value)
        return str(value or "").strip().lower()


class AttributeContainsHeuristic(ElementHeuristic):
    """Match candidates whose attributes contain any of the given needles."""

    def __init__(
        self,
        heuristic_id: str,
        role: Role,
        needles: Iterable[str],
        *,
        order: int = 0,
        attributes: Iterable[DescriptorAttribute] | None = None,
        restrict_to_matches: bool = False,
        prefer_matches: bool = False,
        score_boost: float = 0.0,
    ) -> None:
        if not heuristic_id:
            raise ValueError("heuristic_id must not be empty")
        self._heuristic_id = heuristic_id
        self.order = order
        self.role = role
        self.attributes = tuple(dict.fromkeys(attributes or ())) or (DescriptorAttribute.TEST_ATTRIBUTE_VALUE,)
        self.needles = tuple(
            needle.strip().lower() for needle in needles if needle is not None and needle.strip()
        )
        self.restrict_to_matches = restrict_to_matches
        self.prefer_matches = prefer_matches
        self.score_boost = score_boost

    @property
    def heuristic_id(self) -> str:
        return self._heuristic_id

    def supports(self, role: Role) -> bool:
        return role is self.role

    def restrict(self, role: Role, candidates: Sequence[ElementDescriptor]) -> Sequence[ElementDescriptor]:
        if not self.restrict_to_matches:
            return candidates
        return [candidate for candidate in candidates if self.matches(candidate)]

    def prefer(self, role: Role, candidates: Sequence[ElementDescriptor]) -> Sequence[ElementDescriptor]:
        if not self.prefer_matches:
            return ()
        return [candidate for candidate in candidates if self.matches(candidate)]

    def score_adjustment(self, role: Role, candidate: ElementDescriptor) -> float:
        if self.score_boost == 0.0:
            return 0.0
        return self.score_boost if self.matches(candidate) else 0.0

    def matches(self, candidate: ElementDescriptor) -> bool:
        if not self.needles:
            return False
        for attribute in self.attributes:
            value = attribute.read(candidate)
            if value and any(needle in value for needle in self.needles):
                return True
        return False
