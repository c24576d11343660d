from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Protocol, Sequence

from .exceptions import InternalInconsistency
from .models import ElementDescriptor, LocatorType


class CandidateSource(Protocol):
    def collect(self) -> Sequence[tuple[ElementDescriptor, Any]]: ...

    def context_id(self) -> str: ...

    def describe(self, handle: Any) -> ElementDescriptor | None: ...


class QueryExecutor(Protocol):
    def find_all(self, locator_type: LocatorType, locator: str) -> Sequence[Any]: ...

    def is_same(self, first: Any, second: Any) -> bool: ...


@dataclass(slots=True)
class CandidateSnapshot:
    """Ordered descriptors of one context plus the live handle behind each one.

    Handles are keyed by descriptor identity. Value-equal descriptors collected
    from two different nodes keep two different handles.
    """

    descriptors: tuple[ElementDescriptor, ...] = ()
    context_id: str = ""
    _handles: dict[int, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[ElementDescriptor, Any]], context_id: str = "") -> CandidateSnapshot:
        descriptors: list[ElementDescriptor] = []
        handles: dict[int, Any] = {}
        for descriptor, handle in pairs:
            if descriptor is None:
                continue
            if id(descriptor) in handles:
                # The same object twice would make identity lookups ambiguous.
                descriptor = replace(descriptor)
            descriptors.append(descriptor)
            handles[id(descriptor)] = handle
        return cls(tuple(descriptors), context_id, handles)

    def __len__(self) -> int:
        return len(self.descriptors)

    def __iter__(self):
        return iter(self.descriptors)

    @property
    def is_empty(self) -> bool:
        return not self.descriptors

    def contains(self, descriptor: ElementDescriptor) -> bool:
        return id(descriptor) in self._handles

    def handle_for(self, descriptor: ElementDescriptor) -> Any:
        if not self.contains(descriptor):
            raise InternalInconsistency(
                f"Elected element has no live handle in the current snapshot: {descriptor.signature()}"
            )
        return self._handles[id(descriptor)]


def collect_snapshot(source: CandidateSource) -> CandidateSnapshot:
    return CandidateSnapshot.from_pairs(source.collect(), source.context_id())


def identity_intersect(
    base_order: Sequence[ElementDescriptor], subset: Iterable[ElementDescriptor] | None
) -> list[ElementDescriptor]:
    """Keep items of ``base_order`` that also appear, by identity, in ``subset``."""
    if not base_order or subset is None:
        return []
    wanted = {id(item) for item in subset if item is not None}
    if not wanted:
        return []
    return [item for item in base_order if id(item) in wanted]


def identity_dedupe(items: Iterable[ElementDescriptor]) -> list[ElementDescriptor]:
    seen: set[int] = set()
    out: list[ElementDescriptor] = []
    for item in items:
        if item is None or id(item) in seen:
            continue
        seen.add(id(item))
        out.append(item)
    return out
