from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterable, Iterator

from .config import SessionSettings
from .exceptions import LocatorUnavailable, NoCandidates
from .heuristics import ElementHeuristic
from .intents import DefaultIntentResolver
from .locator_generator import LocatorSynthesizer, build_quick_locator
from .models import ElementDescriptor, Language, LocatorCandidate, LocatorLogDetail, LocatorType, ResolvedElement, Role
from .result_logger import LoggingResolvedElementLogger, ResolvedElementLogger, build_logger
from .selector import TieredSelector
from .snapshot import CandidateSnapshot, CandidateSource, QueryExecutor, collect_snapshot
from .validation import verify_locators

LOGGER = logging.getLogger("intentlocator.session")

_UNSET: Any = object()


@dataclass(slots=True)
class _LastLocators:
    context_id: str
    phrase: str
    result_logger: ResolvedElementLogger | None
    consistency_check: bool
    allow_hashed_last_resort: bool
    resolved: ResolvedElement


class IntentSession:
    """Resolve intent phrases against one live page.

    Every call outside :meth:`step` collects a fresh snapshot. ``xpath`` and
    ``css_selector`` reuse the last locators while the page, the phrase and the
    session flags they were built under are unchanged.
    """

    def __init__(
        self,
        source: CandidateSource,
        executor: QueryExecutor,
        *,
        settings: SessionSettings | None = None,
        resolver: DefaultIntentResolver | None = None,
        selector: TieredSelector | None = None,
        result_logger: ResolvedElementLogger | None = None,
        heuristics: Iterable[ElementHeuristic | None] | None = None,
    ) -> None:
        self.settings = settings or SessionSettings()
        self.source = source
        self.executor = executor
        self.resolver = resolver or DefaultIntentResolver()
        self.selector = selector or TieredSelector()
        if heuristics is not None:
            self.selector.with_heuristics(heuristics)
        self.language: Language = self.settings.language
        self.consistency_check = self.settings.consistency_check
        self.allow_hashed_last_resort = self.settings.allow_hashed_last_resort
        if result_logger is None and self.settings.log_detail is not LocatorLogDetail.NONE:
            result_logger = LoggingResolvedElementLogger(
                self.settings.log_detail,
                build_logger(log_file=self.settings.log_file),
            )
        self.result_logger = result_logger
        self._last: _LastLocators | None = None

    @property
    def heuristics(self) -> tuple[ElementHeuristic, ...]:
        return self.selector.heuristics

    def with_heuristics(self, heuristics: Iterable[ElementHeuristic | None] | None) -> IntentSession:
        self.selector.with_heuristics(heuristics)
        return self

    def clear_heuristics(self) -> IntentSession:
        self.selector.with_heuristics(())
        return self

    @property
    def log_detail(self) -> LocatorLogDetail:
        if self.result_logger is None:
            return LocatorLogDetail.NONE
        return getattr(self.result_logger, "detail", LocatorLogDetail.BOTH) or LocatorLogDetail.NONE

    def collect_snapshot(self) -> CandidateSnapshot:
        snapshot = collect_snapshot(self.source)
        LOGGER.debug("Collected %d candidates for %s", len(snapshot), snapshot.context_id)
        return snapshot

    def resolve(self, phrase: str, need_locators: bool = False) -> ResolvedElement:
        role = self.resolver.resolve(phrase, self.language)
        snapshot = self.collect_snapshot()
        if snapshot.is_empty:
            raise NoCandidates(f"No candidates found on page for role {role.name}")
        return self.resolve_in(phrase, snapshot, need_locators, role=role)

    def resolve_in(
        self,
        phrase: str,
        snapshot: CandidateSnapshot,
        need_locators: bool = False,
        *,
        role: Role | None = None,
    ) -> ResolvedElement:
        role = role or self.resolver.resolve(phrase, self.language)
        if snapshot.is_empty:
            raise NoCandidates(f"No candidates found on page for role {role.name}")

        match = self.selector.select_best(role, snapshot.descriptors)
        handle = snapshot.handle_for(match.descriptor)

        need_xpath, need_css = self._locators_needed(need_locators)
        synthesizer = LocatorSynthesizer(self.allow_hashed_last_resort)
        if need_xpath and need_css:
            xpath, css = synthesizer.build_pair(match.descriptor, snapshot)
        else:
            xpath = synthesizer.build_xpath(match.descriptor, snapshot) if need_xpath else None
            css = synthesizer.build_css(match.descriptor, snapshot) if need_css else None

        self._finish(phrase, role, handle, match.descriptor, xpath, css)
        return ResolvedElement(phrase, role, handle, match.descriptor, match.score, xpath, css)

    def find(self, phrase: str) -> Any:
        return self.resolve(phrase).handle

    def xpath(self, phrase: str) -> str:
        resolved = self._resolve_with_locators(phrase)
        return resolved.xpath.locator

    def css_selector(self, phrase: str) -> str:
        resolved = self._resolve_with_locators(phrase)
        return resolved.css.locator

    def resolve_query(self, locator_type: LocatorType, locator: str, need_locators: bool = False) -> ResolvedElement:
        """Resolve an element addressed by an explicit query.

        The given query is kept for its own grammar and the other grammar gets a
        quick locator checked against the live page.
        """
        found = self.executor.find_all(locator_type, locator)
        if not found:
            raise LocatorUnavailable(f"No element matches {locator_type} locator {locator!r}")
        handle = found[0]
        target = f"{locator_type}({locator})"

        need_xpath, need_css = self._locators_needed(need_locators)
        descriptor: ElementDescriptor | None = None
        if self.result_logger is not None or need_xpath or need_css:
            descriptor = self.source.describe(handle)

        xpath = css = None
        if need_xpath:
            xpath = self._query_or_quick("XPath", locator_type, locator, len(found), descriptor)
        if need_css:
            css = self._query_or_quick("CSS", locator_type, locator, len(found), descriptor)

        self._finish(target, None, handle, descriptor, xpath, css)
        return ResolvedElement(target, None, handle, descriptor, None, xpath, css)

    @contextmanager
    def step(
        self,
        logger: ResolvedElementLogger | None = _UNSET,
        consistency_check: bool | None = None,
        allow_hashed_last_resort: bool | None = None,
    ) -> Iterator[ResolutionStep]:
        """Run a batch of resolutions on one snapshot with temporary overrides.

        Passing ``logger=None`` silences logging for the step. Overrides are
        restored on exit, also when the step raises.
        """
        saved = (self.result_logger, self.consistency_check, self.allow_hashed_last_resort)
        try:
            if logger is not _UNSET:
                self.result_logger = logger
            if consistency_check is not None:
                self.consistency_check = consistency_check
            if allow_hashed_last_resort is not None:
                self.allow_hashed_last_resort = allow_hashed_last_resort
            yield ResolutionStep(self)
        finally:
            self.result_logger, self.consistency_check, self.allow_hashed_last_resort = saved

    def _locators_needed(self, need_locators: bool) -> tuple[bool, bool]:
        detail = self.log_detail
        logging_on = self.result_logger is not None
        need_xpath = need_locators or self.consistency_check or (logging_on and detail.includes_xpath)
        need_css = need_locators or self.consistency_check or (logging_on and detail.includes_css)
        return need_xpath, need_css

    def _query_or_quick(
        self,
        wanted: LocatorType,
        locator_type: LocatorType,
        locator: str,
        match_count: int,
        descriptor: ElementDescriptor | None,
    ) -> LocatorCandidate:
        if wanted == locator_type:
            return LocatorCandidate(wanted, locator, "manual", match_count)
        return build_quick_locator(wanted, descriptor or ElementDescriptor(), self.executor)

    def _finish(
        self,
        target: str,
        role: Role | None,
        handle: Any,
        descriptor: ElementDescriptor | None,
        xpath: LocatorCandidate | None,
        css: LocatorCandidate | None,
    ) -> None:
        if self.result_logger is not None:
            detail = self.log_detail
            self.result_logger.log_resolved_element(
                target,
                role,
                xpath.locator if xpath is not None and detail.includes_xpath else None,
                css.locator if css is not None and detail.includes_css else None,
                descriptor,
            )
        if self.consistency_check:
            verify_locators(self.executor, target, handle, xpath, css)

    def _resolve_with_locators(self, phrase: str) -> ResolvedElement:
        context_id = self.source.context_id()
        last = self._last
        if (
            last is not None
            and last.context_id == context_id
            and last.phrase == phrase
            and last.result_logger is self.result_logger
            and last.consistency_check == self.consistency_check
            and last.allow_hashed_last_resort == self.allow_hashed_last_resort
            and last.resolved.has_locators
        ):
            LOGGER.debug("Reusing last locators for '%s'", phrase)
            return last.resolved

        resolved = self.resolve(phrase, need_locators=True)
        self._last = _LastLocators(
            context_id=context_id,
            phrase=phrase,
            result_logger=self.result_logger,
            consistency_check=self.consistency_check,
            allow_hashed_last_resort=self.allow_hashed_last_resort,
            resolved=resolved,
        )
        return resolved


class ResolutionStep:
    """One logical execution step sharing a single snapshot.

    The snapshot and every memoized resolution are dropped as soon as the source
    reports a different context id.
    """

    def __init__(self, session: IntentSession) -> None:
        self._session = session
        self._context_id: str | None = None
        self._snapshot = CandidateSnapshot()
        self._cache: dict[tuple[str, bool], ResolvedElement] = {}
        self._refresh()

    @property
    def snapshot(self) -> CandidateSnapshot:
        return self._snapshot

    def resolve(self, phrase: str, need_locators: bool = False) -> ResolvedElement:
        self._ensure_current()
        key = (phrase, need_locators)
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        resolved = self._session.resolve_in(phrase, self._snapshot, need_locators)
        self._cache[key] = resolved
        return resolved

    def find(self, phrase: str) -> Any:
        return self.resolve(phrase).handle

    def xpath(self, phrase: str) -> str:
        return self.resolve(phrase, need_locators=True).xpath.locator

    def css_selector(self, phrase: str) -> str:
        return self.resolve(phrase, need_locators=True).css.locator

    def _ensure_current(self) -> None:
        if self._session.source.context_id() != self._context_id:
            LOGGER.info("Context changed from %s, refreshing candidates", self._context_id)
            self._refresh()

    def _refresh(self) -> None:
        self._context_id = self._session.source.context_id()
        snapshot = self._session.collect_snapshot()
        if snapshot.is_empty:
            raise NoCandidates("No candidates found, cannot execute step")
        self._snapshot = snapshot
        self._cache.clear()
