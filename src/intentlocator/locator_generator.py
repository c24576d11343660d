from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from .models import ElementDescriptor, LocatorCandidate, LocatorType
from .selector_rules import (
    css_attr_literal,
    escape_css_identifier,
    is_css_identifier,
    is_hashed_class_token,
    normalize_space,
    xpath_literal,
)
from .snapshot import CandidateSnapshot, QueryExecutor
from .validation import count_locator_matches

LOGGER = logging.getLogger("intentlocator.locators")

SEMANTIC_ATTRS: tuple[tuple[str, Callable[[ElementDescriptor], str]], ...] = (
    ("name", lambda item: item.name),
    ("aria-label", lambda item: item.aria_label),
    ("placeholder", lambda item: item.placeholder),
    ("title", lambda item: item.title),
)

QUICK_ATTRS: tuple[str, ...] = ("id", "test", "name", "aria-label", "placeholder", "title")


@dataclass(frozen=True, slots=True)
class ContainerScope:
    """Form-like ancestor that bounds both the query and its uniqueness check."""

    kind: str = ""
    value: str = ""
    key: str = ""

    @classmethod
    def from_key(cls, key: str) -> ContainerScope:
        kind, sep, value = (key or "").partition(":")
        if sep and kind in ("id", "name") and value:
            return cls(kind, value, key)
        return cls()

    @property
    def scoped(self) -> bool:
        return bool(self.kind)

    def includes(self, descriptor: ElementDescriptor) -> bool:
        if not self.scoped:
            return True
        return descriptor.container == self.key

    def xpath(self, query: str) -> str:
        if not self.scoped:
            return query
        tail = query if query.startswith("//") else "//" + query.lstrip("/")
        return f"//form[@{self.kind}={xpath_literal(self.value)}]{tail}"

    def css(self, query: str) -> str:
        if self.kind == "id" and is_css_identifier(self.value):
            return f"form#{escape_css_identifier(self.value)} {query}"
        if self.scoped:
            return f"form[{self.kind}={css_attr_literal(self.value)}] {query}"
        return query


class _Context:
    def __init__(self, descriptor: ElementDescriptor, snapshot: CandidateSnapshot) -> None:
        self.descriptor = descriptor
        self.tag = (descriptor.tag or "").strip().lower() or "*"
        self.scope = ContainerScope.from_key(descriptor.container)
        self.peers = [
            item
            for item in snapshot.descriptors
            if _tag_matches(self.tag, item.tag) and self.scope.includes(item)
        ]

    def count(self, predicate: Callable[[ElementDescriptor], bool]) -> int:
        return sum(1 for item in self.peers if predicate(item))

    def unique(self, predicate: Callable[[ElementDescriptor], bool]) -> bool:
        return self.count(predicate) == 1

    def ordinal(self) -> int:
        typed = self.tag == "input" and bool(self.descriptor.input_type)
        position = 0
        for item in self.peers:
            if typed and item.input_type != self.descriptor.input_type:
                continue
            position += 1
            if item is self.descriptor:
                return position
        return -1

    def pick_class(self, hashed: bool) -> str | None:
        for token in self.descriptor.classes:
            if is_hashed_class_token(token) != hashed:
                continue
            if self.unique(lambda item, token=token: token in item.classes):
                return token
        return None


def _tag_matches(tag: str, other: str) -> bool:
    return tag == "*" or tag == (other or "").strip().lower()


class LocatorSynthesizer:
    """Build one XPath and one CSS locator that re-find the elected element.

    Both grammars walk the same anchor chain, from the id down to the bare tag,
    and stop at the first anchor that is unique among same-tag candidates in the
    element's scope. Machine generated class tokens are skipped unless
    ``allow_hashed_last_resort`` is set, and even then only after the ordinal.
    """

    def __init__(self, allow_hashed_last_resort: bool = False) -> None:
        self.allow_hashed_last_resort = allow_hashed_last_resort

    def build_xpath(self, descriptor: ElementDescriptor, snapshot: CandidateSnapshot) -> LocatorCandidate:
        ctx = _Context(descriptor, snapshot)
        tag = ctx.tag
        scope = ctx.scope

        if descriptor.id:
            return self._candidate("XPath", f"//*[@id={xpath_literal(descriptor.id)}]", "stable_attr:id", 1, ctx)

        test_name, test_value = descriptor.test_attribute_name, descriptor.test_attribute_value
        if test_name and test_value and ctx.unique(lambda item: item.test_attribute == descriptor.test_attribute):
            query = scope.xpath(f"//{tag}[@{test_name}={xpath_literal(test_value)}]")
            return self._candidate("XPath", query, f"stable_attr:{test_name}", 1, ctx)

        for attr, getter in SEMANTIC_ATTRS:
            value = getter(descriptor)
            if value and ctx.unique(lambda item, getter=getter, value=value: getter(item) == value):
                query = scope.xpath(f"//{tag}[@{attr}={xpath_literal(value)}]")
                return self._candidate("XPath", query, f"stable_attr:{attr}", 1, ctx)

        input_type = descriptor.input_type
        for attr, getter in SEMANTIC_ATTRS:
            value = getter(descriptor)
            if not (value and input_type):
                continue
            if ctx.unique(
                lambda item, getter=getter, value=value: getter(item) == value and item.input_type == input_type
            ):
                query = scope.xpath(
                    f"//{tag}[@{attr}={xpath_literal(value)} and @type={xpath_literal(input_type)}]"
                )
                return self._candidate("XPath", query, f"stable_attr:{attr}+type", 1, ctx)

        token = ctx.pick_class(hashed=False)
        if token:
            return self._candidate("XPath", scope.xpath(f"//{tag}[{_class_predicate(token)}]"), "meaningful_class", 1, ctx)

        label = normalize_space(descriptor.label_text)
        if label and ctx.unique(lambda item: normalize_space(item.label_text) == label):
            query = scope.xpath(f"//label[normalize-space(.)={xpath_literal(label)}]/following::{tag}[1]")
            return self._candidate("XPath", query, "label_assoc", 1, ctx)

        base = f"//{tag}"
        if tag == "input" and input_type:
            base += f"[@type={xpath_literal(input_type)}]"
        position = ctx.ordinal()
        if position > 0:
            return self._candidate(
                "XPath", f"({scope.xpath(base)})[{position}]", "nth_fallback", 1, ctx, uses_nth=True
            )

        if self.allow_hashed_last_resort:
            token = ctx.pick_class(hashed=True)
            if token:
                query = scope.xpath(f"//{tag}[{_class_predicate(token)}]")
                return self._candidate("XPath", query, "hashed_class", 1, ctx)

        return self._candidate("XPath", scope.xpath(f"//{tag}"), "bare_tag", len(ctx.peers), ctx)

    def build_css(self, descriptor: ElementDescriptor, snapshot: CandidateSnapshot) -> LocatorCandidate:
        ctx = _Context(descriptor, snapshot)
        tag = ctx.tag
        scope = ctx.scope

        if descriptor.id:
            if is_css_identifier(descriptor.id):
                query = f"#{escape_css_identifier(descriptor.id)}"
            else:
                query = f"[id={css_attr_literal(descriptor.id)}]"
            return self._candidate("CSS", query, "stable_attr:id", 1, ctx)

        test_name, test_value = descriptor.test_attribute_name, descriptor.test_attribute_value
        if test_name and test_value and ctx.unique(lambda item: item.test_attribute == descriptor.test_attribute):
            query = scope.css(f"{tag}[{test_name}={css_attr_literal(test_value)}]")
            return self._candidate("CSS", query, f"stable_attr:{test_name}", 1, ctx)

        for attr, getter in SEMANTIC_ATTRS:
            value = getter(descriptor)
            if value and ctx.unique(lambda item, getter=getter, value=value: getter(item) == value):
                query = scope.css(f"{tag}[{attr}={css_attr_literal(value)}]")
                return self._candidate("CSS", query, f"stable_attr:{attr}", 1, ctx)

        input_type = descriptor.input_type
        for attr, getter in SEMANTIC_ATTRS:
            value = getter(descriptor)
            if not (value and input_type):
                continue
            if ctx.unique(
                lambda item, getter=getter, value=value: getter(item) == value and item.input_type == input_type
            ):
                query = scope.css(f"{tag}[{attr}={css_attr_literal(value)}][type={css_attr_literal(input_type)}]")
                return self._candidate("CSS", query, f"stable_attr:{attr}+type", 1, ctx)

        token = ctx.pick_class(hashed=False)
        if token:
            return self._candidate("CSS", scope.css(f"{tag}.{escape_css_identifier(token)}"), "meaningful_class", 1, ctx)

        if input_type and ctx.unique(lambda item: item.input_type == input_type):
            query = scope.css(f"{tag}[type={css_attr_literal(input_type)}]")
            return self._candidate("CSS", query, "input_type", 1, ctx)

        base = tag
        if tag == "input" and input_type:
            base += f"[type={css_attr_literal(input_type)}]"
        position = ctx.ordinal()
        if position > 0:
            # Playwright selector chaining; nth is zero based.
            query = f"{scope.css(base)} >> nth={position - 1}"
            return self._candidate("CSS", query, "nth_fallback", 1, ctx, uses_nth=True)

        if self.allow_hashed_last_resort:
            token = ctx.pick_class(hashed=True)
            if token:
                return self._candidate("CSS", scope.css(f"{tag}.{escape_css_identifier(token)}"), "hashed_class", 1, ctx)

        return self._candidate("CSS", scope.css(tag), "bare_tag", len(ctx.peers), ctx)

    def build_pair(
        self, descriptor: ElementDescriptor, snapshot: CandidateSnapshot
    ) -> tuple[LocatorCandidate, LocatorCandidate]:
        xpath = self.build_xpath(descriptor, snapshot)
        css = self.build_css(descriptor, snapshot)
        LOGGER.debug(
            "Locators for %s: xpath=%s (%s) css=%s (%s)",
            descriptor.signature(),
            xpath.locator,
            xpath.rule,
            css.locator,
            css.rule,
        )
        return xpath, css

    @staticmethod
    def _candidate(
        locator_type: LocatorType,
        locator: str,
        rule: str,
        uniqueness_count: int,
        ctx: _Context,
        uses_nth: bool = False,
    ) -> LocatorCandidate:
        metadata: dict[str, Any] = {"scoped": ctx.scope.scoped, "container": ctx.descriptor.container}
        if uses_nth:
            metadata["uses_nth"] = True
        return LocatorCandidate(locator_type, locator, rule, uniqueness_count, metadata)


def _class_predicate(token: str) -> str:
    return f"contains(concat(' ', normalize-space(@class), ' '), {xpath_literal(f' {token} ')})"


def build_quick_locator(
    locator_type: LocatorType, descriptor: ElementDescriptor, executor: QueryExecutor
) -> LocatorCandidate:
    """Best-effort locator for an element found through an explicit query.

    No snapshot exists here. The id wins outright, every other anchor is checked
    against the live page and the first one with exactly one match wins.
    """
    tag = (descriptor.tag or "").strip().lower() or "*"
    for attr in QUICK_ATTRS:
        query = _quick_query(locator_type, tag, attr, descriptor)
        if not query:
            continue
        if attr == "id" or count_locator_matches(executor, locator_type, query) == 1:
            rule = "stable_attr:" + (descriptor.test_attribute_name if attr == "test" else attr)
            return LocatorCandidate(locator_type, query, rule, 1, {"quick": True})

    fallback = f"//{tag}" if locator_type == "XPath" else tag
    count = count_locator_matches(executor, locator_type, fallback)
    return LocatorCandidate(locator_type, fallback, "bare_tag", count, {"quick": True})


def _quick_query(locator_type: LocatorType, tag: str, attr: str, descriptor: ElementDescriptor) -> str | None:
    if attr == "id":
        value = descriptor.id
        if not value:
            return None
        if locator_type == "XPath":
            return f"//*[@id={xpath_literal(value)}]"
        return f"#{escape_css_identifier(value)}" if is_css_identifier(value) else f"[id={css_attr_literal(value)}]"

    if attr == "test":
        attr, value = descriptor.test_attribute_name, descriptor.test_attribute_value
    else:
        value = dict(SEMANTIC_ATTRS)[attr](descriptor)
    if not (attr and value):
        return None
    if locator_type == "XPath":
        return f"//{tag}[@{attr}={xpath_literal(value)}]"
    return f"{tag}[{attr}={css_attr_literal(value)}]"

