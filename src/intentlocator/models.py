from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

LocatorType = Literal["CSS", "XPath"]


class Role(str, Enum):
    LOGIN_FIELD = "login_field"
    PASSWORD_FIELD = "password_field"
    LOGIN_BUTTON = "login_button"


class Language(str, Enum):
    EN = "en"
    RU = "ru"


class LocatorLogDetail(str, Enum):
    NONE = "none"
    XPATH_ONLY = "xpath_only"
    CSS_ONLY = "css_only"
    BOTH = "both"

    @property
    def includes_xpath(self) -> bool:
        return self in (LocatorLogDetail.XPATH_ONLY, LocatorLogDetail.BOTH)

    @property
    def includes_css(self) -> bool:
        return self in (LocatorLogDetail.CSS_ONLY, LocatorLogDetail.BOTH)


@dataclass(frozen=True, slots=True)
class ElementDescriptor:
    """Attribute snapshot of one live node.

    Descriptors compare by value. Two equal descriptors may still stand for two
    different nodes, so nothing maps a descriptor back to its node through ``==``.
    """

    tag: str = ""
    input_type: str = ""
    id: str = ""
    name: str = ""
    classes: tuple[str, ...] = ()
    test_attribute: tuple[str, str] | None = None
    label_text: str = ""
    placeholder: str = ""
    aria_label: str = ""
    title: str = ""
    surrounding_text: str = ""
    container: str = ""

    @property
    def test_attribute_name(self) -> str:
        return self.test_attribute[0] if self.test_attribute else ""

    @property
    def test_attribute_value(self) -> str:
        return self.test_attribute[1] if self.test_attribute else ""

    def signature(self) -> str:
        pieces = [f"tag={self.tag or '?'}"]
        for key, value in (
            ("type", self.input_type),
            ("id", self.id),
            ("name", self.name),
            (self.test_attribute_name, self.test_attribute_value),
            ("aria-label", self.aria_label),
            ("placeholder", self.placeholder),
            ("label", self.label_text),
            ("form", self.container),
        ):
            if key and value:
                pieces.append(f"{key}={value}")
        return "|".join(pieces)


@dataclass(frozen=True, slots=True)
class Match:
    role: Role
    descriptor: ElementDescriptor
    score: float


@dataclass(slots=True)
class LocatorCandidate:
    locator_type: LocatorType
    locator: str
    rule: str
    uniqueness_count: int = 1
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_fallback(self) -> bool:
        return self.rule == "bare_tag"


@dataclass(slots=True)
class ResolvedElement:
    target: str
    role: Role | None
    handle: Any
    descriptor: ElementDescriptor | None
    score: float | None = None
    xpath: LocatorCandidate | None = None
    css: LocatorCandidate | None = None

    @property
    def has_locators(self) -> bool:
        return self.xpath is not None and self.css is not None
