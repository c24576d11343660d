from __future__ import annotations

from .models import ElementDescriptor, Role
from .selector_rules import (
    BUTTON_INPUT_TYPES,
    BUTTON_TEST_KEYWORDS,
    BUTTON_TEXT_KEYWORDS,
    HINT_ARIA_HIDDEN,
    LOGIN_CONFLICT_KEYWORDS,
    LOGIN_TEST_KEYWORDS,
    LOGIN_TEXT_KEYWORDS,
    PASSWORD_CONFLICT_KEYWORDS,
    PASSWORD_KEYWORDS,
    REGISTRATION_KEYWORDS,
    TEXT_INPUT_TYPES,
    WEAK_CONTAINER_TAGS,
    contains_any,
)

REJECTED_SCORE = -1000.0

SIGNAL_WEIGHTS: dict[str, float] = {
    "test_attr_present": 0.5,
    "test_attr_keyword": 2.0,
    "input": 3.0,
    "text_input_type": 2.0,
    "other_input_type": -1.0,
    "textarea": 3.0,
    "password_input_type": 4.0,
    "button": 3.0,
    "button_input_type": 3.0,
    "anchor": 1.0,
    "weak_container": 0.1,
    "field_keyword": 2.0,
    "button_keyword": 3.0,
    "login_conflict": -2.0,
    "password_conflict": -1.0,
    "registration_conflict": -1.5,
}


def is_rejected(descriptor: ElementDescriptor) -> bool:
    if descriptor.tag.lower() == "input" and descriptor.input_type.lower() == "hidden":
        return True
    return HINT_ARIA_HIDDEN in descriptor.surrounding_text.lower()


def score_element(role: Role, descriptor: ElementDescriptor) -> float:
    """Score how well a descriptor fits a role; zero or below means no match."""
    if is_rejected(descriptor):
        return REJECTED_SCORE

    if role is Role.LOGIN_FIELD:
        return _score_login_field(descriptor)
    if role is Role.PASSWORD_FIELD:
        return _score_password_field(descriptor)
    if role is Role.LOGIN_BUTTON:
        return _score_login_button(descriptor)
    raise ValueError(f"Unsupported role: {role!r}")


def _field_text(descriptor: ElementDescriptor) -> str:
    parts = (
        descriptor.label_text,
        descriptor.placeholder,
        descriptor.aria_label,
        descriptor.title,
        descriptor.surrounding_text,
        descriptor.name,
        descriptor.id,
        descriptor.test_attribute_value,
        descriptor.test_attribute_name,
    )
    return " ".join(part for part in parts if part).lower()


def _button_text(descriptor: ElementDescriptor) -> str:
    parts = (
        descriptor.label_text,
        descriptor.aria_label,
        descriptor.title,
        descriptor.surrounding_text,
        descriptor.name,
        descriptor.id,
        descriptor.test_attribute_value,
        descriptor.test_attribute_name,
    )
    return " ".join(part for part in parts if part).lower()


def _test_attribute_score(descriptor: ElementDescriptor, keywords: tuple[str, ...]) -> float:
    value = descriptor.test_attribute_value
    if not value:
        return 0.0
    score = SIGNAL_WEIGHTS["test_attr_present"]
    if contains_any(value, keywords):
        score += SIGNAL_WEIGHTS["test_attr_keyword"]
    return score


def _score_login_field(descriptor: ElementDescriptor) -> float:
    tag = descriptor.tag.lower()
    input_type = descriptor.input_type.lower()
    score = 0.0

    if tag == "input":
        score += SIGNAL_WEIGHTS["input"]
        if input_type in TEXT_INPUT_TYPES:
            score += SIGNAL_WEIGHTS["text_input_type"]
        else:
            score += SIGNAL_WEIGHTS["other_input_type"]
    elif tag == "textarea":
        score += SIGNAL_WEIGHTS["textarea"]
    elif tag in WEAK_CONTAINER_TAGS:
        score += SIGNAL_WEIGHTS["weak_container"]

    score += _test_attribute_score(descriptor, LOGIN_TEST_KEYWORDS)

    text = _field_text(descriptor)
    if contains_any(text, LOGIN_TEXT_KEYWORDS):
        score += SIGNAL_WEIGHTS["field_keyword"]
    if contains_any(text, LOGIN_CONFLICT_KEYWORDS):
        score += SIGNAL_WEIGHTS["login_conflict"]
    return score


def _score_password_field(descriptor: ElementDescriptor) -> float:
    tag = descriptor.tag.lower()
    score = 0.0

    if tag == "input":
        score += SIGNAL_WEIGHTS["input"]
        if descriptor.input_type.lower() == "password":
            score += SIGNAL_WEIGHTS["password_input_type"]
    elif tag in WEAK_CONTAINER_TAGS:
        score += SIGNAL_WEIGHTS["weak_container"]

    score += _test_attribute_score(descriptor, PASSWORD_KEYWORDS)

    text = _field_text(descriptor)
    if contains_any(text, PASSWORD_KEYWORDS):
        score += SIGNAL_WEIGHTS["field_keyword"]
    elif contains_any(text, PASSWORD_CONFLICT_KEYWORDS):
        # Only penalize identity words when nothing password-like is present.
        score += SIGNAL_WEIGHTS["password_conflict"]
    return score


def _score_login_button(descriptor: ElementDescriptor) -> float:
    tag = descriptor.tag.lower()
    input_type = descriptor.input_type.lower()
    score = 0.0

    if tag == "button":
        score += SIGNAL_WEIGHTS["button"]
    elif tag == "input" and input_type in BUTTON_INPUT_TYPES:
        score += SIGNAL_WEIGHTS["button_input_type"]
    elif tag == "a":
        score += SIGNAL_WEIGHTS["anchor"]
    elif tag in WEAK_CONTAINER_TAGS:
        score += SIGNAL_WEIGHTS["weak_container"]

    score += _test_attribute_score(descriptor, BUTTON_TEST_KEYWORDS)

    text = _button_text(descriptor)
    if contains_any(text, BUTTON_TEXT_KEYWORDS):
        score += SIGNAL_WEIGHTS["button_keyword"]
    if contains_any(text, REGISTRATION_KEYWORDS):
        score += SIGNAL_WEIGHTS["registration_conflict"]
    return score
