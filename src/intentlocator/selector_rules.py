from __future__ import annotations

import re
from typing import Iterable, Sequence

TEST_ATTR_PRIORITY = (
    "data-testid",
    "data-test-id",
    "data-test",
    "data-qa",
    "data-cy",
    "data-automation-id",
    "data-automation",
)

TEXT_INPUT_TYPES = frozenset({"", "text", "email", "tel", "number", "search"})
BUTTON_INPUT_TYPES = frozenset({"submit", "button"})
WEAK_CONTAINER_TAGS = frozenset({"div", "span"})

HINT_ROLE_TEXTBOX = "[hint:role=textbox]"
HINT_ROLE_COMBOBOX = "[hint:role=combobox]"
HINT_CONTENTEDITABLE = "[hint:contenteditable=true]"
HINT_ARIA_HIDDEN = "[hint:aria-hidden=true]"
TEXTBOX_HINTS = (HINT_ROLE_TEXTBOX, HINT_ROLE_COMBOBOX, HINT_CONTENTEDITABLE)

LOGIN_TEXT_KEYWORDS = (
    "login",
    "user",
    "username",
    "email",
    "e-mail",
    "mail",
    "phone",
    "tel",
    "логин",
    "польз",
    "почт",
    "тел",
)
LOGIN_TEST_KEYWORDS = ("login", "user", "username", "email", "e-mail", "mail", "логин", "польз", "почт")
PASSWORD_KEYWORDS = ("password", "pass", "pwd", "secret", "пароль", "пасс")
LOGIN_CONFLICT_KEYWORDS = ("password", "пароль")
PASSWORD_CONFLICT_KEYWORDS = ("login", "username", "email", "логин", "почт")
BUTTON_TEXT_KEYWORDS = (
    "login",
    "sign in",
    "signin",
    "submit",
    "enter",
    "continue",
    "войти",
    "вход",
    "логин",
    "авториз",
    "продолж",
)
BUTTON_TEST_KEYWORDS = (
    "login",
    "signin",
    "sign-in",
    "sign in",
    "submit",
    "enter",
    "войти",
    "вход",
    "логин",
    "авториз",
)
REGISTRATION_KEYWORDS = ("register", "signup", "sign up", "регист")

_HEX_TOKEN = re.compile(r"^[0-9a-f]+$", re.IGNORECASE)


def normalize_space(value: str | None, limit: int = 200) -> str:
    if not value:
        return ""
    compact = re.sub(r"\s+", " ", str(value)).strip()
    return compact[:limit] if compact else ""


def normalize_classes(raw: Sequence[str] | str | None) -> tuple[str, ...]:
    if not raw:
        return ()
    if isinstance(raw, str):
        items = raw.split()
    else:
        items = [piece for item in raw if isinstance(item, str) for piece in item.split()]

    seen: set[str] = set()
    normalized: list[str] = []
    for item in items:
        clean = item.strip()
        if not clean or clean in seen:
            continue
        seen.add(clean)
        normalized.append(clean)
    return tuple(normalized)


def contains_any(text: str, keywords: Iterable[str]) -> bool:
    lowered = text.lower()
    return any(keyword in lowered for keyword in keywords)


def hint_token(name: str, value: str) -> str:
    return f"[hint:{name}={normalize_space(value, limit=80).lower()}]"


def _looks_hash_tail(tail: str) -> bool:
    if len(tail) < 5:
        return False
    digits = 0
    letters = 0
    for char in tail:
        if char.isdigit():
            digits += 1
        elif char.isalpha():
            letters += 1
        else:
            return False
    return digits >= 2 and letters >= 2


def is_hashed_class_token(token: str | None) -> bool:
    """Return True for class tokens that look emitted by CSS-in-JS or CSS modules tooling.

    Conservative on purpose: a false positive only removes a class from anchoring.
    Recognized shapes are ``css-<alnum>``, ``sc-<alnum>`` with mixed case or two
    digits, a ``__``/``--`` separated hash tail, ``_<hash tail>`` and hex blobs.
    """
    text = (token or "").strip()
    if len(text) < 5:
        return False

    if text.startswith("css-"):
        tail = text[4:]
        return len(tail) >= 5 and tail.isalnum()

    if text.startswith("sc-"):
        tail = text[3:]
        if not (5 <= len(tail) <= 12 and tail.isalnum()):
            return False
        has_upper = any(char.isupper() for char in tail)
        has_lower = any(char.islower() for char in tail)
        digits = sum(1 for char in tail if char.isdigit())
        return (has_upper and has_lower) or digits >= 2

    separator = max(text.rfind("__"), text.rfind("--"))
    if separator >= 0 and separator + 2 < len(text):
        if _looks_hash_tail(text[separator + 2 :]):
            return True

    if text[0] == "_" and _looks_hash_tail(text[1:]):
        return True

    return len(text) >= 8 and bool(_HEX_TOKEN.match(text)) and any(char.isdigit() for char in text)


def is_css_identifier(value: str) -> bool:
    return re.match(r"^[A-Za-z_][A-Za-z0-9_-]*$", value) is not None


def escape_css_string(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def escape_css_identifier(value: str) -> str:
    escaped: list[str] = []
    for index, char in enumerate(value):
        if char.isalnum() and char.isascii() and not (index == 0 and char.isdigit()):
            escaped.append(char)
        elif char in ("-", "_"):
            escaped.append(char)
        else:
            escaped.append(f"\\{ord(char):x} ")
    return "".join(escaped)


def css_attr_literal(value: str) -> str:
    return f'"{escape_css_string(value)}"'


def xpath_literal(value: str) -> str:
    if "'" not in value:
        return f"'{value}'"
    if '"' not in value:
        return f'"{value}"'
    pieces = value.split("'")
    quoted = [f"'{piece}'" for piece in pieces]
    return "concat(" + ", \"'\", ".join(quoted) + ")"
