from __future__ import annotations

from typing import Mapping

from .exceptions import BlankIntent, InvalidLanguage, UnknownIntent
from .models import Language, Role

INTENT_PHRASES: dict[Language, dict[str, Role]] = {
    Language.EN: {
        "login field": Role.LOGIN_FIELD,
        "username field": Role.LOGIN_FIELD,
        "username": Role.LOGIN_FIELD,
        "user name": Role.LOGIN_FIELD,
        "email": Role.LOGIN_FIELD,
        "email field": Role.LOGIN_FIELD,
        "password field": Role.PASSWORD_FIELD,
        "password": Role.PASSWORD_FIELD,
        "pass field": Role.PASSWORD_FIELD,
        "login button": Role.LOGIN_BUTTON,
        "login": Role.LOGIN_BUTTON,
        "log in": Role.LOGIN_BUTTON,
        "sign in": Role.LOGIN_BUTTON,
    },
    Language.RU: {
        "поле логина": Role.LOGIN_FIELD,
        "логин": Role.LOGIN_FIELD,
        "имя пользователя": Role.LOGIN_FIELD,
        "юзернейм": Role.LOGIN_FIELD,
        "почта": Role.LOGIN_FIELD,
        "email": Role.LOGIN_FIELD,
        "поле пароля": Role.PASSWORD_FIELD,
        "пароль": Role.PASSWORD_FIELD,
        "пасс": Role.PASSWORD_FIELD,
        "кнопка входа": Role.LOGIN_BUTTON,
        "войти": Role.LOGIN_BUTTON,
        "вход": Role.LOGIN_BUTTON,
    },
}


def coerce_language(language: Language | str | None) -> Language:
    if language is None:
        raise InvalidLanguage("Language must not be null")
    if isinstance(language, Language):
        return language
    text = str(language).strip().lower()
    for item in Language:
        if text in (item.value, item.name.lower()):
            return item
    raise InvalidLanguage(f"Unsupported language: {language!r}")


class DefaultIntentResolver:
    """Exact-match phrase table keyed by language."""

    def __init__(self, phrases: Mapping[Language, Mapping[str, Role]] | None = None) -> None:
        source = INTENT_PHRASES if phrases is None else phrases
        self._phrases = {
            language: {key.strip().lower(): role for key, role in table.items()}
            for language, table in source.items()
        }

    def resolve(self, phrase: str | None, language: Language | str | None) -> Role:
        if phrase is None or not phrase.strip():
            raise BlankIntent("Intent phrase must not be blank")
        lang = coerce_language(language)
        table = self._phrases.get(lang)
        if table is None:
            raise InvalidLanguage(f"Unsupported language: {lang.name}")
        key = phrase.strip().lower()
        role = table.get(key)
        if role is None:
            raise UnknownIntent(f"Unknown intent for language {lang.name}: '{phrase.strip()}'")
        return role
