import pytest

from intentlocator.exceptions import BlankIntent, IntentResolutionError, InvalidLanguage, UnknownIntent
from intentlocator.intents import DefaultIntentResolver
from intentlocator.models import Language, Role


def test_phrases_resolve_case_and_whitespace_insensitively() -> None:
    resolver = DefaultIntentResolver()

    assert resolver.resolve("  Login Field ", Language.EN) is Role.LOGIN_FIELD
    assert resolver.resolve("password", Language.EN) is Role.PASSWORD_FIELD
    assert resolver.resolve("Sign in", "en") is Role.LOGIN_BUTTON
    assert resolver.resolve("Пароль", Language.RU) is Role.PASSWORD_FIELD
    assert resolver.resolve("войти", "RU") is Role.LOGIN_BUTTON


def test_unknown_phrase_names_phrase_and_language() -> None:
    resolver = DefaultIntentResolver()

    with pytest.raises(UnknownIntent) as excinfo:
        resolver.resolve("foo bar", Language.EN)

    assert str(excinfo.value) == "Unknown intent for language EN: 'foo bar'"


def test_phrase_from_other_language_is_unknown() -> None:
    with pytest.raises(UnknownIntent):
        DefaultIntentResolver().resolve("sign in", Language.RU)


def test_missing_or_unsupported_language_is_rejected() -> None:
    resolver = DefaultIntentResolver()

    with pytest.raises(InvalidLanguage):
        resolver.resolve("login field", None)
    with pytest.raises(InvalidLanguage):
        resolver.resolve("login field", "de")


def test_blank_phrase_is_rejected() -> None:
    resolver = DefaultIntentResolver()

    for phrase in (None, "", "   "):
        with pytest.raises(BlankIntent):
            resolver.resolve(phrase, Language.EN)


def test_intent_errors_share_a_base_class() -> None:
    with pytest.raises(IntentResolutionError):
        DefaultIntentResolver().resolve("foo bar", Language.EN)


def test_custom_phrase_table() -> None:
    resolver = DefaultIntentResolver({Language.EN: {"User ID": Role.LOGIN_FIELD}})

    assert resolver.resolve("user id", Language.EN) is Role.LOGIN_FIELD
    with pytest.raises(InvalidLanguage):
        resolver.resolve("логин", Language.RU)
