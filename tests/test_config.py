import pytest

from intentlocator.config import SessionSettings
from intentlocator.exceptions import InvalidLanguage
from intentlocator.models import Language, LocatorLogDetail
from intentlocator.selector_rules import TEST_ATTR_PRIORITY


def test_defaults_without_environment() -> None:
    settings = SessionSettings.from_env({})

    assert settings == SessionSettings()
    assert settings.language is Language.EN
    assert settings.log_detail is LocatorLogDetail.NONE
    assert settings.consistency_check is False
    assert settings.test_attributes == TEST_ATTR_PRIORITY


def test_values_are_read_from_prefixed_variables() -> None:
    settings = SessionSettings.from_env(
        {
            "INTENTLOCATOR_LANGUAGE": "RU",
            "INTENTLOCATOR_LOG_DETAIL": "xpath-only",
            "INTENTLOCATOR_CONSISTENCY_CHECK": "yes",
            "INTENTLOCATOR_ALLOW_HASHED_LAST_RESORT": "1",
            "INTENTLOCATOR_TEST_ATTRIBUTES": "Data-QA, data-test,,",
            "INTENTLOCATOR_LOG_FILE": "/tmp/intentlocator.log",
            "LANGUAGE": "en",
        }
    )

    assert settings.language is Language.RU
    assert settings.log_detail is LocatorLogDetail.XPATH_ONLY
    assert settings.consistency_check is True
    assert settings.allow_hashed_last_resort is True
    assert settings.test_attributes == ("data-qa", "data-test")
    assert settings.log_file == "/tmp/intentlocator.log"


def test_unrecognized_flag_keeps_default() -> None:
    settings = SessionSettings.from_env({"INTENTLOCATOR_CONSISTENCY_CHECK": "maybe"})

    assert settings.consistency_check is False


def test_unsupported_language_is_rejected() -> None:
    with pytest.raises(InvalidLanguage):
        SessionSettings.from_env({"INTENTLOCATOR_LANGUAGE": "de"})


def test_unsupported_log_detail_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unsupported log detail"):
        SessionSettings.from_env({"INTENTLOCATOR_LOG_DETAIL": "verbose"})
