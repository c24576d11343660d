from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping

from .intents import coerce_language
from .models import Language, LocatorLogDetail
from .selector_rules import TEST_ATTR_PRIORITY

ENV_PREFIX = "INTENTLOCATOR_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True, slots=True)
class SessionSettings:
    language: Language = Language.EN
    log_detail: LocatorLogDetail = LocatorLogDetail.NONE
    consistency_check: bool = False
    allow_hashed_last_resort: bool = False
    test_attributes: tuple[str, ...] = field(default=TEST_ATTR_PRIORITY)
    log_file: str | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> SessionSettings:
        env = os.environ if environ is None else environ
        defaults = cls()

        language = defaults.language
        raw_language = _read(env, "LANGUAGE")
        if raw_language:
            language = coerce_language(raw_language)

        log_detail = defaults.log_detail
        raw_detail = _read(env, "LOG_DETAIL")
        if raw_detail:
            log_detail = _parse_log_detail(raw_detail)

        raw_attrs = _read(env, "TEST_ATTRIBUTES")
        test_attributes = defaults.test_attributes
        if raw_attrs:
            parsed = tuple(item.strip().lower() for item in raw_attrs.split(",") if item.strip())
            test_attributes = parsed or defaults.test_attributes

        return cls(
            language=language,
            log_detail=log_detail,
            consistency_check=_parse_bool(_read(env, "CONSISTENCY_CHECK"), defaults.consistency_check),
            allow_hashed_last_resort=_parse_bool(
                _read(env, "ALLOW_HASHED_LAST_RESORT"), defaults.allow_hashed_last_resort
            ),
            test_attributes=test_attributes,
            log_file=_read(env, "LOG_FILE") or None,
        )


def _read(env: Mapping[str, str], key: str) -> str:
    return str(env.get(ENV_PREFIX + key, "") or "").strip()


def _parse_bool(raw: str, default: bool) -> bool:
    text = raw.lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    return default


def _parse_log_detail(raw: str) -> LocatorLogDetail:
    text = raw.strip().lower().replace("-", "_")
    for item in LocatorLogDetail:
        if text in (item.value, item.name.lower()):
            return item
    raise ValueError(f"Unsupported log detail: {raw!r}")

