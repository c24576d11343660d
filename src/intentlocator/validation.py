from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .exceptions import ConsistencyCheckFailed, LocatorUnavailable
from .models import LocatorCandidate
from .snapshot import QueryExecutor

LOGGER = logging.getLogger("intentlocator.validation")


@dataclass(frozen=True, slots=True)
class LocatorValidation:
    checked: bool
    match_count: int
    matches_original: bool
    message: str


def count_locator_matches(executor: QueryExecutor, locator_type: str, locator: str) -> int:
    text = str(locator or "").strip()
    if locator_type not in ("CSS", "XPath") or not text:
        return 0
    return len(executor.find_all(locator_type, text))


def validate_locator(executor: QueryExecutor, candidate: LocatorCandidate, original: Any) -> LocatorValidation:
    if candidate.is_fallback:
        return LocatorValidation(False, candidate.uniqueness_count, True, "Bare tag fallback is not expected to be unique.")

    found = executor.find_all(candidate.locator_type, candidate.locator)
    if len(found) != 1:
        return LocatorValidation(True, len(found), False, f"Locator matched {len(found)} elements.")
    if not executor.is_same(found[0], original):
        return LocatorValidation(True, 1, False, "Locator matched a different element.")
    return LocatorValidation(True, 1, True, "Locator resolves to the original element.")


def verify_locators(
    executor: QueryExecutor,
    target: str,
    original: Any,
    xpath: LocatorCandidate | None,
    css: LocatorCandidate | None,
) -> None:
    """Re-run both locators and require each to find exactly the original element."""
    if xpath is None or css is None:
        raise LocatorUnavailable(f"Consistency check for '{target}' needs both XPath and CSS locators")

    xpath_result = validate_locator(executor, xpath, original)
    css_result = validate_locator(executor, css, original)
    if not xpath_result.checked and not css_result.checked:
        LOGGER.debug("Consistency check skipped for %s: both locators are bare tag fallbacks", target)
        return

    if xpath_result.matches_original and css_result.matches_original:
        return

    raise ConsistencyCheckFailed(
        f"Consistency check failed for '{target}': "
        f"xpathMatchesOriginal={xpath_result.matches_original}, "
        f"cssMatchesOriginal={css_result.matches_original}, "
        f"xpath={xpath.locator}, css={css.locator}",
        xpath=xpath.locator,
        css=css.locator,
        xpath_matches=xpath_result.matches_original,
        css_matches=css_result.matches_original,
    )
