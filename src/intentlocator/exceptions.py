"""
Resolution and locator errors
"""

from __future__ import annotations


class IntentLocatorError(Exception):
    """Base exception for intent resolution"""
    pass


class IntentResolutionError(IntentLocatorError):
    """Phrase could not be mapped to a role"""
    pass


class UnknownIntent(IntentResolutionError):
    """Phrase is not in the role dictionary for the language"""
    pass


class InvalidLanguage(IntentResolutionError):
    """Language is missing or not supported"""
    pass


class BlankIntent(IntentResolutionError):
    """Phrase is empty or whitespace"""
    pass


class ElementSelectionError(IntentLocatorError):
    """No single element could be elected"""
    pass


class NoCandidates(ElementSelectionError):
    """Candidate source returned nothing"""
    pass


class NoSuitableMatch(ElementSelectionError):
    """Every tier scored zero or below"""
    pass


class AmbiguousMatch(ElementSelectionError):
    """Two candidates share the best score in a tier"""

    def __init__(self, message: str, first=None, second=None, score: float | None = None) -> None:
        super().__init__(message)
        self.first = first
        self.second = second
        self.score = score


class InternalInconsistency(IntentLocatorError):
    """Elected descriptor has no live handle in its snapshot"""
    pass


class LocatorError(IntentLocatorError):
    """Locator synthesis or verification error"""
    pass


class LocatorUnavailable(LocatorError):
    """A locator was requested but could not be produced"""
    pass


class ConsistencyCheckFailed(LocatorError):
    """A synthesized locator does not resolve back to the elected node"""

    def __init__(
        self,
        message: str,
        *,
        xpath: str,
        css: str,
        xpath_matches: bool,
        css_matches: bool,
    ) -> None:
        super().__init__(message)
        self.xpath = xpath
        self.css = css
        self.xpath_matches = xpath_matches
        self.css_matches = css_matches

    @property
    def mismatched(self) -> tuple[str, ...]:
        names: list[str] = []
        if not self.xpath_matches:
            names.append("xpath")
        if not self.css_matches:
            names.append("css")
        return tuple(names)
