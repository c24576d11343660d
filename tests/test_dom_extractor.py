from playwright.sync_api import Error as PlaywrightError

from intentlocator.dom_extractor import PlaywrightCandidateSource, PlaywrightExecutor, build_hints, descriptor_from_payload
from intentlocator.models import Role
from intentlocator.scoring import REJECTED_SCORE, score_element


class FakeHandle:
    def __init__(self, payload=None, error: bool = False) -> None:
        self.payload = payload
        self.error = error
        self.calls: list[object] = []

    def evaluate(self, expression: str, arg=None):
        self.calls.append(arg)
        if self.error:
            raise PlaywrightError("Element is not attached to the DOM")
        if isinstance(arg, FakeHandle):
            return arg is self
        return self.payload


class FakePage:
    def __init__(self, handles: list[FakeHandle], url: str = "https://example.test/login") -> None:
        self.handles = handles
        self.url = url
        self.selectors: list[str] = []

    def query_selector_all(self, selector: str) -> list[FakeHandle]:
        self.selectors.append(selector)
        if selector.startswith("xpath=//broken"):
            raise PlaywrightError("Unexpected token")
        return list(self.handles)


def _payload(**overrides):
    payload = {
        "tag": "INPUT",
        "type": "Text",
        "id": "",
        "name": "username",
        "classes": ["form-control", "css-1a2b3c"],
        "test_attribute": ["data-qa", "login-input"],
        "label_text": "  Login \n name ",
        "placeholder": "Login",
        "aria_label": "",
        "title": "",
        "surrounding_text": "Sign in to continue",
        "role": "",
        "contenteditable": "",
        "aria_haspopup": "",
        "aria_expanded": "",
        "aria_controls": "",
        "aria_hidden": "",
        "container": "id:login",
    }
    payload.update(overrides)
    return payload


def test_descriptor_from_payload_normalizes_fields() -> None:
    descriptor = descriptor_from_payload(_payload())

    assert descriptor.tag == "input"
    assert descriptor.input_type == "text"
    assert descriptor.classes == ("form-control", "css-1a2b3c")
    assert descriptor.test_attribute == ("data-qa", "login-input")
    assert descriptor.label_text == "Login name"
    assert descriptor.surrounding_text == "Sign in to continue"
    assert descriptor.container == "id:login"


def test_hints_are_appended_to_surrounding_text() -> None:
    payload = _payload(role="Combobox", aria_expanded="false", contenteditable="", aria_controls="menu-1")

    assert build_hints(payload) == "[hint:role=combobox][hint:aria-expanded=false][hint:aria-controls=menu-1]"
    assert descriptor_from_payload(payload).surrounding_text.endswith("[hint:aria-controls=menu-1]")


def test_aria_hidden_element_is_rejected_by_scorer() -> None:
    descriptor = descriptor_from_payload(_payload(aria_hidden="true", surrounding_text=""))

    assert descriptor.surrounding_text == "[hint:aria-hidden=true]"
    assert score_element(Role.LOGIN_FIELD, descriptor) == REJECTED_SCORE


def test_incomplete_test_attribute_is_dropped() -> None:
    assert descriptor_from_payload(_payload(test_attribute=["data-qa", ""])).test_attribute is None
    assert descriptor_from_payload(_payload(test_attribute=None)).test_attribute is None


def test_candidate_source_skips_detached_nodes() -> None:
    live = FakeHandle(_payload())
    detached = FakeHandle(error=True)
    page = FakePage([live, detached])
    source = PlaywrightCandidateSource(page, test_attributes=["data-qa", ""])

    pairs = source.collect()

    assert [handle for _, handle in pairs] == [live]
    assert pairs[0][0].name == "username"
    assert live.calls == [["data-qa"]]
    assert source.context_id() == "https://example.test/login"
    assert page.selectors == ["body *"]


def test_executor_routes_grammars_and_swallows_query_errors() -> None:
    handle = FakeHandle(_payload())
    page = FakePage([handle])
    executor = PlaywrightExecutor(page)

    assert executor.find_all("CSS", "input") == [handle]
    assert executor.find_all("XPath", "//input") == [handle]
    assert executor.find_all("XPath", "//broken[") == []
    assert executor.find_all("CSS", "   ") == []
    assert page.selectors == ["input", "xpath=//input", "xpath=//broken["]


def test_executor_compares_nodes_in_page() -> None:
    first, second = FakeHandle(), FakeHandle()
    executor = PlaywrightExecutor(FakePage([]))

    assert executor.is_same(first, first) is True
    assert executor.is_same(first, second) is False
    assert executor.is_same(FakeHandle(error=True), second) is False
