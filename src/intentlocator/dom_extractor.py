from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence, TYPE_CHECKING

from playwright.sync_api import ElementHandle, Error as PlaywrightError

from .models import ElementDescriptor, LocatorType
from .selector_rules import HINT_ARIA_HIDDEN, TEST_ATTR_PRIORITY, hint_token, normalize_classes, normalize_space

if TYPE_CHECKING:
    from playwright.sync_api import Page

LOGGER = logging.getLogger("intentlocator.dom")

CANDIDATE_SELECTOR = "body *"

_PAYLOAD_JS = """
(el, testAttrs) => {
  const norm = (value) => (value || '').replace(/\\s+/g, ' ').trim();
  const attr = (node, name) => norm(node && node.getAttribute ? node.getAttribute(name) : '');
  const text = (node) => (node && node.innerText) ? node.innerText : '';

  let testAttribute = null;
  for (const name of testAttrs) {
    const value = attr(el, name);
    if (value) {
      testAttribute = [name, value];
      break;
    }
  }

  let labelText = '';
  const id = attr(el, 'id');
  if (id) {
    for (const label of document.querySelectorAll('label[for]')) {
      if (label.getAttribute('for') === id && norm(label.innerText)) {
        labelText = norm(label.innerText);
        break;
      }
    }
  }
  if (!labelText) {
    const parentLabel = el.closest('label');
    if (parentLabel) labelText = norm(parentLabel.innerText);
  }

  const form = el.closest('form');
  let container = '';
  if (form) {
    container = attr(form, 'id') ? 'id:' + attr(form, 'id')
      : attr(form, 'name') ? 'name:' + attr(form, 'name')
      : attr(form, 'action') ? 'action:' + attr(form, 'action')
      : 'form';
  }

  return {
    tag: el.tagName.toLowerCase(),
    type: attr(el, 'type'),
    id,
    name: attr(el, 'name'),
    classes: Array.from(el.classList || []),
    test_attribute: testAttribute,
    label_text: labelText,
    placeholder: attr(el, 'placeholder'),
    aria_label: attr(el, 'aria-label'),
    title: attr(el, 'title'),
    surrounding_text: norm(text(el.parentElement) + ' ' + text(el.previousElementSibling) + ' ' + text(el.nextElementSibling)),
    role: attr(el, 'role'),
    contenteditable: attr(el, 'contenteditable'),
    aria_haspopup: attr(el, 'aria-haspopup'),
    aria_expanded: attr(el, 'aria-expanded'),
    aria_controls: attr(el, 'aria-controls'),
    aria_hidden: attr(el, 'aria-hidden'),
    container,
  };
}
"""


def build_hints(payload: Mapping[str, Any]) -> str:
    hints: list[str] = []
    role = str(payload.get("role") or "").strip()
    if role:
        hints.append(hint_token("role", role))

    editable = str(payload.get("contenteditable") or "").strip().lower()
    if editable and editable != "false":
        hints.append(hint_token("contenteditable", "true"))

    for key, name in (("aria_haspopup", "aria-haspopup"), ("aria_expanded", "aria-expanded")):
        value = str(payload.get(key) or "").strip()
        if value:
            hints.append(hint_token(name, value))

    controls = str(payload.get("aria_controls") or "").strip()
    if controls:
        hints.append(f"[hint:aria-controls={controls}]")

    if str(payload.get("aria_hidden") or "").strip().lower() == "true":
        hints.append(HINT_ARIA_HIDDEN)
    return "".join(hints)


def descriptor_from_payload(payload: Mapping[str, Any]) -> ElementDescriptor:
    surrounding = normalize_space(payload.get("surrounding_text"), limit=500)
    hints = build_hints(payload)
    if hints:
        surrounding = f"{surrounding} {hints}" if surrounding else hints

    test_attribute = None
    raw_test = payload.get("test_attribute")
    if isinstance(raw_test, (list, tuple)) and len(raw_test) == 2:
        name, value = (str(item or "").strip() for item in raw_test)
        if name and value:
            test_attribute = (name, value)

    return ElementDescriptor(
        tag=str(payload.get("tag") or "").strip().lower(),
        input_type=str(payload.get("type") or "").strip().lower(),
        id=str(payload.get("id") or "").strip(),
        name=str(payload.get("name") or "").strip(),
        classes=normalize_classes(payload.get("classes")),
        test_attribute=test_attribute,
        label_text=normalize_space(payload.get("label_text")),
        placeholder=str(payload.get("placeholder") or "").strip(),
        aria_label=str(payload.get("aria_label") or "").strip(),
        title=str(payload.get("title") or "").strip(),
        surrounding_text=surrounding,
        container=str(payload.get("container") or "").strip(),
    )


class PlaywrightCandidateSource:
    def __init__(
        self,
        page: Page,
        test_attributes: Sequence[str] = TEST_ATTR_PRIORITY,
        selector: str = CANDIDATE_SELECTOR,
    ) -> None:
        self.page = page
        self.test_attributes = [item for item in test_attributes if item]
        self.selector = selector

    def context_id(self) -> str:
        return self.page.url

    def collect(self) -> list[tuple[ElementDescriptor, ElementHandle]]:
        pairs: list[tuple[ElementDescriptor, ElementHandle]] = []
        for handle in self.page.query_selector_all(self.selector):
            descriptor = self.describe(handle)
            if descriptor is not None:
                pairs.append((descriptor, handle))
        return pairs

    def describe(self, handle: ElementHandle) -> ElementDescriptor | None:
        try:
            payload = handle.evaluate(_PAYLOAD_JS, self.test_attributes)
        except PlaywrightError as exc:
            # Nodes detached between query and evaluate are skipped.
            LOGGER.debug("Skipping element: %s", exc)
            return None
        if not isinstance(payload, dict):
            return None
        return descriptor_from_payload(payload)


class PlaywrightExecutor:
    def __init__(self, page: Page) -> None:
        self.page = page

    def find_all(self, locator_type: LocatorType, locator: str) -> list[ElementHandle]:
        text = str(locator or "").strip()
        if not text:
            return []
        try:
            if locator_type == "CSS":
                return self.page.query_selector_all(text)
            if locator_type == "XPath":
                return self.page.query_selector_all(f"xpath={text}")
        except PlaywrightError:
            return []
        return []

    def is_same(self, first: ElementHandle, second: ElementHandle) -> bool:
        if first is second:
            return True
        try:
            return bool(first.evaluate("(node, other) => node === other", second))
        except PlaywrightError:
            return False
