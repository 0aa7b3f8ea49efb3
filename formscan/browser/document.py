"""DocumentTree over a live Playwright page or frame."""
import logging
from typing import Hashable, Optional, Union

from playwright.sync_api import ElementHandle, Frame, Page as PlaywrightPage
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from ..extractor.errors import FieldTimeoutError
from ..extractor.tree import css_string

logger = logging.getLogger(__name__)

# Mirrors computed-style checks in the browser, ancestors included.
IS_VISIBLE_SCRIPT = """
(el) => {
    for (let n = el; n && n.nodeType === Node.ELEMENT_NODE; n = n.parentElement) {
        if (n.hidden) return false;
        const style = window.getComputedStyle(n);
        if (style.display === 'none') return false;
        if (style.visibility === 'hidden' || style.visibility === 'collapse') return false;
        if (parseFloat(style.opacity) === 0) return false;
    }
    return el.type !== 'hidden';
}
"""

NODE_KEY_SCRIPT = """
(el) => {
    if (!el.dataset.formscanKey) {
        window.__formscanSeq = (window.__formscanSeq || 0) + 1;
        el.dataset.formscanKey = String(window.__formscanSeq);
    }
    return el.dataset.formscanKey;
}
"""


class PageNode:
    """DocumentNode over a Playwright ElementHandle."""

    def __init__(self, handle: ElementHandle) -> None:
        self._handle = handle
        self._key: Optional[str] = None

    @property
    def handle(self) -> ElementHandle:
        return self._handle

    @property
    def tag(self) -> str:
        return self._handle.evaluate("el => el.tagName.toLowerCase()")

    @property
    def key(self) -> Hashable:
        if self._key is None:
            self._key = self._handle.evaluate(NODE_KEY_SCRIPT)
        return self._key

    def get_attribute(self, name: str) -> Optional[str]:
        return self._handle.get_attribute(name)

    def has_attribute(self, name: str) -> bool:
        return self._handle.evaluate("(el, name) => el.hasAttribute(name)", name)

    def text(self) -> str:
        return self._handle.evaluate("el => el.innerText || el.textContent || ''")

    def query_selector_all(self, selector: str) -> list["PageNode"]:
        return [PageNode(h) for h in self._handle.query_selector_all(selector)]

    def closest(self, selector: str) -> Optional["PageNode"]:
        found = self._handle.evaluate_handle("(el, sel) => el.closest(sel)", selector)
        element = found.as_element()
        return PageNode(element) if element is not None else None

    def is_visible(self) -> bool:
        return self._handle.evaluate(IS_VISIBLE_SCRIPT)


class PageDocument:
    """DocumentTree over a Playwright page or frame.

    Visibility is recomputed from computed style on every call, so a scan
    always sees the current page state.
    """

    def __init__(self, page: Union[PlaywrightPage, Frame]) -> None:
        self._page = page

    @property
    def root(self) -> PageNode:
        handle = self._page.query_selector("html")
        if handle is None:
            raise RuntimeError("Page has no document element")
        return PageNode(handle)

    def query_selector(self, selector: str) -> Optional[PageNode]:
        handle = self._page.query_selector(selector)
        return PageNode(handle) if handle is not None else None

    def query_selector_all(self, selector: str) -> list[PageNode]:
        return [PageNode(h) for h in self._page.query_selector_all(selector)]

    def find_by_id(self, identifier: str) -> Optional[PageNode]:
        return self.query_selector(f"[id={css_string(identifier)}]")

    def find_label_for(self, identifier: str) -> Optional[PageNode]:
        return self.query_selector(f"label[for={css_string(identifier)}]")

    def wait_for_identifier(self, identifier: str, timeout: float) -> PageNode:
        """Wait for an element id to be attached. Playwright disposes its watcher either way."""
        try:
            handle = self._page.wait_for_selector(
                f"[id={css_string(identifier)}]",
                state="attached",
                timeout=timeout * 1000,
            )
        except PlaywrightTimeoutError:
            raise FieldTimeoutError(identifier, timeout) from None
        if handle is None:
            raise FieldTimeoutError(identifier, timeout)
        return PageNode(handle)
