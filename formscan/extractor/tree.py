"""Document tree capability used by the field extractor.

The extractor never talks to a browser or parser directly. It only needs to
query by CSS selector, read text and attributes, walk up to an ancestor and
ask whether a node is visible. ``HtmlDocument`` provides that over serialized
HTML; ``formscan.browser.document.PageDocument`` provides it over a live page.
"""
import logging
import threading
from typing import Callable, Hashable, Optional, Protocol

from bs4 import BeautifulSoup, Tag

from .waiter import wait_for_identifier

logger = logging.getLogger(__name__)


def css_string(value: str) -> str:
    """Quote a value for use inside a CSS attribute selector."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class DocumentNode(Protocol):
    """A single element in a document tree."""

    @property
    def tag(self) -> str: ...

    @property
    def key(self) -> Hashable: ...

    def get_attribute(self, name: str) -> Optional[str]: ...

    def has_attribute(self, name: str) -> bool: ...

    def text(self) -> str: ...

    def query_selector_all(self, selector: str) -> list["DocumentNode"]: ...

    def closest(self, selector: str) -> Optional["DocumentNode"]: ...

    def is_visible(self) -> bool: ...


class DocumentTree(Protocol):
    """A whole document that can be searched and waited on."""

    @property
    def root(self) -> DocumentNode: ...

    def query_selector(self, selector: str) -> Optional[DocumentNode]: ...

    def query_selector_all(self, selector: str) -> list[DocumentNode]: ...

    def find_by_id(self, identifier: str) -> Optional[DocumentNode]: ...

    def find_label_for(self, identifier: str) -> Optional[DocumentNode]: ...

    def wait_for_identifier(self, identifier: str, timeout: float) -> DocumentNode: ...


def _style_hides(style: str) -> bool:
    for declaration in style.split(";"):
        if ":" not in declaration:
            continue
        prop, _, value = declaration.partition(":")
        prop = prop.strip().lower()
        value = value.strip().lower().replace("!important", "").strip()
        if prop == "display" and value == "none":
            return True
        if prop == "visibility" and value in ("hidden", "collapse"):
            return True
        if prop == "opacity":
            try:
                if float(value) == 0:
                    return True
            except ValueError:
                continue
    return False


class HtmlNode:
    """DocumentNode over a BeautifulSoup tag."""

    def __init__(self, tag: Tag) -> None:
        self._tag = tag

    def __eq__(self, other: object) -> bool:
        return isinstance(other, HtmlNode) and other._tag is self._tag

    def __hash__(self) -> int:
        return id(self._tag)

    def __repr__(self) -> str:
        return f"HtmlNode(<{self._tag.name} id={self._tag.get('id')!r}>)"

    @property
    def tag(self) -> str:
        return self._tag.name.lower()

    @property
    def key(self) -> Hashable:
        return id(self._tag)

    def get_attribute(self, name: str) -> Optional[str]:
        value = self._tag.get(name)
        if value is None:
            return None
        # multi-valued attributes like class come back as lists
        if isinstance(value, list):
            return " ".join(value)
        return value

    def has_attribute(self, name: str) -> bool:
        return self._tag.has_attr(name)

    def text(self) -> str:
        return self._tag.get_text(" ")

    def query_selector_all(self, selector: str) -> list["HtmlNode"]:
        return [HtmlNode(t) for t in self._tag.select(selector)]

    def closest(self, selector: str) -> Optional["HtmlNode"]:
        found = self._tag.css.closest(selector)
        return HtmlNode(found) if found is not None else None

    def is_visible(self) -> bool:
        if (self._tag.get("type") or "").lower() == "hidden":
            return False
        node: Optional[Tag] = self._tag
        while node is not None and isinstance(node, Tag):
            if node.has_attr("hidden"):
                return False
            if _style_hides(node.get("style") or ""):
                return False
            node = node.parent
        return True


class HtmlDocument:
    """DocumentTree over serialized HTML.

    Changes made through ``mutate`` notify observers, which is what
    ``wait_for_identifier`` blocks on.
    """

    def __init__(self, html: str) -> None:
        self._soup = BeautifulSoup(html, "html.parser")
        self._observers: list[Callable[[], None]] = []
        self._lock = threading.Lock()
        # guards the soup; waiter callbacks look nodes up from the mutating thread
        self._tree_lock = threading.RLock()

    @property
    def soup(self) -> BeautifulSoup:
        return self._soup

    @property
    def root(self) -> HtmlNode:
        return HtmlNode(self._soup)

    @property
    def observer_count(self) -> int:
        with self._lock:
            return len(self._observers)

    def query_selector(self, selector: str) -> Optional[HtmlNode]:
        with self._tree_lock:
            found = self._soup.select_one(selector)
        return HtmlNode(found) if found is not None else None

    def query_selector_all(self, selector: str) -> list[HtmlNode]:
        with self._tree_lock:
            return [HtmlNode(t) for t in self._soup.select(selector)]

    def find_by_id(self, identifier: str) -> Optional[HtmlNode]:
        with self._tree_lock:
            found = self._soup.find(id=identifier)
        return HtmlNode(found) if isinstance(found, Tag) else None

    def find_label_for(self, identifier: str) -> Optional[HtmlNode]:
        return self.query_selector(f"label[for={css_string(identifier)}]")

    def observe(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register a change callback. Returns the function that removes it."""
        with self._lock:
            self._observers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._observers:
                    self._observers.remove(callback)

        return unsubscribe

    def mutate(self, change: Callable[[BeautifulSoup], None]) -> None:
        """Apply a change to the tree and notify observers."""
        with self._tree_lock:
            change(self._soup)
            with self._lock:
                observers = list(self._observers)
            for callback in observers:
                callback()

    def append_html(self, selector: str, html: str) -> None:
        """Parse ``html`` and append it under the first node matching ``selector``."""
        def change(soup: BeautifulSoup) -> None:
            parent = soup.select_one(selector)
            if parent is None:
                raise ValueError(f"No element matches {selector!r}")
            fragment = BeautifulSoup(html, "html.parser")
            for child in list(fragment.contents):
                parent.append(child.extract())

        self.mutate(change)

    def wait_for_identifier(self, identifier: str, timeout: float) -> HtmlNode:
        return wait_for_identifier(self, identifier, timeout)
