"""Bounded wait for a field to appear in an observable document."""
import logging
import threading
import time
from typing import Any, Callable, Optional, Protocol

from .errors import FieldTimeoutError

logger = logging.getLogger(__name__)


class ObservableDocument(Protocol):
    def find_by_id(self, identifier: str) -> Optional[Any]: ...

    def observe(self, callback: Callable[[], None]) -> Callable[[], None]: ...


def wait_for_identifier(document: ObservableDocument, identifier: str, timeout: float) -> Any:
    """Block until an element with ``identifier`` exists or ``timeout`` elapses.

    The change observer is always removed before returning or raising.

    Args:
        document: Document exposing ``find_by_id`` and ``observe``.
        identifier: Element id to wait for.
        timeout: Maximum wait in seconds.

    Returns:
        The node that appeared.

    Raises:
        FieldTimeoutError: If the element did not appear in time.
    """
    found = document.find_by_id(identifier)
    if found is not None:
        return found

    appeared = threading.Event()

    def on_change() -> None:
        if document.find_by_id(identifier) is not None:
            appeared.set()

    start = time.monotonic()
    unsubscribe = document.observe(on_change)
    try:
        # a change may have landed between the first lookup and observe()
        if document.find_by_id(identifier) is None and not appeared.wait(timeout):
            raise FieldTimeoutError(identifier, timeout)
    finally:
        unsubscribe()

    logger.debug(f"Field '{identifier}' appeared after {time.monotonic() - start:.3f}s")
    return document.find_by_id(identifier)
