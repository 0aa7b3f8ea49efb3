"""Chrome CDP connection management."""
import logging
from typing import Optional

from playwright.sync_api import Browser, Error, Playwright, sync_playwright

from .page import PAGE_LOAD_TIMEOUT_MS, Page

logger = logging.getLogger(__name__)


class BrowserConnection:
    """Attaches to a Chrome started with ``--remote-debugging-port``."""

    def __init__(self, cdp_port: int = 9333, timeout_ms: int = PAGE_LOAD_TIMEOUT_MS) -> None:
        self.cdp_port = cdp_port
        self.timeout_ms = timeout_ms
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    @property
    def endpoint(self) -> str:
        return f"http://127.0.0.1:{self.cdp_port}"

    @property
    def browser(self) -> Browser:
        """The attached browser.

        Raises:
            RuntimeError: If not connected.
        """
        if not self._browser:
            raise RuntimeError("Not connected. Call connect() first.")
        return self._browser

    def get_page(self, index: int = 0) -> Page:
        """Get an open tab by index, opening a new one if needed."""
        contexts = self.browser.contexts
        context = contexts[0] if contexts else self.browser.new_context()
        if index < len(context.pages):
            return Page(context.pages[index], timeout_ms=self.timeout_ms)
        return Page(context.new_page(), timeout_ms=self.timeout_ms)

    def connect(self) -> bool:
        """Attach to Chrome over CDP.

        Returns:
            True if attached, False if nothing answered on the port in time.
        """
        self._playwright = sync_playwright().start()
        try:
            self._browser = self._playwright.chromium.connect_over_cdp(
                self.endpoint, timeout=self.timeout_ms
            )
        except Error as e:
            logger.error(f"Could not attach to Chrome at {self.endpoint}: {e}")
            self.disconnect()
            return False
        logger.info(f"Connected to Chrome at {self.endpoint}")
        return True

    def disconnect(self) -> None:
        """Stop the Playwright driver; the Chrome process keeps running."""
        if self._playwright:
            self._playwright.stop()
        self._playwright = None
        self._browser = None
