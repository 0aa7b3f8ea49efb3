"""Page wrapper with utility methods."""
import logging

from playwright.sync_api import Page as PlaywrightPage

from .document import PageDocument

logger = logging.getLogger(__name__)

PAGE_LOAD_TIMEOUT_MS: int = 30000
MEDIUM_WAIT_MS: int = 1500
MAX_NAVIGATION_RETRIES: int = 3


class Page:
    """Wrapper around Playwright Page with common utilities."""

    def __init__(self, page: PlaywrightPage, timeout_ms: int = PAGE_LOAD_TIMEOUT_MS) -> None:
        """Initialize page wrapper.

        Args:
            page: Playwright Page instance.
            timeout_ms: Navigation timeout per attempt.
        """
        self._page = page
        self.timeout_ms = timeout_ms

    @property
    def url(self) -> str:
        """Get current page URL."""
        return self._page.url

    @property
    def raw(self) -> PlaywrightPage:
        """Access underlying Playwright page for advanced operations."""
        return self._page

    def document(self) -> PageDocument:
        """Document tree view of the page for field extraction."""
        return PageDocument(self._page)

    def goto(
        self,
        url: str,
        wait_until: str = "domcontentloaded",
        max_retries: int = MAX_NAVIGATION_RETRIES,
    ) -> bool:
        """Navigate to URL with retry logic.

        Returns True if navigation succeeded, False if all retries failed.
        """
        for attempt in range(max_retries):
            try:
                logger.info(f"Navigating to: {url} (attempt {attempt + 1})")
                self._page.goto(url, wait_until=wait_until, timeout=self.timeout_ms)
                return True
            except Exception as e:
                if attempt < max_retries - 1:
                    logger.warning(f"Navigation failed (attempt {attempt + 1}): {e}")
                    self.wait(MEDIUM_WAIT_MS)
                    continue
                logger.error(f"Navigation failed after {max_retries} attempts: {e}")
        return False

    def wait(self, ms: int) -> None:
        """Wait for specified milliseconds.

        Args:
            ms: Milliseconds to wait.
        """
        self._page.wait_for_timeout(ms)

    def content(self) -> str:
        """Get page HTML content."""
        return self._page.content()
