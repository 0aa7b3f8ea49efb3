"""Browser access: CDP connection, page wrapper and live document tree."""
from .connection import BrowserConnection
from .document import PageDocument, PageNode
from .page import Page

__all__ = ["BrowserConnection", "Page", "PageDocument", "PageNode"]
