"""Extraction errors."""


class ExtractionError(Exception):
    """Raised when a document cannot be scanned."""


class FieldTimeoutError(TimeoutError):
    """An awaited field did not appear before the timeout elapsed."""

    def __init__(self, identifier: str, timeout: float) -> None:
        self.identifier = identifier
        self.timeout = timeout
        super().__init__(f"Field '{identifier}' did not appear within {timeout:.3f}s")
