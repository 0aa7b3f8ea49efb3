"""Form field extraction."""
from .errors import ExtractionError, FieldTimeoutError
from .forms import FieldExtractor
from .models import DateComponents, FieldDescriptor, FieldOption, FillAnswer, to_payload
from .tree import DocumentNode, DocumentTree, HtmlDocument, HtmlNode

__all__ = [
    "DateComponents",
    "DocumentNode",
    "DocumentTree",
    "ExtractionError",
    "FieldDescriptor",
    "FieldExtractor",
    "FieldOption",
    "FieldTimeoutError",
    "FillAnswer",
    "HtmlDocument",
    "HtmlNode",
    "to_payload",
]
