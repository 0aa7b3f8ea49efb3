"""Control type resolution."""
import re
from typing import Optional

from ..core.config import TypeRule
from .tree import DocumentNode

NATIVE_TYPES = frozenset({
    "text", "email", "number", "date", "file", "radio", "checkbox",
    "tel", "url", "password", "search",
})
BUTTON_TYPES = frozenset({"button", "submit", "reset", "image"})


def resolve_primary_type(node: DocumentNode) -> str:
    """Type from markup alone. Unknown or missing input types are "text"."""
    tag = node.tag
    if tag == "select":
        return "select"
    if tag == "textarea":
        return "textarea"
    if tag == "button":
        return "button"

    native = (node.get_attribute("type") or "").strip().lower()
    if native in NATIVE_TYPES:
        return native
    if native in BUTTON_TYPES:
        return "button"
    if tag != "input" and (node.get_attribute("role") or "").lower() == "spinbutton":
        return "number"
    return "text"


class TypeRules:
    """Ordered (pattern, type) table applied to labels of plain text controls."""

    def __init__(self, rules: Optional[list[TypeRule]] = None) -> None:
        self._rules: list[tuple[re.Pattern, str]] = [
            (rule.compile(), rule.type) for rule in (rules or [])
        ]

    def __len__(self) -> int:
        return len(self._rules)

    def refine(self, primary: str, label: str) -> str:
        """Relabel a "text" control from its label. Other types pass through."""
        if primary != "text" or not label:
            return primary
        for pattern, field_type in self._rules:
            if pattern.search(label):
                return field_type
        return primary
