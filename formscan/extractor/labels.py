"""Label association, normalization and required detection."""
import re
from typing import Optional

from .tree import DocumentNode, DocumentTree

_WHITESPACE = re.compile(r"\s+")

GROUP_MEMBER_SELECTOR = 'input[type="radio"], input[type="checkbox"]'


def normalize_label(text: str, marker: str = "*") -> str:
    """Strip the required marker and collapse whitespace."""
    if marker:
        text = text.replace(marker, " ")
    return _WHITESPACE.sub(" ", text).strip()


def normalize_text(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def has_required_marker(text: str, marker: str = "*") -> bool:
    return bool(marker) and marker in text


def is_required(node: DocumentNode, raw_label: str, marker: str = "*") -> bool:
    """Any of the native attribute, aria-required or a marked label is enough."""
    if node.has_attribute("required"):
        return True
    if (node.get_attribute("aria-required") or "").strip().lower() == "true":
        return True
    return has_required_marker(raw_label, marker)


def _wrapper_label(wrapper: DocumentNode, control_id: Optional[str]) -> str:
    for legend in wrapper.query_selector_all("legend"):
        text = legend.text()
        if text.strip():
            return text
    for label in wrapper.query_selector_all("label"):
        target = label.get_attribute("for")
        if target and target != control_id:
            continue
        # a label wrapping a radio/checkbox names that option, not the field
        if not target and label.query_selector_all(GROUP_MEMBER_SELECTOR):
            continue
        text = label.text()
        if text.strip():
            return text
    return ""


def find_label(
    document: DocumentTree,
    control: DocumentNode,
    wrapper_selectors: list[str],
    use_for: bool = True,
) -> str:
    """Return the raw label text for a control, or "" if none is found.

    Lookup order: ``label[for=id]``, a label or legend inside the nearest
    field wrapper, ``aria-label``, then an enclosing ``<label>``.

    Args:
        document: Tree the control belongs to.
        control: The control (or group/date container) being labelled.
        wrapper_selectors: Selectors for field wrapper containers.
        use_for: Disable for grouped controls, whose ``for`` labels
            name a single option rather than the group.
    """
    control_id = control.get_attribute("id")

    if use_for and control_id:
        label = document.find_label_for(control_id)
        if label is not None:
            text = label.text()
            if text.strip():
                return text

    if wrapper_selectors:
        wrapper = control.closest(", ".join(wrapper_selectors))
        if wrapper is not None:
            text = _wrapper_label(wrapper, control_id if use_for else None)
            if text.strip():
                return text

    aria = control.get_attribute("aria-label")
    if aria and aria.strip():
        return aria

    if use_for:
        enclosing = control.closest("label")
        if enclosing is not None:
            text = enclosing.text()
            if text.strip():
                return text

    return ""
