"""Form field extraction from a document tree."""
import logging
from dataclasses import dataclass, field
from typing import Hashable, Optional

from ..core.config import ExtractorConfig
from .errors import ExtractionError
from .field_types import TypeRules, resolve_primary_type
from .labels import find_label, is_required, normalize_label, normalize_text
from .models import DateComponents, FieldDescriptor, FieldOption
from .tree import DocumentNode, DocumentTree, css_string

logger = logging.getLogger(__name__)

SPINBUTTON_SELECTOR = '[role="spinbutton"]'
DATE_PARTS = ("day", "month", "year")


@dataclass
class _ScanState:
    """Bookkeeping for one extraction pass."""

    scope: DocumentNode
    seen_ids: set[str] = field(default_factory=set)
    seen_groups: set[str] = field(default_factory=set)
    seen_containers: set[Hashable] = field(default_factory=set)
    reserved_ids: set[str] = field(default_factory=set)
    fallback_counter: int = 0


class FieldExtractor:
    """Turns the controls of a document into FieldDescriptors, in document order."""

    def __init__(self, config: Optional[ExtractorConfig] = None) -> None:
        """Initialize the extractor.

        Args:
            config: Selectors, marker glyph and heuristics. Defaults apply if omitted.
        """
        self.config = config or ExtractorConfig()
        self._type_rules = TypeRules(self.config.type_rules)
        self._sentinels = {s.strip().lower() for s in self.config.option_sentinels}

    def extract(
        self,
        document: DocumentTree,
        scope: Optional[str] = None,
        wait_for: Optional[str] = None,
        timeout: float = 10.0,
    ) -> list[FieldDescriptor]:
        """Extract every recognized control.

        Args:
            document: Tree to scan.
            scope: Optional selector of the container to restrict the scan to.
            wait_for: Optional element id to wait for before scanning.
            timeout: Seconds to wait for ``wait_for``.

        Returns:
            One FieldDescriptor per control or control group.

        Raises:
            FieldTimeoutError: If ``wait_for`` does not appear in time.
            ExtractionError: If ``scope`` matches nothing.
        """
        if wait_for:
            document.wait_for_identifier(wait_for, timeout)

        if scope:
            scope_node = document.query_selector(scope)
            if scope_node is None:
                raise ExtractionError(f"Scope {scope!r} not found")
        else:
            scope_node = document.root

        state = _ScanState(scope=scope_node)
        for node in scope_node.query_selector_all("[id], [name]"):
            state.reserved_ids.update(
                v.strip() for v in (node.get_attribute("id"), node.get_attribute("name")) if v
            )
        controls = scope_node.query_selector_all(", ".join(self.config.control_selectors))

        descriptors: list[FieldDescriptor] = []
        for control in controls:
            if self.config.visible_only and not control.is_visible():
                continue
            descriptor = self._describe(document, control, state)
            if descriptor is None:
                continue
            if descriptor.identifier in state.seen_ids:
                logger.debug(f"Dropping duplicate identifier '{descriptor.identifier}'")
                continue
            state.seen_ids.add(descriptor.identifier)
            descriptors.append(descriptor)

        logger.info(f"Extracted {len(descriptors)} fields from {len(controls)} controls")
        return descriptors

    def _describe(
        self, document: DocumentTree, control: DocumentNode, state: _ScanState
    ) -> Optional[FieldDescriptor]:
        primary = resolve_primary_type(control)

        if (control.get_attribute("role") or "").lower() == "spinbutton":
            container = self._date_container(control)
            if container is not None:
                return self._describe_date(document, container, state)

        if primary in ("radio", "checkbox"):
            group = control.get_attribute("name") or control.get_attribute("id")
            if group:
                members = self._group_members(state.scope, primary, group)
                if primary == "radio" or len(members) > 1:
                    return self._describe_group(document, primary, group, members, state)

        identifier = self._identifier(control, state)
        if identifier is None:
            return None

        raw_label = find_label(document, control, self.config.wrapper_selectors)
        label = normalize_label(raw_label, self.config.required_marker)
        field_type = self._type_rules.refine(primary, label)

        options: list[FieldOption] = []
        if primary == "select":
            options = self._select_options(control)

        return FieldDescriptor(
            label=label,
            required=is_required(control, raw_label, self.config.required_marker),
            type=field_type,
            identifier=identifier,
            options=options,
        )

    def _identifier(self, node: DocumentNode, state: _ScanState) -> Optional[str]:
        identifier = (node.get_attribute("id") or node.get_attribute("name") or "").strip()
        if identifier:
            return identifier
        if not self.config.generate_fallback_ids:
            logger.debug(f"Dropping <{node.tag}> without id or name")
            return None
        return self._fallback_id(state)

    def _fallback_id(self, state: _ScanState) -> str:
        while True:
            state.fallback_counter += 1
            token = f"field-{state.fallback_counter}"
            if token not in state.seen_ids and token not in state.reserved_ids:
                return token

    def _is_sentinel(self, value: str) -> bool:
        return not value.strip() or value.strip().lower() in self._sentinels

    def _select_options(self, select: DocumentNode) -> list[FieldOption]:
        options = []
        for option in select.query_selector_all("option"):
            text = normalize_text(option.text())
            value = option.get_attribute("value")
            # an <option> without a value attribute submits its text
            if value is None:
                value = text
            if self._is_sentinel(value):
                continue
            options.append(FieldOption(option_id=value, option_text=text))
        return options

    def _group_members(self, scope: DocumentNode, kind: str, group: str) -> list[DocumentNode]:
        selector = f'input[type="{kind}"][name={css_string(group)}]'
        members = scope.query_selector_all(selector)
        if not members:
            members = scope.query_selector_all(f'input[type="{kind}"][id={css_string(group)}]')
        return members

    def _describe_group(
        self,
        document: DocumentTree,
        kind: str,
        group: str,
        members: list[DocumentNode],
        state: _ScanState,
    ) -> Optional[FieldDescriptor]:
        if group in state.seen_groups:
            return None
        state.seen_groups.add(group)

        if self.config.visible_only:
            members = [m for m in members if m.is_visible()]
        if not members:
            return None

        raw_label = find_label(document, members[0], self.config.wrapper_selectors, use_for=False)
        required = any(
            is_required(m, raw_label, self.config.required_marker) for m in members
        )

        options = []
        for index, member in enumerate(members, start=1):
            value = member.get_attribute("value")
            if value is None:
                value = member.get_attribute("id") or f"{group}-{index}"
            if self._is_sentinel(value):
                continue
            text = normalize_label(
                self._member_text(document, member), self.config.required_marker
            )
            options.append(FieldOption(option_id=value, option_text=text or value))

        return FieldDescriptor(
            label=normalize_label(raw_label, self.config.required_marker),
            required=required,
            type=kind,
            identifier=group,
            options=options,
        )

    def _member_text(self, document: DocumentTree, member: DocumentNode) -> str:
        member_id = member.get_attribute("id")
        if member_id:
            label = document.find_label_for(member_id)
            if label is not None and label.text().strip():
                return label.text()
        enclosing = member.closest("label")
        if enclosing is not None:
            return enclosing.text()
        return member.get_attribute("aria-label") or ""

    def _date_container(self, control: DocumentNode) -> Optional[DocumentNode]:
        if self.config.date_field_selectors:
            container = control.closest(", ".join(self.config.date_field_selectors))
            if container is not None:
                return container
        if not self.config.date_container_selectors:
            return None
        container = control.closest(", ".join(self.config.date_container_selectors))
        if container is None or len(container.query_selector_all(SPINBUTTON_SELECTOR)) < 2:
            return None
        return container

    def _describe_date(
        self, document: DocumentTree, container: DocumentNode, state: _ScanState
    ) -> Optional[FieldDescriptor]:
        if container.key in state.seen_containers:
            return None
        state.seen_containers.add(container.key)

        parts = container.query_selector_all(SPINBUTTON_SELECTOR)

        # slots stay positional: a part that is hidden or has no id leaves its slot empty
        components: dict[str, str] = {}
        for part_name, part in zip(DATE_PARTS, parts):
            if self.config.visible_only and not part.is_visible():
                continue
            sub_id = self._identifier(part, state)
            if sub_id is not None:
                state.seen_ids.add(sub_id)
                components[part_name] = sub_id
        sub_ids = list(components.values())

        identifier = (container.get_attribute("id") or "").strip()
        if not identifier:
            identifier = f"{sub_ids[0]}-date" if sub_ids else self._identifier(container, state)
        if not identifier:
            return None

        raw_label = find_label(document, container, self.config.wrapper_selectors)
        required = is_required(container, raw_label, self.config.required_marker) or any(
            is_required(p, "", self.config.required_marker) for p in parts
        )

        return FieldDescriptor(
            label=normalize_label(raw_label, self.config.required_marker),
            required=required,
            type="date",
            identifier=identifier,
            options=[],
            components=DateComponents(**components),
        )
