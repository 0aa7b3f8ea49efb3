"""Splitting fields into request-sized batches and recombining answers."""
import logging
from typing import Any, Iterable

from ..extractor.models import FillAnswer

logger = logging.getLogger(__name__)


def chunk_fields(fields: list[dict[str, Any]], size: int) -> list[list[dict[str, Any]]]:
    """Split serialized fields into ordered batches of at most ``size``."""
    if size < 1:
        raise ValueError(f"Chunk size must be at least 1, got {size}")
    return [fields[i:i + size] for i in range(0, len(fields), size)]


def merge_answers(batches: Iterable[list[FillAnswer]]) -> list[FillAnswer]:
    """Combine batch results into one list keyed by identifier.

    A later answer for the same identifier replaces the earlier one.
    """
    merged: dict[str, FillAnswer] = {}
    for batch in batches:
        for answer in batch:
            if answer.identifier in merged:
                logger.warning(f"Duplicate answer for '{answer.identifier}', keeping the last")
            merged[answer.identifier] = answer
    return list(merged.values())


def resolve_option_values(
    answers: list[FillAnswer], fields: list[dict[str, Any]]
) -> list[FillAnswer]:
    """Replace values that name an optionId with that option's text."""
    option_maps: dict[str, dict[str, str]] = {}
    for item in fields:
        options = item.get("options") or []
        if options:
            option_maps[item["Identifier"]] = {
                o["optionId"].lower(): o["optionText"] for o in options
            }

    resolved = []
    for answer in answers:
        options = option_maps.get(answer.identifier)
        if options:
            texts = {t.lower() for t in options.values()}
            key = answer.value.lower()
            if key not in texts and key in options:
                answer = answer.model_copy(update={"value": options[key]})
        resolved.append(answer)
    return resolved
