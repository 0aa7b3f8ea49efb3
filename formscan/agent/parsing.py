"""Recovering fill answers from model output."""
import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from ..extractor.models import FillAnswer

logger = logging.getLogger(__name__)

_ARRAY = re.compile(r"\[[\s\S]*\]")


def strip_code_fence(content: str) -> str:
    """Remove a surrounding ```json fence if the model added one."""
    if "```" in content:
        content = content.split("```")[1]
        if content.startswith("json"):
            content = content[4:]
    return content.strip()


def _items(data: Any) -> list[Any]:
    if isinstance(data, dict):
        if isinstance(data.get("answers"), list):
            return data["answers"]
        if "Identifier" in data:
            return [data]
        return []
    if isinstance(data, list):
        return data
    return []


def parse_answers(content: str) -> list[FillAnswer]:
    """Parse a model response into FillAnswers.

    Plain JSON is tried first. If that fails, the first ``[...]`` span in the
    raw text is tried. If nothing parses, the batch yields no answers; the
    error is logged and not raised.
    """
    try:
        data = json.loads(strip_code_fence(content))
    except json.JSONDecodeError:
        match = _ARRAY.search(content)
        if match is None:
            logger.warning("Response is not JSON and holds no answer array")
            return []
        try:
            data = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            logger.warning(f"Could not recover answers from response: {e}")
            return []
        logger.warning("Recovered answers from non-JSON response")

    answers: list[FillAnswer] = []
    for item in _items(data):
        if not isinstance(item, dict):
            continue
        try:
            answers.append(FillAnswer.model_validate(item))
        except ValidationError as e:
            logger.debug(f"Skipping malformed answer {item!r}: {e}")
    return answers
