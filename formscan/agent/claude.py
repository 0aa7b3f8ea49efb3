"""Claude-backed form filling."""
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional, Union

from anthropic import Anthropic, APIError

from ..extractor.models import FieldDescriptor, FillAnswer
from .batching import chunk_fields, merge_answers, resolve_option_values
from .cost import CostTracker, TokenUsage
from .parsing import parse_answers
from .prompts import SYSTEM_PROMPT, build_fill_prompt

logger = logging.getLogger(__name__)


@dataclass
class FillResult:
    """Answers for one fill call plus what it cost."""

    answers: list[FillAnswer] = field(default_factory=list)
    usage: TokenUsage = field(default_factory=TokenUsage)
    cost_usd: float = 0.0
    batches: int = 0

    def to_payload(self) -> list[dict[str, str]]:
        return [a.to_payload() for a in self.answers]


class ClaudeFiller:
    """Fills extracted form fields from free-text context using Claude."""

    def __init__(
        self,
        model: str = "claude-sonnet-4-20250514",
        max_tokens: int = 4096,
        chunk_size: int = 25,
        max_workers: int = 4,
        input_price_per_mtok: float = 3.0,
        output_price_per_mtok: float = 15.0,
        client: Optional[Anthropic] = None,
    ) -> None:
        self.model = model
        self.max_tokens = max_tokens
        self.chunk_size = chunk_size
        self.max_workers = max_workers
        self.input_price_per_mtok = input_price_per_mtok
        self.output_price_per_mtok = output_price_per_mtok
        self._client = client or Anthropic()

    def fill(
        self,
        fields: list[Union[FieldDescriptor, dict[str, Any]]],
        context: str,
        reference_date: Optional[date] = None,
    ) -> FillResult:
        """Ask Claude for values for ``fields``.

        Fields are sent in batches of ``chunk_size``, concurrently. Answers
        are merged by identifier; a batch that fails yields no answers.

        Args:
            fields: Descriptors, or their serialized payload dicts.
            context: Resume or other free text describing the candidate.
            reference_date: Date relative answers are resolved against. Defaults to today.

        Returns:
            FillResult with the merged answers and token usage.
        """
        payload = [f.to_payload() if isinstance(f, FieldDescriptor) else f for f in fields]
        if not payload:
            return FillResult()

        tracker = CostTracker(self.input_price_per_mtok, self.output_price_per_mtok)
        batches = chunk_fields(payload, self.chunk_size)
        ref = (reference_date or date.today()).isoformat()
        logger.info(f"Filling {len(payload)} fields in {len(batches)} batches")

        workers = max(1, min(self.max_workers, len(batches)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(self._fill_batch, batch, context, ref, tracker)
                for batch in batches
            ]
            results = [future.result() for future in futures]

        answers = resolve_option_values(merge_answers(results), payload)
        usage = tracker.usage
        logger.info(
            f"Got {len(answers)} answers using {usage.total_tokens} tokens "
            f"(${tracker.cost_usd:.4f})"
        )
        return FillResult(
            answers=answers,
            usage=usage,
            cost_usd=tracker.cost_usd,
            batches=len(batches),
        )

    def _fill_batch(
        self,
        batch: list[dict[str, Any]],
        context: str,
        reference_date: str,
        tracker: CostTracker,
    ) -> list[FillAnswer]:
        try:
            response = self._client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=SYSTEM_PROMPT,
                messages=[
                    {
                        "role": "user",
                        "content": build_fill_prompt(batch, context, reference_date),
                    }
                ],
            )
        except APIError as e:
            logger.error(f"Claude fill request failed: {e}")
            return []

        tracker.record(response.usage.input_tokens, response.usage.output_tokens)

        content = next(
            (block.text for block in response.content if getattr(block, "type", None) == "text"),
            "",
        )
        if not content:
            logger.warning("Claude returned no text content")
            return []
        logger.debug(f"Claude response: {content}")

        return self._validate_answers(parse_answers(content), batch)

    def _validate_answers(
        self, answers: list[FillAnswer], batch: list[dict[str, Any]]
    ) -> list[FillAnswer]:
        """Drop answers for identifiers that were not in the batch."""
        known = {item["Identifier"] for item in batch}
        valid = []
        for answer in answers:
            if answer.identifier not in known:
                logger.warning(f"Removing answer with unknown identifier: {answer.identifier}")
                continue
            valid.append(answer)
        return valid
