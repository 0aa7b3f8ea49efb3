"""Token usage and cost accounting for fill requests."""
import logging
import threading
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenUsage:
    input_tokens: int = 0
    output_tokens: int = 0
    requests: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


class CostTracker:
    """Accumulates token usage across requests. Safe to share between threads."""

    def __init__(
        self,
        input_price_per_mtok: float = 3.0,
        output_price_per_mtok: float = 15.0,
    ) -> None:
        self.input_price_per_mtok = input_price_per_mtok
        self.output_price_per_mtok = output_price_per_mtok
        self._usage = TokenUsage()
        self._lock = threading.Lock()

    def record(self, input_tokens: int, output_tokens: int) -> None:
        with self._lock:
            self._usage = TokenUsage(
                input_tokens=self._usage.input_tokens + input_tokens,
                output_tokens=self._usage.output_tokens + output_tokens,
                requests=self._usage.requests + 1,
            )
        logger.debug(f"Request used {input_tokens} input / {output_tokens} output tokens")

    @property
    def usage(self) -> TokenUsage:
        with self._lock:
            return self._usage

    @property
    def cost_usd(self) -> float:
        usage = self.usage
        return (
            usage.input_tokens * self.input_price_per_mtok
            + usage.output_tokens * self.output_price_per_mtok
        ) / 1_000_000

    def reset(self) -> None:
        with self._lock:
            self._usage = TokenUsage()
