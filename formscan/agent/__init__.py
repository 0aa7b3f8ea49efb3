"""Claude integration for filling extracted form fields."""
from .batching import chunk_fields, merge_answers, resolve_option_values
from .claude import ClaudeFiller, FillResult
from .cost import CostTracker, TokenUsage
from .parsing import parse_answers

__all__ = [
    "ClaudeFiller",
    "CostTracker",
    "FillResult",
    "TokenUsage",
    "chunk_fields",
    "merge_answers",
    "parse_answers",
    "resolve_option_values",
]
