"""Cost estimation for vision API calls."""

from typing import Any

from ai.errors import InvalidArgument
from ai.models import ModelConfig
from config.constants import TOKENS_PER_MILLION


def estimate_cost(model: ModelConfig, input_tokens: int, output_tokens: int) -> float:
    """Estimated USD cost of one analysis call.

    Raises:
        InvalidArgument: if either token count is negative.
    """
    if input_tokens < 0 or output_tokens < 0:
        raise InvalidArgument(
            f"Token counts must be non-negative (input={input_tokens}, output={output_tokens})"
        )
    pricing = model.cost_per_million_tokens
    input_cost = (input_tokens / TOKENS_PER_MILLION) * pricing.input
    output_cost = (output_tokens / TOKENS_PER_MILLION) * pricing.output
    return input_cost + output_cost


def estimate_cost_from_usage(model: ModelConfig, usage: Any) -> float:
    """Estimate cost from an OpenAI ``usage`` object (None counts as no usage)."""
    if usage is None:
        return 0.0
    return estimate_cost(
        model,
        getattr(usage, "prompt_tokens", None) or 0,
        getattr(usage, "completion_tokens", None) or 0,
    )
