# src/tracking/cost_calculator.py — v2
"""Cost calculation from token counts.

Published per-1M-token rates per model. An unknown model is a configuration
error, never a zero-cost estimate.
"""

from __future__ import annotations

from ai_pull_review.tracking.models import ItemCost, ModelPricing

# https://docs.anthropic.com/en/docs/about-claude/models
DEFAULT_PRICING: dict[str, ModelPricing] = {
    "claude-3-5-sonnet-20241022": ModelPricing(
        model="claude-3-5-sonnet-20241022",
        input_price_per_1m=3.0, output_price_per_1m=15.0,
    ),
    "claude-3-5-haiku-20241022": ModelPricing(
        model="claude-3-5-haiku-20241022",
        input_price_per_1m=0.80, output_price_per_1m=4.0,
    ),
    "claude-3-opus-20240229": ModelPricing(
        model="claude-3-opus-20240229",
        input_price_per_1m=15.0, output_price_per_1m=75.0,
    ),
    "claude-3-sonnet-20240229": ModelPricing(
        model="claude-3-sonnet-20240229",
        input_price_per_1m=3.0, output_price_per_1m=15.0,
    ),
    "claude-3-haiku-20240307": ModelPricing(
        model="claude-3-haiku-20240307",
        input_price_per_1m=0.25, output_price_per_1m=1.25,
    ),
    "claude-sonnet-4-20250514": ModelPricing(
        model="claude-sonnet-4-20250514",
        input_price_per_1m=3.0, output_price_per_1m=15.0,
    ),
    "claude-haiku-4-5-20251001": ModelPricing(
        model="claude-haiku-4-5-20251001",
        input_price_per_1m=1.0, output_price_per_1m=5.0,
    ),
}


class UnknownModelError(ValueError):
    """Raised when a model has no entry in the pricing table."""


def get_model_pricing(
    model: str,
    pricing: dict[str, ModelPricing] | None = None,
) -> ModelPricing:
    """Look up the rate table entry for a model.

    Raises:
        UnknownModelError: If the model is not priced.
    """
    pricing = pricing or DEFAULT_PRICING
    p = pricing.get(model)
    if p is None:
        raise UnknownModelError(
            f"Unknown model: {model!r}. Known: {', '.join(sorted(pricing))}"
        )
    return p


def compute_item_cost(
    file_name: str,
    size_label: str,
    input_tokens: int,
    output_tokens: int,
    pricing: ModelPricing,
) -> ItemCost:
    """Compute the estimated USD cost of one prompt/response pair."""
    return ItemCost(
        file_name=file_name,
        size_label=size_label,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        input_cost_usd=input_tokens * pricing.input_price_per_1m / 1_000_000,
        output_cost_usd=output_tokens * pricing.output_price_per_1m / 1_000_000,
    )
