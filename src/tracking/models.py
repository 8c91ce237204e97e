# src/tracking/models.py — v2
"""Tracking domain models: ModelPricing, ItemCost, CostReport."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ModelPricing(BaseModel):
    """LLM model pricing configuration (USD per 1M tokens)."""

    model: str
    input_price_per_1m: float
    output_price_per_1m: float


class ItemCost(BaseModel):
    """Token usage and estimated cost of one reviewed file."""

    file_name: str
    size_label: str
    input_tokens: int
    output_tokens: int
    input_cost_usd: float
    output_cost_usd: float

    @property
    def total_cost_usd(self) -> float:
        return self.input_cost_usd + self.output_cost_usd


class CostReport(BaseModel):
    """Cost estimate of a whole batch."""

    model: str
    items: list[ItemCost] = Field(default_factory=list)

    @property
    def total_cost_usd(self) -> float:
        return sum(i.total_cost_usd for i in self.items)

    @property
    def total_input_tokens(self) -> int:
        return sum(i.input_tokens for i in self.items)

    @property
    def total_output_tokens(self) -> int:
        return sum(i.output_tokens for i in self.items)
