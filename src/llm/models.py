# src/llm/models.py — v2
"""LLM-specific types: Message, BatchRequest, BatchResultEntry."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class Message(BaseModel):
    """Single message in a conversation."""

    role: Literal["user", "assistant"]
    content: str


class BatchRequest(BaseModel):
    """One prompt submitted as part of a provider batch."""

    correlation_id: str
    prompt: str
    model: str
    max_tokens: int = 1024


class BatchResultEntry(BaseModel):
    """One successful per-item result returned by the provider."""

    correlation_id: str
    text: str
