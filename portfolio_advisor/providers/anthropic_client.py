"""Anthropic client for optional portfolio narrative generation."""

from __future__ import annotations

from typing import Any

from portfolio_advisor.providers.http import post_json

ANTHROPIC_MESSAGES_URL = "https://api.anthropic.com/v1/messages"


class AnthropicClient:
    def __init__(self, api_key: str, model: str, timeout_seconds: float = 20.0, max_tokens: int = 350) -> None:
        self.api_key = api_key
        self.model = model
        self.timeout_seconds = timeout_seconds
        self.max_tokens = max_tokens

    def generate_summary(self, prompt: str) -> str | None:
        payload: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": 0.2,
            "messages": [{"role": "user", "content": prompt}],
        }
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": "2023-06-01",
        }
        data = post_json(
            ANTHROPIC_MESSAGES_URL,
            provider="anthropic",
            payload=payload,
            timeout_seconds=self.timeout_seconds,
            headers=headers,
        )
        content = data.get("content") if isinstance(data, dict) else None
        if not isinstance(content, list):
            return None
        texts = [item.get("text") for item in content if isinstance(item, dict) and isinstance(item.get("text"), str)]
        return "\n".join(texts).strip() if texts else None
