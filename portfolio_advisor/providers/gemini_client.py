"""Google Gemini REST client, an alternative narrative backend."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote_plus

from portfolio_advisor.providers.http import post_json

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"


class GeminiClient:
    def __init__(self, api_key: str, model: str, timeout_seconds: float = 20.0) -> None:
        self.api_key = api_key
        self.model = model
        self.timeout_seconds = timeout_seconds

    def generate_summary(self, prompt: str) -> str | None:
        url = f"{GEMINI_BASE_URL}/{quote_plus(self.model)}:generateContent?key={quote_plus(self.api_key)}"
        payload: dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": 0.2, "maxOutputTokens": 350},
        }
        data = post_json(url, provider="gemini", payload=payload, timeout_seconds=self.timeout_seconds)
        candidates = data.get("candidates") if isinstance(data, dict) else None
        if not isinstance(candidates, list) or not candidates:
            return None
        parts = ((candidates[0] or {}).get("content") or {}).get("parts") or []
        texts = [part.get("text") for part in parts if isinstance(part, dict) and isinstance(part.get("text"), str)]
        return "\n".join(texts).strip() if texts else None
