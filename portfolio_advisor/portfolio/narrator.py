"""Prose advice generation with an offline template fallback for insights."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Any, Callable, Protocol

LOGGER = logging.getLogger(__name__)
DEFAULT_NARRATOR_TIMEOUT_SECONDS = 4.0


class Narrator(Protocol):
    def generate_advice(self, summary: dict[str, Any]) -> str: ...

    def generate_insight(self, symbol: str, snapshot: dict[str, Any]) -> str: ...


class SummaryClient(Protocol):
    def generate_summary(self, prompt: str) -> str | None: ...


class TemplateNarrator:
    """Deterministic advice text built from the score summary alone."""

    def generate_advice(self, summary: dict[str, Any]) -> str:
        gain_percent = float(summary.get("totalGainLossPercent") or 0.0)
        diversification = float(summary.get("diversificationScore") or 0.0)
        risk_level = summary.get("riskLevel")

        if gain_percent > 5:
            advice = "Your portfolio is performing well with strong gains. "
        elif gain_percent < -5:
            advice = "Your portfolio is experiencing losses, but this is normal market behavior. "
        else:
            advice = "Your portfolio shows stable performance. "

        if diversification < 40:
            advice += "Consider diversifying across more sectors to reduce risk. "
        elif diversification > 80:
            advice += "Your portfolio shows excellent diversification. "

        if risk_level == "HIGH":
            advice += "Your current allocation carries higher risk - consider rebalancing for stability."
        elif risk_level == "LOW":
            advice += "Your conservative approach provides good stability for long-term growth."
        else:
            advice += "Your balanced approach aligns well with moderate risk tolerance."
        return advice

    def generate_insight(self, symbol: str, snapshot: dict[str, Any]) -> str:
        change = float(snapshot.get("changePercent") or 0.0)
        pe = snapshot.get("pe")
        if change > 5:
            return f"{symbol} is showing strong momentum with significant gains today."
        if change < -5:
            return (
                f"{symbol} is experiencing a downturn, which may present a buying opportunity "
                "if fundamentals remain strong."
            )
        if pe and pe < 15:
            return f"{symbol} appears reasonably valued with a low P/E ratio."
        return f"{symbol} is trading within normal ranges."


def _signed(value: float) -> str:
    return f"+{value:.2f}" if value >= 0 else f"{value:.2f}"


def build_advice_prompt(summary: dict[str, Any]) -> str:
    lines = [
        f"- {s['symbol']}: {s['shares']:g} shares @ ${s['currentPrice']:.2f} ({_signed(s['changePercent'])}%) [{s['sector']}]"
        for s in summary.get("stocks", [])
    ]
    gain = float(summary.get("totalGainLoss") or 0.0)
    return (
        "You are a professional financial advisor. Provide concise, actionable investment advice "
        "for this portfolio in 2-3 sentences.\n\n"
        "Portfolio Summary:\n"
        + "\n".join(lines)
        + "\n\n"
        f"Total Value: ${float(summary.get('totalValue') or 0.0):,.2f}\n"
        f"Total Gain/Loss: {'+' if gain >= 0 else '-'}${abs(gain):,.2f} "
        f"({float(summary.get('totalGainLossPercent') or 0.0):.2f}%)\n"
        f"Diversification: {summary.get('diversificationScore')}/100\n"
        f"Risk Level: {summary.get('riskLevel')}\n\n"
        "Focus on overall strategy, not individual stocks. Be beginner-friendly and encouraging."
    )


def build_insight_prompt(symbol: str, snapshot: dict[str, Any]) -> str:
    parts = [
        f"As a financial analyst, provide a brief 1-2 sentence insight about {symbol} stock.",
        "",
        f"Current Price: ${float(snapshot.get('price') or 0.0):.2f}",
        f"Change: {_signed(float(snapshot.get('changePercent') or 0.0))}%",
        f"Sector: {snapshot.get('sector') or 'Unknown'}",
    ]
    if snapshot.get("pe"):
        parts.append(f"P/E Ratio: {snapshot['pe']}")
    if snapshot.get("marketCap"):
        parts.append(f"Market Cap: ${float(snapshot['marketCap']) / 1e9:.2f}B")
    parts += ["", "Be concise and actionable."]
    return "\n".join(parts)


class LlmNarrator:
    """Narrator backed by a text-generation client; errors propagate to the caller."""

    def __init__(self, client: SummaryClient) -> None:
        self.client = client

    def _complete(self, prompt: str) -> str:
        text = self.client.generate_summary(prompt)
        if not text or not text.strip():
            raise ValueError("Empty narrative returned.")
        return text.strip()

    def generate_advice(self, summary: dict[str, Any]) -> str:
        return self._complete(build_advice_prompt(summary))

    def generate_insight(self, symbol: str, snapshot: dict[str, Any]) -> str:
        return self._complete(build_insight_prompt(symbol, snapshot))


class FallbackNarrator:
    """Runs the primary narrator under a deadline and never raises.

    The primary call happens on a worker thread and a late result is
    discarded. A failed advice call returns an empty string so the caller
    keeps its own risk-template advice; a failed insight call is answered by
    the fallback narrator.
    """

    def __init__(
        self,
        primary: Narrator | None,
        fallback: Narrator | None = None,
        timeout_seconds: float = DEFAULT_NARRATOR_TIMEOUT_SECONDS,
        max_workers: int = 4,
    ) -> None:
        self.primary = primary
        self.fallback = fallback or TemplateNarrator()
        self.timeout_seconds = max(0.01, timeout_seconds)
        self._executor = ThreadPoolExecutor(max_workers=max(1, max_workers), thread_name_prefix="narrator")

    def _run(self, operation: str, primary_call: Callable[[], str], fallback_call: Callable[[], str] | None) -> str:
        if self.primary is not None:
            future = self._executor.submit(primary_call)
            try:
                text = future.result(timeout=self.timeout_seconds)
                if text and text.strip():
                    return text.strip()
                LOGGER.warning("narrator returned empty text: op=%s", operation)
            except FutureTimeout:
                future.cancel()
                LOGGER.warning("narrator deadline expired: op=%s timeout_s=%s", operation, self.timeout_seconds)
            except Exception as error:
                LOGGER.warning("narrator failed: op=%s error=%s", operation, type(error).__name__)
        return fallback_call() if fallback_call is not None else ""

    def generate_advice(self, summary: dict[str, Any]) -> str:
        return self._run(
            "generate_advice",
            lambda: self.primary.generate_advice(summary),
            None,
        )

    def generate_insight(self, symbol: str, snapshot: dict[str, Any]) -> str:
        return self._run(
            "generate_insight",
            lambda: self.primary.generate_insight(symbol, snapshot),
            lambda: self.fallback.generate_insight(symbol, snapshot),
        )

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
