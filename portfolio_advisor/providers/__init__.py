"""Provider clients and normalized provider models."""

from portfolio_advisor.providers.anthropic_client import AnthropicClient
from portfolio_advisor.providers.demo import DemoMarketData
from portfolio_advisor.providers.finnhub import FinnhubClient
from portfolio_advisor.providers.flexprice import FlexpriceClient
from portfolio_advisor.providers.fmp import FmpClient
from portfolio_advisor.providers.gemini_client import GeminiClient
from portfolio_advisor.providers.yahoo_finance import YahooFinanceClient

__all__ = [
    "FinnhubClient",
    "FmpClient",
    "YahooFinanceClient",
    "DemoMarketData",
    "AnthropicClient",
    "GeminiClient",
    "FlexpriceClient",
]
