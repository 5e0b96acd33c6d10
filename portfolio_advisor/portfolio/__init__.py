"""Portfolio analysis domain package."""

from portfolio_advisor.portfolio.engine import AnalysisEngine
from portfolio_advisor.portfolio.models import EmptyPortfolio, Holding, InvalidInput, PortfolioAnalysis, Quote
from portfolio_advisor.portfolio.portfolio_service import PortfolioService
from portfolio_advisor.portfolio.sectors import SectorClassifier
from portfolio_advisor.portfolio.suggestions import SuggestionEngine

__all__ = [
    "AnalysisEngine",
    "EmptyPortfolio",
    "Holding",
    "InvalidInput",
    "PortfolioAnalysis",
    "PortfolioService",
    "Quote",
    "SectorClassifier",
    "SuggestionEngine",
]
