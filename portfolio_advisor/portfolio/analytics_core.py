"""Valuation and allocation analytics over a frame of valued holdings."""

from __future__ import annotations

import pandas as pd

from portfolio_advisor.portfolio.models import ValuedStock

VALUATION_COLUMNS = ["Symbol", "Sector", "Shares", "Current_Price", "Previous_Close", "PE_Ratio", "Value", "Prior_Value"]


def build_valuation_frame(stocks: list[ValuedStock] | tuple[ValuedStock, ...]) -> pd.DataFrame:
    rows = [
        {
            "Symbol": stock.symbol,
            "Sector": stock.sector,
            "Shares": stock.shares,
            "Current_Price": stock.current_price,
            "Previous_Close": stock.previous_close,
            "PE_Ratio": stock.pe_ratio,
            "Value": stock.value,
            "Prior_Value": stock.prior_value,
        }
        for stock in stocks
    ]
    return pd.DataFrame(rows, columns=VALUATION_COLUMNS)


def calculate_total_portfolio_value(frame: pd.DataFrame) -> float:
    return float(frame["Value"].sum())


def calculate_total_cost(frame: pd.DataFrame) -> float:
    return float(frame["Prior_Value"].sum())


def calculate_total_gain_loss_percent(total_gain_loss: float, total_cost: float) -> float:
    if total_cost <= 0:
        return 0.0
    return (total_gain_loss / total_cost) * 100.0


def calculate_sector_exposure(frame: pd.DataFrame) -> dict[str, float]:
    """Percent of total value per sector, in order of first appearance."""
    portfolio_value = calculate_total_portfolio_value(frame)
    if portfolio_value <= 0:
        return {sector: 0.0 for sector in frame["Sector"].drop_duplicates()}
    totals = frame.groupby("Sector", sort=False)["Value"].sum()
    return {str(sector): round(float(value / portfolio_value) * 100.0, 2) for sector, value in totals.items()}


def calculate_sector_weight(frame: pd.DataFrame, sector: str) -> float:
    portfolio_value = calculate_total_portfolio_value(frame)
    if portfolio_value <= 0:
        return 0.0
    in_sector = float(frame.loc[frame["Sector"] == sector, "Value"].sum())
    return (in_sector / portfolio_value) * 100.0


def calculate_average_pe(frame: pd.DataFrame) -> float:
    if frame.empty:
        return 0.0
    return float(frame["PE_Ratio"].mean())


def count_distinct_sectors(frame: pd.DataFrame) -> int:
    return int(frame["Sector"].nunique())
