import pytest

from portfolio_advisor.portfolio.models import Holding, InvalidInput
from portfolio_advisor.portfolio.validation import parse_holdings, parse_suggestion_request


def test_parse_holdings_normalizes_rows() -> None:
    holdings = parse_holdings({"portfolio": [{"symbol": " aapl ", "shares": "10"}, {"symbol": "MSFT", "shares": 2.5}]})
    assert holdings == [Holding("AAPL", 10.0), Holding("MSFT", 2.5)]


def test_parse_holdings_accepts_stocks_alias() -> None:
    assert parse_holdings({"stocks": [{"symbol": "TSLA", "shares": 1}]}) == [Holding("TSLA", 1.0)]


def test_zero_share_rows_are_dropped() -> None:
    assert parse_holdings({"portfolio": [{"symbol": "AAPL", "shares": 0}, {"symbol": "NVDA", "shares": 3}]}) == [
        Holding("NVDA", 3.0)
    ]


@pytest.mark.parametrize("payload", [None, [], "text", {"portfolio": "AAPL"}, {"other": []}])
def test_non_list_portfolio_is_rejected(payload) -> None:
    with pytest.raises(InvalidInput, match="Invalid portfolio data") as excinfo:
        parse_holdings(payload)
    assert excinfo.value.issues[0].code == "invalid_payload"


def test_row_issues_are_collected() -> None:
    with pytest.raises(InvalidInput) as excinfo:
        parse_holdings(
            {
                "portfolio": [
                    {"symbol": "AAPL", "shares": -5},
                    {"symbol": "bad symbol!", "shares": 1},
                    "AAPL",
                    {"symbol": "MSFT", "shares": True},
                    {"symbol": "NVDA", "shares": "nan"},
                ]
            }
        )
    codes = [(issue.row, issue.code) for issue in excinfo.value.issues]
    assert codes == [
        (0, "invalid_shares"),
        (1, "invalid_symbol"),
        (2, "invalid_row"),
        (3, "invalid_shares"),
        (4, "invalid_shares"),
    ]
    assert str(excinfo.value) == "Shares for AAPL must be a non-negative number."


def test_parse_suggestion_request_is_lenient() -> None:
    request = parse_suggestion_request(
        {
            "currentStocks": [{"symbol": "aapl", "sector": "Technology"}, "junk", {"sector": "Energy"}],
            "riskLevel": " high ",
            "diversificationScore": "45",
        }
    )
    assert request.held_symbols == ["AAPL"]
    assert request.held_sectors == ["Technology", "Energy"]
    assert request.risk_level == "HIGH"
    assert request.diversification_score == 45.0


def test_parse_suggestion_request_defaults() -> None:
    request = parse_suggestion_request(None)
    assert request.held_symbols == []
    assert request.held_sectors == []
    assert request.risk_level is None
    assert request.diversification_score == 0.0


@pytest.mark.parametrize("shares", [10**400, -(10**400), "1e400", float("inf")])
def test_oversized_share_counts_are_invalid(shares) -> None:
    with pytest.raises(InvalidInput) as excinfo:
        parse_holdings({"portfolio": [{"symbol": "AAPL", "shares": shares}]})
    assert [issue.code for issue in excinfo.value.issues] == ["invalid_shares"]
