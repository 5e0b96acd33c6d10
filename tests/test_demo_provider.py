from portfolio_advisor.providers.demo import DEMO_QUOTES, DemoMarketData


def test_fixed_quote_snapshot() -> None:
    quote = DemoMarketData().get_quote("aapl")
    assert quote.symbol == "AAPL"
    assert quote.price == 185.92
    assert quote.previous_close == 182.31
    assert quote.sector == "Technology"
    assert quote.source == "demo"


def test_unknown_symbol_is_not_invented() -> None:
    assert DemoMarketData().get_quote("ZZZZ") is None


def test_known_symbols_are_synthesized_deterministically_with_seed() -> None:
    first = DemoMarketData(seed=7, known_symbols={"XOM"})
    second = DemoMarketData(seed=7, known_symbols={"xom"})
    a = first.get_quote("XOM")
    first.get_quote("JNJ")
    b = second.get_quote("XOM")
    assert a == b
    assert 100.0 <= a.price <= 500.0
    assert "XOM" not in DEMO_QUOTES


def test_mover_symbols_are_known() -> None:
    assert DemoMarketData().get_quote("INTC") is not None


def test_search_matches_symbol_or_name_substring() -> None:
    demo = DemoMarketData()
    assert [r.symbol for r in demo.search_symbols("apple")] == ["AAPL"]
    assert [r.symbol for r in demo.search_symbols("NFLX")] == ["NFLX"]
    assert len(demo.search_symbols("inc", limit=2)) == 2
    assert demo.search_symbols("nothing-like-this") == []
