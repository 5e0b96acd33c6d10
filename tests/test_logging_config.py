import json
import logging
import sys

import pytest

from portfolio_advisor.runtime.logging_config import JsonFormatter, configure_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    level, handlers = root.level, root.handlers[:]
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def test_configure_logging_writes_json_to_stderr(restore_root_logger) -> None:
    configure_logging("debug", use_json=True)
    root = restore_root_logger
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    handler = root.handlers[0]
    assert handler.stream is sys.stderr
    assert isinstance(handler.formatter, JsonFormatter)
    assert logging.getLogger("urllib3").level == logging.WARNING


def test_unknown_level_falls_back_to_info(restore_root_logger) -> None:
    configure_logging("chatty")
    assert restore_root_logger.level == logging.INFO


def test_json_formatter_includes_exception() -> None:
    try:
        raise RuntimeError("quote feed down")
    except RuntimeError:
        record = logging.getLogger("portfolio_advisor.test").makeRecord(
            "portfolio_advisor.test", logging.ERROR, __file__, 1, "analysis failed for %s", ("AAPL",), sys.exc_info()
        )
    line = json.loads(JsonFormatter().format(record))
    assert line["level"] == "ERROR"
    assert line["message"] == "analysis failed for AAPL"
    assert "quote feed down" in line["exception"]
