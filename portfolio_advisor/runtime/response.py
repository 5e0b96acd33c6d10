"""Response shaping helpers for MCP tools."""

from __future__ import annotations

import json
import time
from dataclasses import asdict, is_dataclass
from typing import Any

from portfolio_advisor.services.base import ServiceResult

DISCLAIMER = "Data is for informational purposes only and does not constitute financial advice."


def _convert_data(data: Any) -> Any:
    if hasattr(data, "to_dict"):
        return data.to_dict()
    if is_dataclass(data) and not isinstance(data, type):
        return asdict(data)
    if isinstance(data, (list, tuple)):
        return [_convert_data(item) for item in data]
    if isinstance(data, dict):
        return {key: _convert_data(value) for key, value in data.items()}
    return data


def payload_response(payload: dict[str, Any]) -> str:
    body = dict(payload)
    body.setdefault("disclaimer", DISCLAIMER)
    return json.dumps(body, ensure_ascii=True)


def success_response(result: ServiceResult[Any]) -> str:
    ts = result.fetched_at or time.time()
    payload: dict[str, Any] = {
        "data": _convert_data(result.data),
        "data_freshness": {"timestamp": int(ts), "age_seconds": round(max(0.0, time.time() - ts), 3)},
        "data_provider": result.data_provider or "unknown",
        "dataSource": "demo" if result.is_demo else "live",
    }
    if result.source:
        payload["source"] = result.source
    if result.warning:
        payload["warning"] = result.warning
    return payload_response(payload)


def error_response(code: str, message: str) -> str:
    return json.dumps(
        {
            "error": True,
            "code": code,
            "message": message,
            "timestamp": int(time.time()),
        },
        ensure_ascii=True,
    )
