"""Request metrics and structured per-request event lines."""

from __future__ import annotations

import json
import threading
import time
from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass
class HealthSnapshot:
    uptime_seconds: float
    total_requests: int
    error_rate: float
    avg_latency_ms: float
    rate_limit_hits: int
    requests_by_route: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["uptime_seconds"] = round(self.uptime_seconds, 3)
        payload["avg_latency_ms"] = round(self.avg_latency_ms, 3)
        return payload


class ServerMetrics:
    def __init__(self, started_at: float | None = None) -> None:
        self.started_at = started_at or time.time()
        self._lock = threading.Lock()
        self.total_requests = 0
        self.error_requests = 0
        self.total_latency_ms = 0.0
        self.rate_limit_hits: dict[str, int] = {}
        self.route_counts: dict[str, int] = {}

    def record(self, latency_ms: float, success: bool, route: str | None = None) -> None:
        with self._lock:
            self.total_requests += 1
            if not success:
                self.error_requests += 1
            self.total_latency_ms += max(0.0, latency_ms)
            if route:
                self.route_counts[route] = self.route_counts.get(route, 0) + 1

    def record_rate_limit_hit(self, client_id: str) -> None:
        with self._lock:
            self.rate_limit_hits[client_id] = self.rate_limit_hits.get(client_id, 0) + 1

    def snapshot(self) -> HealthSnapshot:
        with self._lock:
            requests = self.total_requests
            avg_latency = (self.total_latency_ms / requests) if requests else 0.0
            error_rate = (self.error_requests / requests) if requests else 0.0
            hits = sum(self.rate_limit_hits.values())
            by_route = dict(self.route_counts)
        return HealthSnapshot(
            uptime_seconds=max(0.0, time.time() - self.started_at),
            total_requests=requests,
            error_rate=error_rate,
            avg_latency_ms=avg_latency,
            rate_limit_hits=hits,
            requests_by_route=by_route,
        )


def log_request_event(
    route: str,
    latency_ms: float,
    success: bool,
    client_id: str,
    status: int | None = None,
    warning: str | None = None,
) -> None:
    payload: dict[str, Any] = {
        "route": route,
        "status": status,
        "latency_ms": round(latency_ms, 3),
        "success": success,
        "client_id": client_id,
        "timestamp": int(time.time()),
    }
    if warning:
        payload["warning"] = warning
    print(json.dumps(payload, ensure_ascii=True))
