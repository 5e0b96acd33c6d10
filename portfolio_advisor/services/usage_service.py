"""Usage event tracking with a local counter fallback."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Any

from portfolio_advisor.providers.flexprice import FlexpriceClient
from portfolio_advisor.providers.http import ProviderError
from portfolio_advisor.services.base import ServiceContext

LOGGER = logging.getLogger(__name__)
ANALYSIS_EVENTS = {"portfolio_analysis"}
ADVICE_EVENTS = {"advice_generation", "portfolio_analysis"}
UNKNOWN_EVENT = "unknown"


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class UsageService:
    """Forwards usage events to Flexprice when configured.

    Local counters are always updated so a usable summary exists whenever the
    sink is missing or failing.
    """

    def __init__(self, ctx: ServiceContext) -> None:
        self.ctx = ctx
        self._lock = threading.Lock()
        self._portfolios_analyzed = 0
        self._advice_generated = 0
        self._last_analysis: str | None = None

    def _flexprice(self) -> FlexpriceClient | None:
        client = self.ctx.get_provider("flexprice")
        return client if isinstance(client, FlexpriceClient) else None

    def _record_locally(self, event: str) -> None:
        with self._lock:
            if event in ANALYSIS_EVENTS:
                self._portfolios_analyzed += 1
                self._last_analysis = _utc_now()
            if event in ADVICE_EVENTS:
                self._advice_generated += 1

    def local_usage(self) -> dict[str, Any]:
        with self._lock:
            return {
                "portfoliosAnalyzed": self._portfolios_analyzed,
                "adviceGenerated": self._advice_generated,
                "lastAnalysis": self._last_analysis or _utc_now(),
            }

    def track(self, event: str, metadata: dict[str, Any] | None = None, user_id: str | None = None) -> dict[str, Any]:
        self._record_locally(event)
        client = self._flexprice()
        if client is None:
            return {"success": True, "usage": self.local_usage(), "source": "local"}
        try:
            client.track_event(event, metadata or {}, user_id)
            stats = client.get_usage_stats(user_id)
        except ProviderError as error:
            LOGGER.warning("usage sink failed: provider=%s code=%s status=%s", error.provider, error.code, error.status)
            stats = None
        except Exception:
            LOGGER.exception("usage sink unexpected failure")
            stats = None
        if stats:
            return {"success": True, "usage": stats, "source": "flexprice"}
        return {"success": True, "usage": self.local_usage(), "source": "local"}
