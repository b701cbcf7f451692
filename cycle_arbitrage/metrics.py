"""
Prometheus metrics for the cycle arbitrage scanner and executor.

Exposes scan, quote, opportunity and execution counters, optionally served
over HTTP by a small aiohttp application.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Optional, Union

from aiohttp import web
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

from .constants import METRICS_CONSTANTS

logger = logging.getLogger(__name__)

PREFIX = METRICS_CONSTANTS["METRIC_PREFIX"]


class ArbitrageMetrics:
    """
    Metrics collection for one bot instance.

    Provides Prometheus-compatible metrics for:
    - Scans, routes tried and quote outcomes
    - Opportunities found
    - Execution outcomes, skip reasons and estimated profit
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """Initialize metrics with a custom registry or a fresh one"""
        self.registry = registry or CollectorRegistry()
        self._initialize_metrics()

        self._app = None
        self._runner = None
        self._site = None

    def _initialize_metrics(self):
        """Initialize all Prometheus metrics"""

        # === SCAN METRICS ===
        self.scans_total = Counter(
            f"{PREFIX}_scans_total",
            "Total number of scans started",
            registry=self.registry,
        )

        self.routes_tried_total = Counter(
            f"{PREFIX}_routes_tried_total",
            "Total candidate routes quoted",
            registry=self.registry,
        )

        self.quotes_total = Counter(
            f"{PREFIX}_quotes_total",
            "Total quote calls by result",
            ["result"],
            registry=self.registry,
        )

        self.opportunities_found_total = Counter(
            f"{PREFIX}_opportunities_found_total",
            "Total fully quoted cycles",
            registry=self.registry,
        )

        # === EXECUTION METRICS ===
        self.executions_total = Counter(
            f"{PREFIX}_executions_total",
            "Total execution attempts by outcome",
            ["outcome"],
            registry=self.registry,
        )

        self.execution_skips_total = Counter(
            f"{PREFIX}_execution_skips_total",
            "Total execution attempts skipped by a guard",
            ["reason"],
            registry=self.registry,
        )

        self.estimated_profit_pct = Histogram(
            f"{PREFIX}_estimated_profit_pct",
            "Estimated (quote based) profit percent per completed execution",
            buckets=METRICS_CONSTANTS["HISTOGRAM_BUCKETS_PROFIT_PCT"],
            registry=self.registry,
        )

    # === RECORDING ===

    def record_scan(self):
        self.scans_total.inc()

    def record_route(self):
        self.routes_tried_total.inc()

    def record_quote(self, ok: bool):
        self.quotes_total.labels(result="ok" if ok else "error").inc()

    def record_opportunity(self):
        self.opportunities_found_total.inc()

    def record_execution(
        self, outcome: str, estimated_profit_pct: Optional[Union[Decimal, float]] = None
    ):
        """Record a finished execution attempt ("success" or "failed")."""
        self.executions_total.labels(outcome=outcome).inc()
        if estimated_profit_pct is not None:
            self.estimated_profit_pct.observe(float(estimated_profit_pct))

    def record_skip(self, reason: str):
        self.execution_skips_total.labels(reason=reason).inc()

    # === SERVER MANAGEMENT ===

    async def start_server(
        self, port: int = 8000, host: str = "0.0.0.0", path: str = "/metrics"
    ) -> bool:
        """Start Prometheus metrics HTTP server"""
        try:
            self._app = web.Application()
            self._app.router.add_get(path, self._metrics_handler)
            self._app.router.add_get("/health", self._health_handler)

            self._runner = web.AppRunner(self._app)
            await self._runner.setup()

            self._site = web.TCPSite(self._runner, host, port)
            await self._site.start()

            logger.info(f"Metrics server started on http://{host}:{port}{path}")
            return True

        except OSError as e:
            logger.error(f"Failed to start metrics server: {e}")
            return False

    async def stop_server(self):
        """Stop the metrics server"""
        if self._site:
            await self._site.stop()
        if self._runner:
            await self._runner.cleanup()
        self._site = None
        self._runner = None
        logger.info("Metrics server stopped")

    async def _metrics_handler(self, request):
        metrics_output = generate_latest(self.registry)
        # aiohttp rejects a content type that carries a charset
        content_type = CONTENT_TYPE_LATEST.split(";")[0]
        return web.Response(text=metrics_output.decode("utf-8"), content_type=content_type)

    async def _health_handler(self, request):
        return web.json_response({"status": "healthy", "service": f"{PREFIX}_metrics"})

    def get_metrics_summary(self) -> Dict[str, Any]:
        """Current counter values, for logs and tests"""
        return {
            "scans": self.registry.get_sample_value(f"{PREFIX}_scans_total") or 0.0,
            "routes_tried": self.registry.get_sample_value(f"{PREFIX}_routes_tried_total")
            or 0.0,
            "opportunities": self.registry.get_sample_value(
                f"{PREFIX}_opportunities_found_total"
            )
            or 0.0,
        }
