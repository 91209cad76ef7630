# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Prometheus metrics for authorization decisions and rate limiting.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

logger = logging.getLogger(__name__)


@dataclass
class MetricConfig:
    """Configuration for metrics collection."""

    enabled: bool = True
    namespace: str = "contentgate"


class MetricsCollector:
    """Decision metrics on a private registry."""

    content_type = CONTENT_TYPE_LATEST

    def __init__(self, config: Optional[MetricConfig] = None,
                 registry: Optional[CollectorRegistry] = None):
        self.config = config or MetricConfig()
        self.registry = registry or CollectorRegistry()
        ns = self.config.namespace

        self.decisions = Counter(
            f'{ns}_authorization_decisions_total',
            'Total number of authorization decisions',
            ['outcome', 'reason'],
            registry=self.registry
        )

        self.decision_latency = Histogram(
            f'{ns}_authorization_duration_seconds',
            'Authorization pipeline duration in seconds',
            ['outcome'],
            buckets=[0.0005, 0.001, 0.002, 0.005, 0.01, 0.02, 0.05, 0.1, 0.5, 1.0],
            registry=self.registry
        )

        self.rate_limited = Counter(
            f'{ns}_rate_limit_rejections_total',
            'Total number of requests rejected by the rate limiter',
            ['tier'],
            registry=self.registry
        )

        self.provider_failures = Counter(
            f'{ns}_attribute_provider_failures_total',
            'Total number of failed resource attribute lookups',
            registry=self.registry
        )

    def record_decision(self, outcome: str, reason: Optional[str],
                        duration_seconds: float) -> None:
        """Record one pipeline outcome."""
        if not self.config.enabled:
            return
        self.decisions.labels(outcome=outcome, reason=reason or "").inc()
        self.decision_latency.labels(outcome=outcome).observe(duration_seconds)

    def record_rate_limited(self, tier: str) -> None:
        if self.config.enabled:
            self.rate_limited.labels(tier=tier).inc()

    def record_provider_failure(self) -> None:
        if self.config.enabled:
            self.provider_failures.inc()

    def sample(self, name: str, **labels: str) -> float:
        """Current value of a sample, 0.0 if it was never recorded."""
        value = self.registry.get_sample_value(name, labels or None)
        return value if value is not None else 0.0

    def export(self) -> bytes:
        """Metrics in the Prometheus text exposition format."""
        return generate_latest(self.registry)
