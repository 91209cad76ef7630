"""
Tests for audit logging and metrics.
"""

from datetime import datetime, timedelta, timezone

import pytest

from contentgate.audit import (
    DecisionEvent,
    FileAuditLogger,
    MemoryAuditLogger,
    create_audit_logger,
)
from contentgate.metrics import MetricConfig, MetricsCollector


class TestMemoryAuditLogger:
    """Test the in-memory audit logger."""

    @pytest.mark.asyncio
    async def test_filtering(self):
        audit_logger = MemoryAuditLogger()
        await audit_logger.log(DecisionEvent(outcome="allow", principal_id="u1"))
        await audit_logger.log(DecisionEvent(outcome="deny", principal_id="u1", reason="NotOwner"))
        await audit_logger.log(DecisionEvent(outcome="deny", principal_id="u2", reason="RoleDenied"))

        assert len(await audit_logger.get_events()) == 3
        assert len(await audit_logger.get_events(principal_id="u1")) == 2
        denials = await audit_logger.get_events(principal_id="u1", outcome="deny")
        assert [e.reason for e in denials] == ["NotOwner"]

    @pytest.mark.asyncio
    async def test_time_window(self):
        audit_logger = MemoryAuditLogger()
        old = datetime.now(timezone.utc) - timedelta(days=1)
        await audit_logger.log(DecisionEvent(outcome="allow", timestamp=old))
        await audit_logger.log(DecisionEvent(outcome="allow"))

        recent = await audit_logger.get_events(start_time=datetime.now(timezone.utc) - timedelta(hours=1))
        assert len(recent) == 1

    @pytest.mark.asyncio
    async def test_bounded(self):
        audit_logger = MemoryAuditLogger(max_entries=2)
        for i in range(3):
            await audit_logger.log(DecisionEvent(outcome="allow", principal_id=f"u{i}"))
        assert [e.principal_id for e in await audit_logger.get_events()] == ["u1", "u2"]


class TestFileAuditLogger:
    """Test the JSON lines audit logger."""

    @pytest.mark.asyncio
    async def test_write_and_read(self, tmp_path):
        audit_logger = FileAuditLogger(str(tmp_path / "audit.log"))
        event = DecisionEvent(outcome="deny", principal_id="u1", method="GET",
                              path="/articles/a1", reason="DraftNotVisible", duration_ms=1.5)
        await audit_logger.log(event)

        events = await audit_logger.get_events(outcome="deny")

        assert len(events) == 1
        assert events[0].event_id == event.event_id
        assert events[0].timestamp == event.timestamp
        assert events[0].reason == "DraftNotVisible"

    @pytest.mark.asyncio
    async def test_malformed_lines_skipped(self, tmp_path):
        path = tmp_path / "audit.log"
        audit_logger = FileAuditLogger(str(path))
        await audit_logger.log(DecisionEvent(outcome="allow"))
        with open(path, "a", encoding="utf-8") as f:
            f.write("{not json\n")

        assert len(await audit_logger.get_events()) == 1

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        audit_logger = FileAuditLogger(str(tmp_path / "none.log"))
        assert await audit_logger.get_events() == []

    def test_factory(self, tmp_path):
        assert isinstance(create_audit_logger("memory"), MemoryAuditLogger)
        assert isinstance(create_audit_logger("file", file_path=str(tmp_path / "a.log")), FileAuditLogger)
        with pytest.raises(ValueError):
            create_audit_logger("kafka")


class TestMetricsCollector:
    """Test Prometheus metrics."""

    def test_decisions(self):
        metrics = MetricsCollector()
        metrics.record_decision("deny", "NotOwner", 0.002)
        metrics.record_decision("deny", "NotOwner", 0.003)
        metrics.record_decision("allow", None, 0.001)

        name = 'contentgate_authorization_decisions_total'
        assert metrics.sample(name, outcome="deny", reason="NotOwner") == 2.0
        assert metrics.sample(name, outcome="allow", reason="") == 1.0
        assert metrics.sample('contentgate_authorization_duration_seconds_count', outcome="deny") == 2.0

    def test_disabled(self):
        metrics = MetricsCollector(MetricConfig(enabled=False))
        metrics.record_decision("allow", None, 0.001)
        metrics.record_rate_limited("free")
        assert metrics.sample('contentgate_rate_limit_rejections_total', tier="free") == 0.0

    def test_private_registries(self):
        first = MetricsCollector()
        second = MetricsCollector()
        first.record_provider_failure()
        assert second.sample('contentgate_attribute_provider_failures_total') == 0.0

    def test_export(self):
        metrics = MetricsCollector(MetricConfig(namespace="blog"))
        metrics.record_rate_limited("premium")
        text = metrics.export().decode("utf-8")
        assert 'blog_rate_limit_rejections_total{tier="premium"} 1.0' in text
