# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Audit trail of authorization decisions.
"""

import asyncio
import json
import logging
import uuid
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class DecisionEvent:
    """One authorization decision"""
    outcome: str
    principal_id: Optional[str] = None
    method: Optional[str] = None
    path: Optional[str] = None
    resource: Optional[str] = None
    action: Optional[str] = None
    resource_id: Optional[str] = None
    reason: Optional[str] = None
    duration_ms: Optional[float] = None
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'event_id': self.event_id,
            'timestamp': self.timestamp.isoformat(),
            'outcome': self.outcome,
            'principal_id': self.principal_id,
            'method': self.method,
            'path': self.path,
            'resource': self.resource,
            'action': self.action,
            'resource_id': self.resource_id,
            'reason': self.reason,
            'duration_ms': self.duration_ms,
            'details': self.details,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DecisionEvent':
        """Create from dictionary representation."""
        return cls(
            outcome=data['outcome'],
            principal_id=data.get('principal_id'),
            method=data.get('method'),
            path=data.get('path'),
            resource=data.get('resource'),
            action=data.get('action'),
            resource_id=data.get('resource_id'),
            reason=data.get('reason'),
            duration_ms=data.get('duration_ms'),
            event_id=data['event_id'],
            timestamp=datetime.fromisoformat(data['timestamp']),
            details=data.get('details') or {},
        )

    def matches(self, principal_id: Optional[str] = None, outcome: Optional[str] = None,
                start_time: Optional[datetime] = None,
                end_time: Optional[datetime] = None) -> bool:
        if principal_id and self.principal_id != principal_id:
            return False
        if outcome and self.outcome != outcome:
            return False
        if start_time and self.timestamp < start_time:
            return False
        if end_time and self.timestamp > end_time:
            return False
        return True


class AuditLogger(ABC):
    """Abstract base class for decision audit logging"""

    @abstractmethod
    async def log(self, event: DecisionEvent) -> None:
        """Log a decision event"""
        pass

    @abstractmethod
    async def get_events(
        self,
        principal_id: Optional[str] = None,
        outcome: Optional[str] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> List[DecisionEvent]:
        """Retrieve decision events with optional filtering"""
        pass

    async def close(self) -> None:
        """Close the audit logger and release resources"""
        pass


class MemoryAuditLogger(AuditLogger):
    """In-memory audit logger for development and testing"""

    def __init__(self, max_entries: int = 1000):
        self.max_entries = max_entries
        self.events: deque = deque(maxlen=max_entries)
        self._lock = asyncio.Lock()

    async def log(self, event: DecisionEvent) -> None:
        async with self._lock:
            self.events.append(event)

    async def get_events(
        self,
        principal_id: Optional[str] = None,
        outcome: Optional[str] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> List[DecisionEvent]:
        async with self._lock:
            return [
                event for event in self.events
                if event.matches(principal_id, outcome, start_time, end_time)
            ]


class FileAuditLogger(AuditLogger):
    """Audit logger writing one JSON document per line"""

    def __init__(self, file_path: str):
        self.file_path = file_path
        self._lock = asyncio.Lock()

    async def log(self, event: DecisionEvent) -> None:
        async with self._lock:
            try:
                with open(self.file_path, "a", encoding="utf-8") as f:
                    f.write(json.dumps(event.to_dict()) + "\n")
            except OSError as e:
                logger.error(f"Failed to write audit log {self.file_path}: {e}")
                raise

    async def get_events(
        self,
        principal_id: Optional[str] = None,
        outcome: Optional[str] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> List[DecisionEvent]:
        events = []

        try:
            with open(self.file_path, "r", encoding="utf-8") as f:
                for line_number, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        event = DecisionEvent.from_dict(json.loads(line))
                    except (json.JSONDecodeError, KeyError, ValueError) as e:
                        logger.warning(f"Skipping malformed audit line {line_number}: {e}")
                        continue
                    if event.matches(principal_id, outcome, start_time, end_time):
                        events.append(event)
        except FileNotFoundError:
            return []

        return events


def create_audit_logger(logger_type: str = "memory", **kwargs) -> AuditLogger:
    """
    Factory function to create audit loggers

    Args:
        logger_type: Type of logger ("memory" or "file")
        **kwargs: Additional arguments for the logger

    Returns:
        AuditLogger instance
    """
    if logger_type == "memory":
        return MemoryAuditLogger(kwargs.get("max_entries", 1000))
    elif logger_type == "file":
        return FileAuditLogger(kwargs.get("file_path", "audit.log"))
    else:
        raise ValueError(f"Unknown logger type: {logger_type}")
