# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Per-tier fixed-window rate limiting.

Each principal gets one counter per window (``floor(now / window)``). Free
and premium tiers are counted against their limits; enterprise (or any tier
configured with no limit) is never counted. Anonymous calls always pass.
Stale windows are purged probabilistically; purging is housekeeping only
and never touches the active window.
"""

import logging
import random
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Union

from ..core.config import RateLimitConfig
from ..core.types import SubscriptionTier
from ..errors import ConfigurationError, RateLimitExceededError
from .store import CounterStore, MemoryCounterStore, RateWindow

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SECONDS = 3600.0

DEFAULT_TIER_LIMITS: Dict[SubscriptionTier, Optional[int]] = {
    SubscriptionTier.FREE: 100,
    SubscriptionTier.PREMIUM: 1000,
    SubscriptionTier.ENTERPRISE: None,
}


@dataclass(frozen=True)
class RateLimitQuota:
    """Information about an admitted request's quota."""

    allowed: bool
    limit: Optional[int]
    remaining: Optional[int]
    reset_time: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "allowed": self.allowed,
            "limit": self.limit,
            "remaining": self.remaining,
            "reset_time": self.reset_time.isoformat() if self.reset_time else None,
        }

    def to_headers(self) -> Dict[str, str]:
        """X-RateLimit-* response headers; empty for unbounded quotas."""
        if self.limit is None:
            return {}
        headers = {
            'X-RateLimit-Limit': str(self.limit),
            'X-RateLimit-Remaining': str(self.remaining),
        }
        if self.reset_time:
            headers['X-RateLimit-Reset'] = str(int(self.reset_time.timestamp()))
        return headers


UNBOUNDED = RateLimitQuota(allowed=True, limit=None, remaining=None)


class TierRateLimiter:
    """Fixed-window limiter keyed by principal id with per-tier limits."""

    def __init__(self,
                 store: Optional[CounterStore] = None,
                 window: float = DEFAULT_WINDOW_SECONDS,
                 tier_limits: Optional[Mapping[Union[str, SubscriptionTier], Optional[int]]] = None,
                 purge_probability: float = 0.01,
                 rng: Optional[random.Random] = None):
        if window <= 0:
            raise ConfigurationError("Window must be positive", key="rate_limit.window")

        self.store = store or MemoryCounterStore()
        self.window = float(window)
        self.tier_limits: Dict[SubscriptionTier, Optional[int]] = dict(DEFAULT_TIER_LIMITS)
        for tier, limit in (tier_limits or {}).items():
            self.tier_limits[SubscriptionTier(tier)] = limit
        self.purge_probability = purge_probability
        self._rng = rng or random.Random()

    @classmethod
    def from_config(cls, config: RateLimitConfig,
                    store: Optional[CounterStore] = None) -> 'TierRateLimiter':
        """Build a limiter (and, unless given, its store) from configuration."""
        if store is None:
            if config.backend == "redis":
                from .redis_store import RedisCounterStore
                store = RedisCounterStore(redis_url=config.redis_url,
                                          key_prefix=config.redis_key_prefix)
            else:
                store = MemoryCounterStore()

        return cls(
            store=store,
            window=config.window.total_seconds(),
            tier_limits=config.tier_limits,
            purge_probability=config.purge_probability,
        )

    def window_index(self, now: float) -> int:
        """Index of the fixed window containing ``now``."""
        return int(now // self.window)

    def limit_for(self, tier: SubscriptionTier) -> Optional[int]:
        """Request limit per window for a tier; None means unbounded."""
        if tier in self.tier_limits:
            return self.tier_limits[tier]
        return self.tier_limits[SubscriptionTier.FREE]

    async def admit(self, principal_id: Optional[str], tier: SubscriptionTier,
                    now: Optional[float] = None) -> RateLimitQuota:
        """
        Count one request against the principal's current window.

        Raises:
            RateLimitExceededError: if the window's quota is used up; the
                counter is left unchanged
        """
        if not principal_id:
            return UNBOUNDED

        limit = self.limit_for(tier)
        if limit is None:
            return UNBOUNDED

        now = time.time() if now is None else now
        index = self.window_index(now)
        window_end = (index + 1) * self.window
        reset_time = datetime.fromtimestamp(window_end, tz=timezone.utc)

        admitted, count = await self.store.increment_if_below(
            principal_id, index, limit, ttl=int(self.window * 2))

        await self._maybe_purge(index)

        if not admitted:
            logger.warning(f"Rate limit exceeded for {principal_id} ({tier}): {count}/{limit}")
            raise RateLimitExceededError(tier.value, limit, retry_after=window_end - now)

        logger.debug(f"Rate limit: {count}/{limit} for {principal_id} ({tier})")
        return RateLimitQuota(
            allowed=True,
            limit=limit,
            remaining=limit - count,
            reset_time=reset_time,
        )

    async def current_window(self, principal_id: str,
                             now: Optional[float] = None) -> RateWindow:
        """Snapshot of the principal's active window."""
        now = time.time() if now is None else now
        index = self.window_index(now)
        count = await self.store.get(principal_id, index)
        return RateWindow(
            principal_id=principal_id,
            window_index=index,
            window_start=index * self.window,
            count=count,
        )

    async def _maybe_purge(self, current_index: int) -> None:
        if self.purge_probability <= 0 or self._rng.random() >= self.purge_probability:
            return
        try:
            await self.store.purge(current_index)
        except Exception as e:
            # Housekeeping only; the active window was already counted
            logger.warning(f"Rate window purge failed: {e}", exc_info=True)

    async def close(self) -> None:
        """Close the limiter and its store"""
        await self.store.close()
