# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Per-tier fixed-window rate limiting over pluggable counter stores.
"""

from .store import (
    CounterStore,
    MemoryCounterStore,
    RateWindow,
)

from .redis_store import RedisCounterStore

from .limiter import (
    TierRateLimiter,
    RateLimitQuota,
    UNBOUNDED,
    DEFAULT_TIER_LIMITS,
    DEFAULT_WINDOW_SECONDS,
)

__all__ = [
    'CounterStore',
    'MemoryCounterStore',
    'RateWindow',
    'RedisCounterStore',
    'TierRateLimiter',
    'RateLimitQuota',
    'UNBOUNDED',
    'DEFAULT_TIER_LIMITS',
    'DEFAULT_WINDOW_SECONDS',
]
