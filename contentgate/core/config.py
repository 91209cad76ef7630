# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Configuration module for the contentgate authorization gateway.
"""

import os
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Dict, List, Mapping, Optional

from ..errors import ConfigurationError
from ..util.config import (
    ENV_PREFIX,
    get_bool_config,
    get_config_value,
    get_float_config,
    get_list_config,
    load_config_file,
    parse_duration,
)
from .types import SubscriptionTier


def _default_tier_limits() -> Dict[str, Optional[int]]:
    # None means unbounded
    return {
        SubscriptionTier.FREE.value: 100,
        SubscriptionTier.PREMIUM.value: 1000,
        SubscriptionTier.ENTERPRISE.value: None,
    }


@dataclass
class TokenConfig:
    """Credential verification settings"""
    secret_key: str = ""
    algorithms: List[str] = field(default_factory=lambda: ["HS256"])
    issuer: Optional[str] = None
    audience: Optional[str] = None
    require_expiry: bool = True
    leeway: timedelta = field(default_factory=timedelta)

    def __post_init__(self):
        if not self.secret_key:
            self.secret_key = os.getenv(f"{ENV_PREFIX}JWT_SECRET", "")


@dataclass
class RateLimitConfig:
    """Fixed-window quota settings"""
    window: timedelta = field(default_factory=lambda: timedelta(hours=1))
    tier_limits: Dict[str, Optional[int]] = field(default_factory=_default_tier_limits)
    purge_probability: float = 0.01
    backend: str = "memory"
    redis_url: Optional[str] = None
    redis_key_prefix: str = "contentgate:rate:"


@dataclass
class GatewayConfig:
    """Configuration for the authorization gateway"""
    token: TokenConfig = field(default_factory=TokenConfig)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    provider_timeout: timedelta = field(default_factory=lambda: timedelta(seconds=5))
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "GatewayConfig":
        """Create configuration from CONTENTGATE_* environment variables"""
        token = TokenConfig(
            secret_key=get_config_value("jwt_secret", ""),
            algorithms=get_list_config("jwt_algorithms", ["HS256"]),
            issuer=get_config_value("jwt_issuer"),
            audience=get_config_value("jwt_audience"),
            require_expiry=get_bool_config("jwt_require_expiry", True),
            leeway=parse_duration(get_config_value("jwt_leeway", "0")),
        )

        tier_limits = _default_tier_limits()
        for tier in SubscriptionTier:
            raw = get_config_value(f"rate_limit_{tier.value}")
            if raw is not None:
                tier_limits[tier.value] = _parse_limit(raw, f"rate_limit_{tier.value}")

        rate_limit = RateLimitConfig(
            window=parse_duration(get_config_value("rate_limit_window", "1h")),
            tier_limits=tier_limits,
            purge_probability=get_float_config("rate_limit_purge_probability", 0.01),
            backend=get_config_value("rate_limit_backend", "memory"),
            redis_url=get_config_value("redis_url"),
            redis_key_prefix=get_config_value("redis_key_prefix", "contentgate:rate:"),
        )

        return cls(
            token=token,
            rate_limit=rate_limit,
            provider_timeout=parse_duration(get_config_value("provider_timeout", "5s")),
            log_level=get_config_value("log_level", "INFO"),
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GatewayConfig":
        """Create configuration from a nested mapping (as loaded from a file)"""
        token_data = dict(data.get("token") or {})
        rate_data = dict(data.get("rate_limit") or {})

        algorithms = token_data.get("algorithms", ["HS256"])
        if isinstance(algorithms, str):
            algorithms = [a.strip() for a in algorithms.split(",") if a.strip()]

        token = TokenConfig(
            secret_key=token_data.get("secret_key", ""),
            algorithms=list(algorithms),
            issuer=token_data.get("issuer"),
            audience=token_data.get("audience"),
            require_expiry=bool(token_data.get("require_expiry", True)),
            leeway=parse_duration(token_data.get("leeway", 0)),
        )

        tier_limits = _default_tier_limits()
        for tier, raw in (rate_data.get("tier_limits") or {}).items():
            tier_limits[str(tier)] = _parse_limit(raw, f"rate_limit.tier_limits.{tier}")

        rate_limit = RateLimitConfig(
            window=parse_duration(rate_data.get("window", "1h")),
            tier_limits=tier_limits,
            purge_probability=float(rate_data.get("purge_probability", 0.01)),
            backend=rate_data.get("backend", "memory"),
            redis_url=rate_data.get("redis_url"),
            redis_key_prefix=rate_data.get("redis_key_prefix", "contentgate:rate:"),
        )

        return cls(
            token=token,
            rate_limit=rate_limit,
            provider_timeout=parse_duration(data.get("provider_timeout", "5s")),
            log_level=data.get("log_level", "INFO"),
        )

    @classmethod
    def from_file(cls, file_path: str) -> "GatewayConfig":
        """Load configuration from a JSON or YAML file"""
        return cls.from_dict(load_config_file(file_path))

    def validate(self) -> bool:
        """Validate the configuration"""
        if not self.token.secret_key:
            raise ConfigurationError("JWT secret is required", key="token.secret_key")
        if not self.token.algorithms:
            raise ConfigurationError("At least one JWT algorithm is required",
                                     key="token.algorithms")
        if self.rate_limit.window.total_seconds() <= 0:
            raise ConfigurationError("Rate limit window must be positive",
                                     key="rate_limit.window")
        if not 0.0 <= self.rate_limit.purge_probability <= 1.0:
            raise ConfigurationError("Purge probability must be between 0 and 1",
                                     key="rate_limit.purge_probability")
        for tier, limit in self.rate_limit.tier_limits.items():
            if limit is not None and limit < 0:
                raise ConfigurationError(f"Limit for tier {tier} must not be negative",
                                         key=f"rate_limit.tier_limits.{tier}")
        if self.rate_limit.backend not in ("memory", "redis"):
            raise ConfigurationError(f"Unknown rate limit backend: {self.rate_limit.backend}",
                                     key="rate_limit.backend")
        if self.provider_timeout.total_seconds() <= 0:
            raise ConfigurationError("Provider timeout must be positive",
                                     key="provider_timeout")
        return True


def _parse_limit(raw: Any, key: str) -> Optional[int]:
    """Parse a tier limit; 'unlimited', 'none' or empty mean unbounded."""
    if raw is None:
        return None
    if isinstance(raw, str):
        if raw.strip().lower() in ("", "none", "unlimited", "inf"):
            return None
        raw = raw.strip()
    try:
        return int(raw)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid rate limit: {raw!r}", key=key) from e
